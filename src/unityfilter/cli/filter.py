"""CLI commands driven by git as clean/smudge filters.

git pipes the file content through stdin/stdout and passes the path
(relative to the repository root) as the only argument.
"""

import sys

import click

from unityfilter.filters import clean, smudge
from unityfilter.models import FilterSettings


def _run(filter_func, path: str, seven_zip: str | None):
    settings = FilterSettings.from_env()
    if seven_zip:
        settings.seven_zip = seven_zip

    stdin = sys.stdin.buffer
    stdout = sys.stdout.buffer
    try:
        filter_func(path, stdin, stdout, settings)
        stdout.flush()
    except RuntimeError as e:
        click.echo(f'❌ {e}', err=True)
        sys.exit(1)


@click.command('clean')
@click.argument('path')
@click.option('--seven-zip', default=None, help='Compressor executable (default: $UNITYFILTER_SEVEN_ZIP or 7z)')
def clean_command(path: str, seven_zip: str | None):
    """Normalize stdin for the repository and write it to stdout.

    \b
    .unity / .prefab   serializedProgramAsset references become {fileID: 0}
    .asset             Udon program assets lose their serialized program,
                       UdonSharp program assets are regenerated as stubs
    .unity             additionally gzipped through 7z
    """
    _run(clean, path, seven_zip)


@click.command('smudge')
@click.argument('path')
@click.option('--seven-zip', default=None, help='Compressor executable (default: $UNITYFILTER_SEVEN_ZIP or 7z)')
def smudge_command(path: str, seven_zip: str | None):
    """Restore stdin for the working tree and write it to stdout.

    Gzipped content of compressed extensions is decompressed through 7z,
    everything else is copied unchanged.
    """
    _run(smudge, path, seven_zip)
