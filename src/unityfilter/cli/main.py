"""Main CLI entry point with command groups"""

import click

from unityfilter.__version__ import __version__
from unityfilter.cli.config import config_command
from unityfilter.cli.filter import clean_command, smudge_command
from unityfilter.cli.inspect import inspect_command
from unityfilter.utils import get_str_env, setup_logging


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name='unityfilter')
@click.option(
    '--log-level',
    default=None,
    help='Log level for stderr diagnostics (default: $UNITYFILTER_LOG_LEVEL or WARNING)',
)
@click.pass_context
def cli(ctx, log_level: str | None):
    """
    unityfilter - git filter for Unity scenes, prefabs and program assets.

    \b
    Commands:
      unityfilter clean <path>     Normalize (and gzip) stdin for the repository
      unityfilter smudge <path>    Restore (gunzip) stdin for the working tree
      unityfilter inspect <file>   Show how a program asset would be rewritten
      unityfilter config           Show effective settings

    \b
    Git setup:
      git config filter.unity.clean  "unityfilter clean %f"
      git config filter.unity.smudge "unityfilter smudge %f"
      echo "*.unity filter=unity" >> .gitattributes
      echo "*.prefab filter=unity" >> .gitattributes
      echo "*.asset filter=unity" >> .gitattributes
    """
    setup_logging(log_level or get_str_env('UNITYFILTER_LOG_LEVEL', 'WARNING'))
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


cli.add_command(clean_command, name='clean')
cli.add_command(smudge_command, name='smudge')
cli.add_command(inspect_command, name='inspect')
cli.add_command(config_command, name='config')


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
