"""CLI command showing the effective filter settings."""

import json

import click

from unityfilter.models import FilterSettings
from unityfilter.utils import filter_environment


@click.command('config')
@click.option('--json', 'json_output', is_flag=True, help='Output in JSON format')
def config_command(json_output: bool):
    """Show settings resolved from UNITYFILTER_* environment variables."""
    settings = FilterSettings.from_env()

    if json_output:
        click.echo(json.dumps({'settings': settings.model_dump(), 'environment': filter_environment()}, indent=2))
        return

    for name, value in settings.model_dump().items():
        click.echo(f'{name}: {value}')
    environment = filter_environment()
    if environment:
        click.echo('')
        click.echo('Environment:')
        for key, value in sorted(environment.items()):
            click.echo(f'  {key}={value}')
