"""CLI command for inspecting how a program asset would be rewritten."""

import click

from unityfilter.header import match_header
from unityfilter.models import InspectReport
from unityfilter.record import RECORD_LIMIT, load_prefix, parse_record


@click.command('inspect')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--json', 'json_output', is_flag=True, help='Output in JSON format')
def inspect_command(path: str, json_output: bool):
    """Parse a record and print its fields and rewrite decision.

    The file is never modified.

    \b
    Examples:
        unityfilter inspect Assets/Udon/Door.asset
        unityfilter inspect Assets/Udon/Door.asset --json
    """
    with open(path, 'rb') as f:
        buf, exhausted = load_prefix(f, RECORD_LIMIT)

    record = parse_record(buf, exhausted)
    report = InspectReport.from_record(path, record, is_yaml=match_header(buf) is not None)

    if json_output:
        click.echo(report.model_dump_json(indent=2))
        return

    click.echo(f'Path: {report.path}')
    click.echo(f'YAML: {"yes" if report.is_yaml else "no"}')
    click.echo(f'Loaded: {report.bytes_loaded} bytes{" (truncated)" if report.truncated else ""}')
    click.echo(f'm_Script guid: {report.script_guid or "-"}')
    click.echo(f'm_Name: {report.object_name or "-"}')
    if report.program_span:
        click.echo(f'serializedUdonProgramAsset: bytes {report.program_span[0]}-{report.program_span[1]}')
    else:
        click.echo('serializedUdonProgramAsset: -')
    if report.source_script:
        source = report.source_script
        click.echo(f'sourceCsScript: fileID={source.file_id} guid={source.guid or "-"} type={source.type or "-"}')
    else:
        click.echo('sourceCsScript: -')
    click.echo(f'Decision: {report.decision}')
    if report.reason:
        click.echo(f'Reason: {report.reason}')
