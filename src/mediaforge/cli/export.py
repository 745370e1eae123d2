"""CLI export-stream command for mediaforge."""

import logging
import sys
from pathlib import Path

import click

from mediaforge.cli.exit_codes import ExitCode
from mediaforge.cli.inspect import get_cli_config
from mediaforge.exceptions import MediaForgeError, ProcessLaunchError
from mediaforge.executor.command import STREAM_TYPE_SPECIFIERS
from mediaforge.executor.conversion import MediaConversionService

logger = logging.getLogger(__name__)


@click.command("export-stream")
@click.argument("input_file", type=click.Path(path_type=Path))
@click.argument("output_file", type=click.Path(path_type=Path))
@click.option(
    "--index",
    "-i",
    "stream_index",
    type=click.IntRange(min=0),
    required=True,
    help="Stream index (within --type when given).",
)
@click.option(
    "--type",
    "-t",
    "stream_type",
    type=click.Choice(sorted(STREAM_TYPE_SPECIFIERS)),
    default=None,
    help="Count --index among streams of this type only.",
)
@click.pass_context
def export_stream_command(
    ctx: click.Context,
    input_file: Path,
    output_file: Path,
    stream_index: int,
    stream_type: str | None,
) -> None:
    """Copy one stream of INPUT_FILE into OUTPUT_FILE without re-encoding."""
    if not input_file.exists():
        click.echo(f"Error: File not found: {input_file}", err=True)
        sys.exit(ExitCode.TARGET_NOT_FOUND)

    service = MediaConversionService.from_config(get_cli_config(ctx))
    try:
        service.export_stream(input_file, output_file, stream_index, stream_type)
    except ProcessLaunchError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.TOOL_NOT_AVAILABLE)
    except MediaForgeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.TOOL_FAILED)

    click.echo(f"Exported stream {stream_index} of {input_file} -> {output_file}")
