"""CLI inspect and mappings commands for mediaforge."""

import logging
import sys
from pathlib import Path

import click

from mediaforge.cli.exit_codes import ExitCode
from mediaforge.config.models import MediaForgeConfig
from mediaforge.domain.models import MediaFile
from mediaforge.exceptions import UnsupportedChannelLayoutError
from mediaforge.introspector import (
    FFprobeIntrospector,
    format_human,
    format_json,
    format_mappings_human,
    format_mappings_json,
)
from mediaforge.mapping import create_audio_mappings
from mediaforge.mapping.audio import DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)


def get_cli_config(ctx: click.Context) -> MediaForgeConfig:
    """Get the config stored by the main group, or defaults."""
    obj = ctx.find_root().obj or {}
    return obj.get("config") or MediaForgeConfig()


def load_media_file(ctx: click.Context, file_path: Path) -> MediaFile:
    """Probe a file for a command, exiting on failure.

    Args:
        ctx: Click context holding the config.
        file_path: Media file to probe.

    Returns:
        The parsed MediaFile.
    """
    if not file_path.exists():
        click.echo(f"Error: File not found: {file_path}", err=True)
        sys.exit(ExitCode.TARGET_NOT_FOUND)

    tools = get_cli_config(ctx).tools
    introspector = FFprobeIntrospector(tools.ffprobe, timeout=tools.ffprobe_timeout)
    media_file = introspector.get_media_file(file_path)
    if media_file is None:
        click.echo(f"Error: Could not read media file: {file_path}", err=True)
        click.echo("See the log output for the ffprobe error.", err=True)
        sys.exit(ExitCode.PARSE_ERROR)
    return media_file


@click.command("inspect")
@click.argument("file", type=click.Path(path_type=Path))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["human", "json"]),
    default="human",
    help="Output format (default: human)",
)
@click.pass_context
def inspect_command(ctx: click.Context, file: Path, output_format: str) -> None:
    """Inspect a media file and display its streams.

    FILE is the path to the media file to inspect.
    """
    media_file = load_media_file(ctx, file)
    if output_format == "json":
        click.echo(format_json(media_file))
    else:
        click.echo(format_human(media_file))


@click.command("mappings")
@click.argument("file", type=click.Path(path_type=Path))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["human", "json"]),
    default="human",
    help="Output format (default: human)",
)
@click.option(
    "--language",
    "-l",
    default=None,
    help=f"Audio language to keep (default: config or {DEFAULT_LANGUAGE}).",
)
@click.pass_context
def mappings_command(
    ctx: click.Context, file: Path, output_format: str, language: str | None
) -> None:
    """Show the audio track plan for a media file.

    Lists which audio tracks of FILE would be copied and which would be
    re-encoded to AAC.
    """
    media_file = load_media_file(ctx, file)
    language = language or get_cli_config(ctx).conversion.audio_language

    try:
        mappings = create_audio_mappings(media_file, language)
    except UnsupportedChannelLayoutError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.OPERATION_FAILED)

    if output_format == "json":
        click.echo(format_mappings_json(mappings))
    else:
        click.echo(format_mappings_human(mappings))
