"""CLI module for mediaforge."""

import logging
import sys
from pathlib import Path

import click

from mediaforge.cli.exit_codes import ExitCode

logger = logging.getLogger(__name__)


def _configure_logging(
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
):
    """Load the configuration and configure logging from CLI options.

    Args:
        config_path: Optional config file path.
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.

    Returns:
        The effective MediaForgeConfig.
    """
    from mediaforge.config import build_logging_config, get_config
    from mediaforge.logging import configure_logging

    config = get_config(config_path)
    configure_logging(
        build_logging_config(
            config.logging,
            level=log_level,
            file=log_file,
            format="json" if log_json else None,
        )
    )
    logger.debug(
        "mediaforge starting: ffmpeg=%s, ffprobe=%s, log_level=%s",
        config.tools.ffmpeg,
        config.tools.ffprobe,
        log_level or config.logging.level,
    )
    return config


@click.group()
@click.version_option(package_name="mediaforge")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.mediaforge/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """mediaforge - Inspect and transcode media files with ffmpeg."""
    from mediaforge.exceptions import ConfigurationError

    ctx.ensure_object(dict)

    try:
        config = _configure_logging(config_path, log_level, log_file, log_json)
    except (ConfigurationError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    # Preserve a config injected by tests
    ctx.obj.setdefault("config", config)


# Defer import to avoid circular dependency
def _register_commands():
    from mediaforge.cli.convert import (
        args_command,
        convert_auto_command,
        convert_command,
        convert_folder_command,
    )
    from mediaforge.cli.export import export_stream_command
    from mediaforge.cli.inspect import inspect_command, mappings_command

    main.add_command(inspect_command)
    main.add_command(mappings_command)
    main.add_command(args_command)
    main.add_command(convert_command)
    main.add_command(convert_folder_command)
    main.add_command(convert_auto_command)
    main.add_command(export_stream_command)


_register_commands()
