"""CLI conversion commands for mediaforge.

Commands:
- args: print the ffmpeg arguments that would be used for a file
- convert: convert one file
- convert-folder: convert every matching file of a folder
- convert-auto: convert files with the configured defaults
"""

import logging
import sys
import threading
from collections.abc import Callable, Sequence
from pathlib import Path

import click
from pydantic import ValidationError

from mediaforge.cli.exit_codes import ExitCode
from mediaforge.cli.inspect import get_cli_config, load_media_file
from mediaforge.core.quoting import ShellStyle
from mediaforge.domain.encoding import (
    AudioTrackMapping,
    CopyAudioTrackMapping,
    EncodeAudioTrackMapping,
    VideoEncodingSettings,
)
from mediaforge.exceptions import (
    MediaForgeError,
    OperationCancelledError,
    ProcessLaunchError,
    ToolFailureError,
    ToolTimeoutError,
)
from mediaforge.executor.command import build_ffmpeg_arguments
from mediaforge.executor.conversion import (
    ConversionProgress,
    ConversionResult,
    MediaConversionService,
)
from mediaforge.executor.options import EncodingOptions
from mediaforge.mapping import create_audio_mappings

logger = logging.getLogger(__name__)


class ProgressDisplay:
    """Display conversion progress on stderr.

    Updates a single line in place using carriage return. Only active when
    stderr is a TTY.
    """

    def __init__(self, *, enabled: bool = True) -> None:
        self._enabled = enabled and sys.stderr.isatty()
        self._has_output = False

    def __call__(self, update: ConversionProgress) -> None:
        if not self._enabled:
            return
        # \r moves to start of line, \033[K clears to end of line
        sys.stderr.write(f"\r\033[K[{update.percent:5.1f}%] {update.status}")
        sys.stderr.flush()
        self._has_output = True

    def finish(self) -> None:
        """Finish the progress line with a newline."""
        if self._enabled and self._has_output:
            sys.stderr.write("\n")
            sys.stderr.flush()
            self._has_output = False


def encoding_options(func: Callable) -> Callable:
    """Add the shared video encoding options to a command."""
    options = [
        click.option("--codec", default=None, help="Video codec (default: config)."),
        click.option("--preset", default=None, help="Encoder preset."),
        click.option(
            "--crf",
            type=click.IntRange(0, 51),
            default=None,
            help="Constant quality (single pass).",
        ),
        click.option(
            "--bitrate",
            type=click.IntRange(min=1),
            default=None,
            help="Target video bitrate in kbit/s (two pass).",
        ),
        click.option("--profile", default=None, help="Codec profile."),
        click.option("--tune", default=None, help="Encoder tune."),
        click.option(
            "--extra",
            "extra_arguments",
            multiple=True,
            help="Extra ffmpeg argument (repeatable, --crf only).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


AUDIO_HELP = (
    "Explicit audio track, in output order (repeatable): "
    "copy:INDEX[:TITLE] or encode:INDEX:CODEC[:CHANNELS[:BITRATE[:TITLE]]]. "
    "Replaces automatic track planning."
)


def parse_audio_mapping(text: str, destination_index: int) -> AudioTrackMapping:
    """Parse one --audio value into a mapping of input file 0.

    INDEX is the audio stream index in the input. CHANNELS and BITRATE
    default to 0, meaning the source layout and the channel-count default
    bitrate. TITLE is taken verbatim and may contain colons.

    Raises:
        ValueError: If the value is not a copy or encode mapping.
    """
    kind, _, rest = text.partition(":")
    kind = kind.strip().casefold()
    if kind == "copy":
        fields = rest.split(":", 1)
        return CopyAudioTrackMapping(
            source_stream=0,
            source_index=_non_negative(fields[0], "INDEX"),
            destination_index=destination_index,
            title=fields[1] if len(fields) > 1 else None,
        )
    if kind == "encode":
        fields = rest.split(":", 4)
        if len(fields) < 2 or not fields[1].strip():
            raise ValueError("encode needs INDEX and CODEC")
        return EncodeAudioTrackMapping(
            source_stream=0,
            source_index=_non_negative(fields[0], "INDEX"),
            destination_index=destination_index,
            destination_codec=fields[1].strip(),
            destination_channels=(
                _non_negative(fields[2], "CHANNELS") if len(fields) > 2 else 0
            ),
            destination_bitrate=(
                _non_negative(fields[3], "BITRATE") if len(fields) > 3 else 0
            ),
            title=fields[4] if len(fields) > 4 else None,
        )
    raise ValueError(f"expected 'copy:' or 'encode:', got {text!r}")


def _non_negative(field: str, name: str) -> int:
    field = field.strip()
    if not field.isdigit():
        raise ValueError(f"{name} must be a non-negative integer, got {field!r}")
    return int(field)


def _parse_audio_option(
    ctx: click.Context, param: click.Parameter, value: tuple[str, ...]
) -> tuple[AudioTrackMapping, ...]:
    """Turn repeated --audio values into mappings numbered 0, 1, ..."""
    try:
        return tuple(
            parse_audio_mapping(text, index) for index, text in enumerate(value)
        )
    except ValueError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param) from e


audio_option = click.option(
    "--audio",
    "-a",
    "audio_mappings",
    multiple=True,
    callback=_parse_audio_option,
    help=AUDIO_HELP,
)


def resolve_settings(
    ctx: click.Context,
    codec: str | None,
    preset: str | None,
    crf: int | None,
    bitrate: int | None,
    profile: str | None,
    tune: str | None,
    extra_arguments: Sequence[str] = (),
) -> VideoEncodingSettings:
    """Build encoding settings from CLI options, exiting on invalid input.

    Unset codec and preset fall back to the conversion config. Without
    ``--crf`` or ``--bitrate`` the configured CRF is used.
    """
    defaults = get_cli_config(ctx).conversion
    if crf is None and bitrate is None:
        crf = defaults.crf
    try:
        options = EncodingOptions(
            codec=codec or defaults.codec,
            preset=preset or defaults.preset,
            profile=profile,
            tune=tune,
            crf=crf,
            bitrate=bitrate,
            extra_arguments=tuple(extra_arguments),
        )
    except ValidationError as e:
        click.echo("Error: Invalid encoding options:", err=True)
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"]) or "options"
            click.echo(f"  {location}: {error['msg']}", err=True)
        sys.exit(ExitCode.INVALID_OPTIONS)
    return options.to_settings()


def _service(ctx: click.Context) -> MediaConversionService:
    return MediaConversionService.from_config(get_cli_config(ctx))


def _report_results(results: Sequence[ConversionResult]) -> None:
    """Print per-file results and exit with a nonzero code on failures."""
    for result in results:
        marker = "OK" if result.success else "FAILED"
        click.echo(f"[{marker}] {result.file_path}: {result.status}")

    failed = sum(1 for r in results if not r.success)
    click.echo(f"\n{len(results) - failed} succeeded, {failed} failed")
    if not results:
        sys.exit(ExitCode.TARGET_NOT_FOUND)
    if failed:
        sys.exit(ExitCode.PARTIAL_FAILURE)


@click.command("args")
@click.argument("file", type=click.Path(path_type=Path))
@encoding_options
@click.option(
    "--pass",
    "pass_number",
    type=click.IntRange(1, 2),
    default=None,
    help="Pass to show for --bitrate (default: both).",
)
@click.option(
    "--shell",
    type=click.Choice(["posix", "windows"]),
    default=None,
    help="Title quoting convention (default: this platform).",
)
@audio_option
@click.option("--language", "-l", default=None, help="Audio language to keep.")
@click.pass_context
def args_command(
    ctx: click.Context,
    file: Path,
    codec: str | None,
    preset: str | None,
    crf: int | None,
    bitrate: int | None,
    profile: str | None,
    tune: str | None,
    extra_arguments: tuple[str, ...],
    pass_number: int | None,
    shell: str | None,
    language: str | None,
    audio_mappings: tuple[AudioTrackMapping, ...],
) -> None:
    """Print the ffmpeg arguments used to convert FILE.

    Audio tracks are planned from the file's streams; the arguments shown
    are those placed between the input and output of the ffmpeg call.
    """
    settings = resolve_settings(
        ctx, codec, preset, crf, bitrate, profile, tune, extra_arguments
    )
    media_file = load_media_file(ctx, file)
    language = language or get_cli_config(ctx).conversion.audio_language
    shell_style = ShellStyle(shell) if shell else None

    try:
        mappings = audio_mappings or create_audio_mappings(media_file, language)
        if settings.is_single_pass:
            args = build_ffmpeg_arguments(settings, mappings, shell_style=shell_style)
            click.echo(" ".join(args))
            return
        for number in (pass_number,) if pass_number else settings.passes:
            args = build_ffmpeg_arguments(settings, mappings, number, shell_style)
            click.echo(f"Pass {number}: {' '.join(args)}")
    except MediaForgeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.OPERATION_FAILED)


@click.command("convert")
@click.argument("input_file", type=click.Path(path_type=Path))
@click.argument("output_file", type=click.Path(path_type=Path))
@encoding_options
@audio_option
@click.option("--language", "-l", default=None, help="Audio language to keep.")
@click.pass_context
def convert_command(
    ctx: click.Context,
    input_file: Path,
    output_file: Path,
    codec: str | None,
    preset: str | None,
    crf: int | None,
    bitrate: int | None,
    profile: str | None,
    tune: str | None,
    extra_arguments: tuple[str, ...],
    language: str | None,
    audio_mappings: tuple[AudioTrackMapping, ...],
) -> None:
    """Convert INPUT_FILE to OUTPUT_FILE.

    Video is re-encoded with the given settings. Audio tracks in the chosen
    language are copied or re-encoded to AAC, unless --audio lists the
    tracks explicitly.
    """
    settings = resolve_settings(
        ctx, codec, preset, crf, bitrate, profile, tune, extra_arguments
    )
    media_file = load_media_file(ctx, input_file)
    language = language or get_cli_config(ctx).conversion.audio_language

    service = _service(ctx)
    progress = ProgressDisplay()
    cancel_event = threading.Event()
    duration = media_file.format.duration
    try:
        mappings = audio_mappings or create_audio_mappings(media_file, language)
        service.convert(
            input_file,
            output_file,
            settings,
            mappings,
            progress_callback=progress,
            cancel_event=cancel_event,
            duration_seconds=float(duration) if duration is not None else None,
        )
    except KeyboardInterrupt:
        # ffmpeg is already killed by run_command
        progress.finish()
        click.echo("Interrupted.", err=True)
        sys.exit(ExitCode.INTERRUPTED)
    except OperationCancelledError:
        progress.finish()
        click.echo("Conversion cancelled.", err=True)
        sys.exit(ExitCode.INTERRUPTED)
    except ProcessLaunchError as e:
        progress.finish()
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.TOOL_NOT_AVAILABLE)
    except (ToolFailureError, ToolTimeoutError) as e:
        progress.finish()
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.TOOL_FAILED)
    except MediaForgeError as e:
        progress.finish()
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.OPERATION_FAILED)

    progress.finish()
    click.echo(f"Converted {input_file} -> {output_file}")


@click.command("convert-folder")
@click.argument(
    "folder", type=click.Path(path_type=Path, exists=True, file_okay=False)
)
@click.argument("output_dir", type=click.Path(path_type=Path, file_okay=False))
@click.option(
    "--pattern",
    "-p",
    default="*.mkv",
    show_default=True,
    help="Glob pattern selecting input files.",
)
@encoding_options
@audio_option
@click.pass_context
def convert_folder_command(
    ctx: click.Context,
    folder: Path,
    output_dir: Path,
    pattern: str,
    codec: str | None,
    preset: str | None,
    crf: int | None,
    bitrate: int | None,
    profile: str | None,
    tune: str | None,
    extra_arguments: tuple[str, ...],
    audio_mappings: tuple[AudioTrackMapping, ...],
) -> None:
    """Convert every file in FOLDER matching --pattern into OUTPUT_DIR.

    Converted files keep their name. Files already present in OUTPUT_DIR
    are skipped. With --audio every file gets the same audio tracks;
    otherwise they are planned per file.
    """
    settings = resolve_settings(
        ctx, codec, preset, crf, bitrate, profile, tune, extra_arguments
    )
    progress = ProgressDisplay()
    try:
        results = _service(ctx).convert_folder(
            folder,
            output_dir,
            settings,
            pattern,
            mappings=audio_mappings or None,
            progress_callback=progress,
        )
    except OperationCancelledError:
        progress.finish()
        click.echo("Conversion cancelled.", err=True)
        sys.exit(ExitCode.INTERRUPTED)
    progress.finish()

    if not results:
        click.echo(f"No files matching {pattern!r} in {folder}", err=True)
    _report_results(results)


@click.command("convert-auto")
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory for converted files (default: next to each input).",
)
@click.pass_context
def convert_auto_command(
    ctx: click.Context, paths: tuple[Path, ...], output_dir: Path | None
) -> None:
    """Convert PATHS with the configured defaults.

    Each file is probed, its audio tracks are planned automatically, and
    video is re-encoded with the [conversion] settings of the config.
    """
    progress = ProgressDisplay()
    try:
        results = _service(ctx).convert_auto(
            paths, output_dir, progress_callback=progress
        )
    except OperationCancelledError:
        progress.finish()
        click.echo("Conversion cancelled.", err=True)
        sys.exit(ExitCode.INTERRUPTED)
    progress.finish()
    _report_results(results)
