"""Media conversion service.

Runs single-pass and two-pass ffmpeg conversions, and the sequential
batch conversions built on top of them (explicit file lists and folders).
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from mediaforge.config.models import ConversionConfig, MediaForgeConfig
from mediaforge.domain.encoding import (
    AudioTrackMapping,
    ConstantRateVideoEncodingSettings,
    VideoEncodingSettings,
)
from mediaforge.exceptions import (
    MediaForgeError,
    OperationCancelledError,
)
from mediaforge.executor.command import (
    build_export_stream_args,
    build_ffmpeg_arguments,
)
from mediaforge.executor.ffmpeg import FFmpegService
from mediaforge.introspector.ffprobe import FFprobeIntrospector
from mediaforge.logging.context import conversion_context
from mediaforge.mapping.audio import create_audio_mappings
from mediaforge.tools.ffmpeg_progress import FFmpegProgress

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionProgress:
    """Progress of one pass of a conversion."""

    input_path: Path
    pass_number: int
    total_passes: int
    progress: FFmpegProgress
    percent: float

    @property
    def status(self) -> str:
        """One-line status, e.g. "Pass 1/2: Time: ... | FPS: ..."."""
        label = (
            f"Pass {self.pass_number}/{self.total_passes}"
            if self.total_passes > 1
            else "Converting"
        )
        details = self.progress.format_status()
        return f"{label}: {details}" if details else label


ConversionProgressCallback = Callable[[ConversionProgress], None]


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting one file in a batch."""

    file_path: Path
    success: bool
    status: str
    output_path: Path | None = None


def auto_settings(config: ConversionConfig) -> ConstantRateVideoEncodingSettings:
    """Build the constant-quality settings used by convert-auto.

    Args:
        config: Conversion defaults.

    Returns:
        Settings for the configured codec, preset, profile, tune and CRF.
    """
    return ConstantRateVideoEncodingSettings(
        codec=config.codec,
        preset=config.preset,
        codec_profile=config.profile,
        tune=config.tune,
        crf=config.crf,
    )


def unique_paths(paths: Iterable[Path | str]) -> list[Path]:
    """Remove duplicate paths, keeping first-seen order.

    Paths are compared after resolving, so "a.mkv" and "./a.mkv" are the
    same file.
    """
    seen: set[Path] = set()
    result: list[Path] = []
    for raw in paths:
        path = Path(raw)
        key = path.resolve()
        if key in seen:
            logger.debug("Skipping duplicate path: %s", path)
            continue
        seen.add(key)
        result.append(path)
    return result


class MediaConversionService:
    """Converts media files with ffmpeg.

    Conversions run one at a time in the calling thread. Two-pass
    settings run pass 1 then pass 2; if pass 1 fails, pass 2 is never
    started.
    """

    def __init__(
        self,
        ffmpeg: FFmpegService,
        introspector: FFprobeIntrospector,
        conversion_config: ConversionConfig | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            ffmpeg: Service that runs ffmpeg.
            introspector: ffprobe wrapper used by batch conversions.
            conversion_config: Defaults for automatic conversion.
        """
        self._ffmpeg = ffmpeg
        self._introspector = introspector
        self._config = conversion_config or ConversionConfig()

    @classmethod
    def from_config(cls, config: MediaForgeConfig) -> MediaConversionService:
        """Create a service wired to the configured tools."""
        return cls(
            FFmpegService(config.tools.ffmpeg, timeout=config.tools.ffmpeg_timeout),
            FFprobeIntrospector(
                config.tools.ffprobe, timeout=config.tools.ffprobe_timeout
            ),
            config.conversion,
        )

    @property
    def conversion_config(self) -> ConversionConfig:
        return self._config

    def _progress_adapter(
        self,
        input_path: Path,
        pass_number: int,
        total_passes: int,
        duration_seconds: float | None,
        callback: ConversionProgressCallback | None,
    ) -> Callable[[FFmpegProgress], None] | None:
        if callback is None:
            return None

        def report(progress: FFmpegProgress) -> None:
            callback(
                ConversionProgress(
                    input_path=input_path,
                    pass_number=pass_number,
                    total_passes=total_passes,
                    progress=progress,
                    percent=progress.get_percent(duration_seconds),
                )
            )

        return report

    def convert(
        self,
        input_path: Path | str,
        output_path: Path | str,
        settings: VideoEncodingSettings,
        mappings: Sequence[AudioTrackMapping] = (),
        progress_callback: ConversionProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
        duration_seconds: float | None = None,
    ) -> None:
        """Convert one file.

        Args:
            input_path: Source media file.
            output_path: Destination file (overwritten).
            settings: Video encoding settings.
            mappings: Audio track mappings.
            progress_callback: Optional receiver of ConversionProgress.
            cancel_event: Optional cancellation signal.
            duration_seconds: Input duration used for percentages.

        Raises:
            ToolFailureError: If an ffmpeg pass exits with a nonzero code.
            ToolTimeoutError: If an ffmpeg pass exceeds the tool timeout.
            ProcessLaunchError: If ffmpeg cannot be started.
            OperationCancelledError: If cancelled.
            MissingCodecError, UnsupportedChannelLayoutError,
            InvalidPassError: If arguments cannot be built.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)

        if settings.is_single_pass:
            args = build_ffmpeg_arguments(settings, mappings, quote_titles=False)
            with conversion_context(input_path, "convert"):
                logger.info(
                    "Converting %s -> %s (%s)",
                    input_path,
                    output_path,
                    settings,
                    extra={"command": " ".join(args)},
                )
                self._ffmpeg.convert(
                    input_path,
                    output_path,
                    args,
                    self._progress_adapter(
                        input_path, 1, 1, duration_seconds, progress_callback
                    ),
                    cancel_event,
                )
            logger.info("Converted %s", output_path)
            return

        total = len(settings.passes)
        with tempfile.TemporaryDirectory(prefix="mediaforge_passlog_") as passlog_dir:
            passlog = Path(passlog_dir) / "ffmpeg2pass"
            for pass_number in settings.passes:
                args = build_ffmpeg_arguments(
                    settings,
                    mappings,
                    pass_number,
                    passlog_file=passlog,
                    quote_titles=False,
                )
                target: Path | str = output_path
                if pass_number == 1:
                    # First pass only writes statistics
                    args.extend(["-f", "null"])
                    target = os.devnull

                with conversion_context(input_path, f"pass {pass_number}/{total}"):
                    logger.info(
                        "Starting two-pass encoding pass %d: %s",
                        pass_number,
                        input_path,
                        extra={"pass": pass_number, "command": " ".join(args)},
                    )
                    self._ffmpeg.convert(
                        input_path,
                        target,
                        args,
                        self._progress_adapter(
                            input_path,
                            pass_number,
                            total,
                            duration_seconds,
                            progress_callback,
                        ),
                        cancel_event,
                    )
        logger.info("Converted %s", output_path)

    def export_stream(
        self,
        input_path: Path | str,
        output_path: Path | str,
        stream_index: int,
        stream_type: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Copy one stream of a file into its own output file.

        Args:
            input_path: Source media file.
            output_path: Destination file.
            stream_index: Absolute index, or index within ``stream_type``.
            stream_type: Optional "video", "audio", "subtitle" or "data".
            cancel_event: Optional cancellation signal.

        Raises:
            ValueError: If the stream type is unknown.
            ToolFailureError: If ffmpeg fails.
            ProcessLaunchError: If ffmpeg cannot be started.
        """
        args = build_export_stream_args(stream_index, stream_type)
        with conversion_context(input_path, "export"):
            logger.info(
                "Exporting stream %s%d of %s -> %s",
                f"{stream_type} " if stream_type else "",
                stream_index,
                input_path,
                output_path,
            )
            self._ffmpeg.convert(input_path, output_path, args, None, cancel_event)

    def _convert_probed(
        self,
        input_path: Path,
        output_path: Path,
        settings: VideoEncodingSettings,
        mappings: Sequence[AudioTrackMapping] | None,
        progress_callback: ConversionProgressCallback | None,
        cancel_event: threading.Event | None,
    ) -> ConversionResult:
        """Probe, plan audio if needed, and convert one batch entry."""
        try:
            media_file = self._introspector.get_media_file(input_path)
            if media_file is None:
                return ConversionResult(
                    input_path, False, "Failed to read media file"
                )
            if mappings is None:
                mappings = create_audio_mappings(
                    media_file, self._config.audio_language
                )
            duration = media_file.format.duration
            self.convert(
                input_path,
                output_path,
                settings,
                mappings,
                progress_callback,
                cancel_event,
                float(duration) if duration is not None else None,
            )
        except OperationCancelledError:
            raise
        except MediaForgeError as e:
            logger.error("Conversion of %s failed: %s", input_path, e)
            return ConversionResult(input_path, False, str(e), output_path)
        return ConversionResult(
            input_path, True, f"Converted to {output_path}", output_path
        )

    def _auto_output_path(self, input_path: Path, output_dir: Path | None) -> Path:
        directory = output_dir or input_path.parent
        extension = self._config.output_extension
        output = directory / f"{input_path.stem}{extension}"
        if output.resolve() == input_path.resolve():
            output = directory / f"{input_path.stem}.converted{extension}"
        return output

    def convert_auto(
        self,
        paths: Iterable[Path | str],
        output_dir: Path | str | None = None,
        progress_callback: ConversionProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> list[ConversionResult]:
        """Convert files with the configured defaults and planned audio.

        Each file is probed, its audio tracks are planned with
        create_audio_mappings, and it is converted to
        ``<stem><output_extension>`` in ``output_dir`` (default: next to
        the input). Per-file failures are recorded, not raised.

        Args:
            paths: Files to convert; duplicates are skipped.
            output_dir: Optional directory for converted files.
            progress_callback: Optional receiver of ConversionProgress.
            cancel_event: Optional cancellation signal; stops the batch.

        Returns:
            One ConversionResult per unique input, in input order.

        Raises:
            OperationCancelledError: If cancelled.
        """
        out_dir = Path(output_dir) if output_dir is not None else None
        if out_dir is not None:
            out_dir.mkdir(parents=True, exist_ok=True)
        settings = auto_settings(self._config)

        results: list[ConversionResult] = []
        for path in unique_paths(paths):
            if not path.is_file():
                logger.warning("File not found: %s", path)
                results.append(ConversionResult(path, False, "File not found"))
                continue
            output = self._auto_output_path(path, out_dir)
            results.append(
                self._convert_probed(
                    path, output, settings, None, progress_callback, cancel_event
                )
            )

        succeeded = sum(1 for r in results if r.success)
        logger.info(
            "Auto conversion completed: %d succeeded, %d failed",
            succeeded,
            len(results) - succeeded,
        )
        return results

    def convert_folder(
        self,
        folder: Path | str,
        output_dir: Path | str,
        settings: VideoEncodingSettings,
        pattern: str = "*.mkv",
        mappings: Sequence[AudioTrackMapping] | None = None,
        progress_callback: ConversionProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> list[ConversionResult]:
        """Convert every matching file of a folder into another folder.

        Files are processed in name order and keep their file name. Files
        whose output already exists are skipped.

        Args:
            folder: Input folder (not searched recursively).
            output_dir: Output folder, created if missing.
            settings: Video encoding settings for every file.
            pattern: Glob pattern selecting input files.
            mappings: Audio mappings for every file; planned per file with
                create_audio_mappings when None.
            progress_callback: Optional receiver of ConversionProgress.
            cancel_event: Optional cancellation signal; stops the batch.

        Returns:
            One ConversionResult per matching file.

        Raises:
            NotADirectoryError: If ``folder`` is not a directory.
            OperationCancelledError: If cancelled.
        """
        folder = Path(folder)
        output_dir = Path(output_dir)
        if not folder.is_dir():
            raise NotADirectoryError(f"Input folder not found: {folder}")
        output_dir.mkdir(parents=True, exist_ok=True)

        files = sorted(p for p in folder.glob(pattern) if p.is_file())
        if not files:
            logger.warning("No files matching %r in %s", pattern, folder)
            return []
        logger.info("Found %d file(s) matching %r in %s", len(files), pattern, folder)

        results: list[ConversionResult] = []
        for path in files:
            output = output_dir / path.name
            if output.exists():
                logger.warning("Output file already exists: %s", output)
                results.append(
                    ConversionResult(path, True, "Skipped: output exists", output)
                )
                continue
            results.append(
                self._convert_probed(
                    path, output, settings, mappings, progress_callback, cancel_event
                )
            )

        succeeded = sum(1 for r in results if r.success)
        logger.info(
            "Folder conversion completed: %d succeeded, %d failed",
            succeeded,
            len(results) - succeeded,
        )
        return results
