"""ffmpeg invocation and outcome classification."""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - only for TimeoutExpired
import threading
from collections.abc import Callable, Sequence
from pathlib import Path

from mediaforge.core.subprocess_utils import ExecutableResult, run_command
from mediaforge.exceptions import (
    ProcessLaunchError,
    ToolFailureError,
    ToolTimeoutError,
)
from mediaforge.tools.ffmpeg_progress import FFmpegProgress, parse_progress_line

logger = logging.getLogger(__name__)

# Silence normal logging and send the -progress feed to stdout.
STREAMING_PREFIX: tuple[str, ...] = (
    "-loglevel",
    "error",
    "-hide_banner",
    "-progress",
    "pipe:1",
)

ProgressCallback = Callable[[FFmpegProgress], None]


def check_result(result: ExecutableResult, tool: str) -> None:
    """Classify a finished process.

    Args:
        result: Outcome of run_command.
        tool: Tool name for error messages.

    Raises:
        ProcessLaunchError: If the process could not be started.
        ToolFailureError: If the process exited with a nonzero code.
    """
    if result.error is not None:
        raise ProcessLaunchError(tool, result.error) from result.error
    if result.exit_code != 0:
        raise ToolFailureError(tool, result.exit_code or -1, result.stderr)


def build_command_args(
    input_path: Path | str,
    output_path: Path | str,
    arguments: Sequence[str],
    streaming: bool = False,
) -> list[str]:
    """Wrap built arguments with input, output, and optional progress flags.

    Args:
        input_path: Source media file.
        output_path: Destination file (overwritten).
        arguments: Arguments from mediaforge.executor.command.
        streaming: Prepend the flags that stream progress to stdout.

    Returns:
        ``[<progress flags>] -i <input> <arguments...> -y <output>``.
    """
    args: list[str] = list(STREAMING_PREFIX) if streaming else []
    args.extend(["-i", str(input_path)])
    args.extend(arguments)
    args.extend(["-y", str(output_path)])
    return args


def _progress_line_handler(callback: ProgressCallback) -> Callable[[str], None]:
    """Create a stdout line handler that folds lines into snapshots.

    The callback only sees a snapshot when a line changed it.
    """
    snapshot = FFmpegProgress()

    def handle(line: str) -> None:
        nonlocal snapshot
        updated = parse_progress_line(line, snapshot)
        if updated is snapshot:
            return
        snapshot = updated
        try:
            callback(updated)
        except Exception as e:
            logger.warning("Progress callback error: %s", e)

    return handle


class FFmpegService:
    """Runs ffmpeg and reports progress.

    Each call launches one ffmpeg process and blocks until it exits.
    Instances hold no per-call state and may be shared between threads.
    """

    def __init__(
        self, ffmpeg_path: Path | str = "ffmpeg", timeout: float | None = None
    ) -> None:
        """Initialize the service.

        Args:
            ffmpeg_path: ffmpeg executable name or path.
            timeout: Optional per-invocation timeout in seconds.
        """
        self._ffmpeg_path = str(ffmpeg_path)
        self._timeout = timeout

    @property
    def ffmpeg_path(self) -> str:
        return self._ffmpeg_path

    def convert(
        self,
        input_path: Path | str,
        output_path: Path | str,
        arguments: Sequence[str],
        progress_callback: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ExecutableResult:
        """Run ffmpeg on one input.

        When ``progress_callback`` is given ffmpeg runs in streaming mode and
        the callback receives a new FFmpegProgress each time a progress line
        changes the snapshot. It is called from the stdout reader thread;
        exceptions it raises are logged and ignored.

        Args:
            input_path: Source media file.
            output_path: Destination file.
            arguments: Arguments from mediaforge.executor.command.
            progress_callback: Optional progress receiver.
            cancel_event: Optional cancellation signal.

        Returns:
            The successful ExecutableResult.

        Raises:
            ProcessLaunchError: If ffmpeg could not be started.
            ToolFailureError: If ffmpeg exited with a nonzero code.
            OperationCancelledError: If cancelled.
            ToolTimeoutError: If ffmpeg ran past the service timeout.
        """
        streaming = progress_callback is not None
        args = build_command_args(input_path, output_path, arguments, streaming)

        on_line = (
            _progress_line_handler(progress_callback)
            if progress_callback is not None
            else None
        )

        logger.info("Running ffmpeg: %s -> %s", input_path, output_path)
        try:
            result = run_command(
                self._ffmpeg_path,
                args,
                on_stdout_line=on_line,
                cancel_event=cancel_event,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ToolTimeoutError("ffmpeg", e.timeout) from e
        try:
            check_result(result, "ffmpeg")
        except ToolFailureError as e:
            logger.error(
                "ffmpeg failed for %s: %s",
                input_path,
                e.first_line or "no error output",
                extra={"exit_code": e.exit_code},
            )
            raise
        return result
