"""Subprocess utilities for external tool invocation.

This module provides the process wrapper used for every ffmpeg and
ffprobe call: one child process per call, stdout and stderr drained
concurrently by two reader threads, optional per-line dispatch of stdout
for live progress, and cooperative cancellation.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for ffmpeg invocation
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from mediaforge.exceptions import OperationCancelledError

logger = logging.getLogger(__name__)

# How often the waiting loop checks for cancellation and timeout.
POLL_INTERVAL: float = 0.1

# Time allowed for reader threads to finish after a killed process.
DRAIN_TIMEOUT: float = 5.0


@dataclass(frozen=True)
class ExecutableResult:
    """Outcome of one external process invocation.

    Exactly one of ``exit_code`` and ``error`` is set: ``error`` holds the
    exception raised while launching the process, in which case the
    process never ran.
    """

    command: tuple[str, ...]
    stdout: str = ""
    stderr: str = ""
    exit_code: int | None = None
    error: BaseException | None = None
    elapsed_seconds: float = 0.0

    @property
    def launched(self) -> bool:
        return self.error is None

    @property
    def succeeded(self) -> bool:
        """True if the process started and exited with code 0."""
        return self.error is None and self.exit_code == 0


def _drain(
    pipe: IO[str],
    sink: list[str],
    on_line: Callable[[str], None] | None,
) -> None:
    """Read a pipe to EOF, collecting lines and dispatching them."""
    try:
        for line in pipe:
            sink.append(line)
            if on_line is None:
                continue
            try:
                on_line(line.rstrip("\r\n"))
            except Exception as e:
                logger.warning("Output line callback error: %s", e)
    except (ValueError, OSError) as e:
        # Pipe closed under us (process killed)
        logger.debug("Pipe reader stopped: %s", e)


def _close_pipes(process: subprocess.Popen[str]) -> None:
    for pipe in (process.stdout, process.stderr):
        if pipe is not None:
            pipe.close()


def _stop_process(
    process: subprocess.Popen[str], readers: Sequence[threading.Thread]
) -> None:
    """Kill a running child, reap it and release its pipes."""
    if process.poll() is None:
        process.kill()
    process.wait()
    for reader in readers:
        reader.join(timeout=DRAIN_TIMEOUT)
    _close_pipes(process)


def run_command(
    command: str | Path,
    args: Sequence[str | Path],
    *,
    on_stdout_line: Callable[[str], None] | None = None,
    cancel_event: threading.Event | None = None,
    timeout: float | None = None,
) -> ExecutableResult:
    """Run an external command and wait for it to finish.

    Standard output and standard error are read by two threads so neither
    pipe can fill up and stall the child. When ``on_stdout_line`` is given
    each stdout line (without its newline) is passed to it as soon as it
    is read, before the process exits. A callback that raises is logged
    and does not interrupt draining.

    Args:
        command: Executable name or path.
        args: Arguments, passed directly to the process (no shell).
        on_stdout_line: Optional callback for live stdout lines.
        cancel_event: Optional event; if set before launch the process is
            never started, if set while running the process is killed.
        timeout: Optional wall-clock limit in seconds.

    Returns:
        ExecutableResult with captured output and exit code, or with
        ``error`` set if the process could not be started.

    Raises:
        OperationCancelledError: If ``cancel_event`` was set.
        subprocess.TimeoutExpired: If ``timeout`` elapsed. The process is
            killed before this is raised.

    Example:
        >>> result = run_command("ffprobe", ["-version"])
        >>> if result.succeeded:
        ...     print(result.stdout.splitlines()[0])
    """
    cmd = [str(command), *(str(arg) for arg in args)]
    command_name = Path(cmd[0]).name

    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError(cmd)

    logger.debug(
        "Executing command: %s",
        " ".join(cmd),
        extra={"command": command_name, "arg_count": len(cmd)},
    )
    start_time = time.monotonic()

    try:
        process = subprocess.Popen(  # nosec B603 - no shell, caller builds args
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        logger.warning(
            "Failed to start %s: %s",
            command_name,
            e,
            extra={"command": command_name},
        )
        return ExecutableResult(command=tuple(cmd), error=e)

    stdout_lines: list[str] = []
    stderr_lines: list[str] = []
    assert process.stdout is not None
    assert process.stderr is not None
    readers = [
        threading.Thread(
            target=_drain,
            args=(process.stdout, stdout_lines, on_stdout_line),
            name=f"{command_name}-stdout",
            daemon=True,
        ),
        threading.Thread(
            target=_drain,
            args=(process.stderr, stderr_lines, None),
            name=f"{command_name}-stderr",
            daemon=True,
        ),
    ]
    for reader in readers:
        reader.start()

    cancelled = False
    timed_out = False
    try:
        while True:
            try:
                process.wait(timeout=POLL_INTERVAL)
                break
            except subprocess.TimeoutExpired:
                if cancel_event is not None and cancel_event.is_set():
                    cancelled = True
                    break
                if timeout is not None and time.monotonic() - start_time >= timeout:
                    timed_out = True
                    break
    except BaseException:
        # KeyboardInterrupt and the like: never leave the child running
        logger.info(
            "Interrupted while waiting for %s, killing it",
            command_name,
            extra={"command": command_name},
        )
        _stop_process(process, readers)
        raise

    if cancelled or timed_out:
        _stop_process(process, readers)
    else:
        for reader in readers:
            reader.join()
        _close_pipes(process)

    elapsed = time.monotonic() - start_time

    if cancelled:
        logger.info(
            "Command cancelled: %s",
            command_name,
            extra={"command": command_name, "elapsed_seconds": round(elapsed, 3)},
        )
        raise OperationCancelledError(cmd)

    if timed_out:
        logger.warning(
            "Command timed out after %ss: %s",
            timeout,
            " ".join(cmd[:3]) + ("..." if len(cmd) > 3 else ""),
            extra={"command": command_name, "timeout_seconds": timeout},
        )
        raise subprocess.TimeoutExpired(
            cmd,
            timeout or 0,
            output="".join(stdout_lines),
            stderr="".join(stderr_lines),
        )

    logger.debug(
        "Command completed",
        extra={
            "command": command_name,
            "elapsed_seconds": round(elapsed, 3),
            "returncode": process.returncode,
        },
    )
    return ExecutableResult(
        command=tuple(cmd),
        stdout="".join(stdout_lines),
        stderr="".join(stderr_lines),
        exit_code=process.returncode,
        elapsed_seconds=elapsed,
    )
