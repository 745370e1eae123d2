"""Exception taxonomy for mediaforge.

Every error raised by the parser, the mapping engine, the argument builder
and the process layer derives from MediaForgeError, so callers can catch
the whole family with a single except clause when they only need to
report a failure.
"""

from __future__ import annotations

from collections.abc import Sequence


class MediaForgeError(Exception):
    """Base exception for all mediaforge errors."""


class MalformedInputError(MediaForgeError):
    """Raised when a probe report or duration string cannot be parsed."""


class ConfigurationError(MediaForgeError):
    """Raised when the configuration file cannot be read."""


class UnsupportedChannelLayoutError(MediaForgeError):
    """Raised when no default audio bitrate exists for a channel count.

    Attributes:
        channels: The channel count that has no registered default.
    """

    def __init__(self, channels: int | None) -> None:
        """Initialize the exception.

        Args:
            channels: The channel count that has no registered default.
        """
        self.channels = channels
        super().__init__(
            f"No default audio bitrate for {channels} channel(s); "
            "supply an explicit bitrate"
        )


class MissingCodecError(MediaForgeError):
    """Raised when a codec name is empty or whitespace."""

    def __init__(self, message: str = "Codec name must not be blank") -> None:
        super().__init__(message)


class InvalidPassError(MediaForgeError):
    """Raised when a two-pass encode is asked for a pass other than 1 or 2.

    Attributes:
        pass_number: The rejected pass value.
    """

    def __init__(self, pass_number: object) -> None:
        self.pass_number = pass_number
        super().__init__(
            f"Variable bitrate encoding requires pass 1 or 2, got {pass_number!r}"
        )


class ProcessLaunchError(MediaForgeError):
    """Raised when an external tool could not be started.

    Attributes:
        command: The executable that failed to launch.
        cause: The underlying exception captured at launch time.
    """

    def __init__(self, command: str, cause: BaseException) -> None:
        self.command = command
        self.cause = cause
        super().__init__(f"Failed to start {command}: {cause}")


class ToolFailureError(MediaForgeError):
    """Raised when an external tool exits with a nonzero code.

    Attributes:
        tool: Name of the tool that failed (e.g. "ffmpeg").
        exit_code: Process exit code.
        error_output: Trimmed standard error text, kept in full for
            diagnostics.
    """

    def __init__(self, tool: str, exit_code: int, error_output: str = "") -> None:
        self.tool = tool
        self.exit_code = exit_code
        self.error_output = error_output.strip()
        message = f"{tool} failed (exit code: {exit_code})"
        if self.first_line:
            message = f"{message}: {self.first_line}"
        super().__init__(message)

    @property
    def first_line(self) -> str:
        """First non-empty line of the error output, or an empty string."""
        for line in self.error_output.splitlines():
            if line.strip():
                return line.strip()
        return ""


class OperationCancelledError(MediaForgeError):
    """Raised when a running operation is cancelled by its caller.

    Attributes:
        command: The command line that was cancelled, if a process was
            involved.
    """

    def __init__(self, command: Sequence[str] | None = None) -> None:
        self.command = list(command) if command else None
        if self.command:
            super().__init__(f"Operation cancelled: {self.command[0]}")
        else:
            super().__init__("Operation cancelled")


class ToolTimeoutError(MediaForgeError):
    """Raised when an external tool runs past its configured time limit.

    The process has already been killed when this is raised.

    Attributes:
        tool: Name of the tool that was stopped.
        timeout: The limit in seconds.
    """

    def __init__(self, tool: str, timeout: float) -> None:
        self.tool = tool
        self.timeout = timeout
        super().__init__(f"{tool} timed out after {timeout:g}s")
