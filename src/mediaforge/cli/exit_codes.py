"""Exit codes for mediaforge CLI commands.

Ranges:
- 0: Success
- 1-9: General errors
- 10-19: Configuration and option errors
- 20-29: Target/file errors
- 30-39: Tool errors
- 40-49: Operation errors
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for mediaforge CLI commands."""

    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    INTERRUPTED = 2

    # Configuration and option errors (10-19)
    CONFIG_ERROR = 11
    INVALID_OPTIONS = 12

    # Target/file errors (20-29)
    TARGET_NOT_FOUND = 20
    NO_TRACKS_FOUND = 22

    # Tool errors (30-39)
    TOOL_NOT_AVAILABLE = 30
    TOOL_FAILED = 31

    # Operation errors (40-49)
    OPERATION_FAILED = 40
    PARTIAL_FAILURE = 41
    PARSE_ERROR = 51
