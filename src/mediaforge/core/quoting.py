"""Platform-specific quoting of command-line argument values.

Arguments are passed to child processes as lists, never through a shell.
Quoting is applied only to free-text values embedded in option values
(track titles) so that the generated command line can be copied into the
user's shell unchanged.
"""

from __future__ import annotations

import enum
import os

# Characters that force single-quoting on POSIX shells.
_POSIX_SPECIAL_CHARS = frozenset(" \t\n\v'\"\\$`*?[](){}|&;<>!")

# Characters that force double-quoting on Windows.
_WINDOWS_SPECIAL_CHARS = frozenset(' "\t\\')


class ShellStyle(enum.Enum):
    """Quoting convention of the target command line."""

    POSIX = "posix"
    WINDOWS = "windows"

    @classmethod
    def detect(cls) -> ShellStyle:
        """Return the convention of the running platform."""
        return cls.WINDOWS if os.name == "nt" else cls.POSIX


def quote_posix_argument(value: str) -> str:
    """Quote a value for a POSIX shell.

    Values containing shell metacharacters or whitespace are wrapped in
    single quotes; each embedded single quote becomes ``'\\''``.

    Args:
        value: Raw argument value.

    Returns:
        The value, quoted if needed.
    """
    if value == "":
        return "''"
    if not any(ch in _POSIX_SPECIAL_CHARS for ch in value):
        return value
    return "'" + value.replace("'", "'\\''") + "'"


def quote_windows_argument(value: str) -> str:
    """Quote a value following the Windows argv parsing rules.

    Values containing a space, tab, double quote or backslash are wrapped in
    double quotes. Backslashes that precede a literal quote or the closing
    quote are doubled, and each literal quote is escaped with a backslash.

    Args:
        value: Raw argument value.

    Returns:
        The value, quoted if needed.
    """
    if value == "":
        return '""'
    if not any(ch in _WINDOWS_SPECIAL_CHARS for ch in value):
        return value

    parts = ['"']
    backslashes = 0
    for ch in value:
        if ch == "\\":
            backslashes += 1
            continue
        if ch == '"':
            parts.append("\\" * (backslashes * 2 + 1))
        else:
            parts.append("\\" * backslashes)
        parts.append(ch)
        backslashes = 0
    parts.append("\\" * (backslashes * 2))
    parts.append('"')
    return "".join(parts)


def quote_argument(value: str, style: ShellStyle | None = None) -> str:
    """Quote a value for the given (or the running) platform.

    Args:
        value: Raw argument value.
        style: Target convention. Detected from the platform when None.

    Returns:
        The value, quoted if needed.
    """
    style = style or ShellStyle.detect()
    if style is ShellStyle.WINDOWS:
        return quote_windows_argument(value)
    return quote_posix_argument(value)
