"""FFmpeg progress parsing utilities.

ffmpeg started with ``-progress pipe:1`` writes one ``key=value`` pair
per line to stdout and ends each block with ``progress=continue`` (or
``progress=end`` for the last one). parse_progress_line folds those lines
into immutable FFmpegProgress snapshots.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FFmpegProgress:
    """Snapshot of ffmpeg progress.

    ``bitrate`` is normalized to kbit/s. ``out_time_ms`` is copied as
    ffmpeg reports it, which despite the name is in microseconds.
    """

    frame: int | None = None
    fps: float | None = None
    bitrate: float | None = None
    total_size: int | None = None
    out_time_ms: int | None = None
    out_time: str | None = None
    dup_frames: int | None = None
    drop_frames: int | None = None
    speed: float | None = None
    progress: str | None = None

    @property
    def out_time_seconds(self) -> float | None:
        """Output position in seconds."""
        if self.out_time_ms is not None:
            return self.out_time_ms / 1_000_000
        return None

    @property
    def is_finished(self) -> bool:
        return self.progress == "end"

    def get_percent(self, duration_seconds: float | None) -> float:
        """Calculate progress percentage based on duration.

        Args:
            duration_seconds: Total duration of the input in seconds.

        Returns:
            Progress percentage clamped to 0.0..100.0, or 0.0 if unknown.
        """
        if duration_seconds is None or duration_seconds <= 0:
            return 0.0
        out_time = self.out_time_seconds
        if out_time is None:
            return 0.0
        return max(0.0, min(100.0, (out_time / duration_seconds) * 100))

    def format_status(self) -> str:
        """Format known fields as "Time: ... | FPS: ... | ..." for display."""
        details: list[str] = []
        if self.out_time and self.out_time.strip():
            details.append(f"Time: {self.out_time}")
        if self.fps is not None:
            details.append(f"FPS: {self.fps:.2f}")
        if self.speed is not None:
            details.append(f"Speed: {self.speed:.2f}x")
        if self.bitrate is not None:
            details.append(f"Bitrate: {self.bitrate:.0f} kbits/s")
        if self.frame is not None:
            details.append(f"Frame: {self.frame:,}")
        return " | ".join(details)


def _parse_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def _parse_float(value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        return None


# Suffix, multiplier to kbit/s. Checked in order; "bits/s" must come last.
_BITRATE_UNITS: tuple[tuple[str, float], ...] = (
    ("kbits/s", 1.0),
    ("mbits/s", 1000.0),
    ("bits/s", 0.001),
)


def _parse_bitrate(value: str) -> float | None:
    """Parse "1234.5kbits/s", "1.5Mbits/s" or "800 bits/s" into kbit/s."""
    text = value.strip()
    multiplier = 1.0
    lowered = text.lower()
    for suffix, factor in _BITRATE_UNITS:
        if lowered.endswith(suffix):
            text = text[: -len(suffix)].strip()
            multiplier = factor
            break
    number = _parse_float(text)
    return number * multiplier if number is not None else None


def _parse_speed(value: str) -> float | None:
    """Parse "2.5x" into 2.5."""
    text = value.strip()
    if text.lower().endswith("x"):
        text = text[:-1].strip()
    return _parse_float(text)


def _parse_text(value: str) -> str | None:
    return value


# Progress key -> (snapshot field, value parser). Unlisted keys are ignored.
_FIELD_PARSERS: dict[str, tuple[str, Callable[[str], object]]] = {
    "frame": ("frame", _parse_int),
    "fps": ("fps", _parse_float),
    "bitrate": ("bitrate", _parse_bitrate),
    "total_size": ("total_size", _parse_int),
    "out_time_ms": ("out_time_ms", _parse_int),
    "out_time": ("out_time", _parse_text),
    "dup_frames": ("dup_frames", _parse_int),
    "drop_frames": ("drop_frames", _parse_int),
    "speed": ("speed", _parse_speed),
    "progress": ("progress", _parse_text),
}


def parse_progress_line(
    line: str, current: FFmpegProgress | None = None
) -> FFmpegProgress:
    """Fold one line of -progress output into a progress snapshot.

    The returned snapshot is a new object when the line changed a field;
    otherwise ``current`` itself is returned, so callers can detect
    changes with an identity check. Empty lines, lines without "=",
    unknown keys, and values that fail numeric parsing (such as
    "bitrate=N/A") leave the snapshot unchanged.

    Args:
        line: A line from ffmpeg's -progress output.
        current: Snapshot to update. A new empty snapshot when None.

    Returns:
        Updated (or unchanged) snapshot.
    """
    progress = current if current is not None else FFmpegProgress()
    if not line or not line.strip():
        return progress

    key, sep, value = line.partition("=")
    if not sep:
        return progress

    entry = _FIELD_PARSERS.get(key.strip())
    if entry is None:
        return progress

    field_name, parser = entry
    parsed = parser(value.strip())
    if parsed is None:
        logger.debug("Ignoring unparseable progress value: %r", line)
        return progress
    if getattr(progress, field_name) == parsed:
        return progress
    return dataclasses.replace(progress, **{field_name: parsed})
