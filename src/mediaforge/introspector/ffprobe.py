"""ffprobe invocation."""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - only for TimeoutExpired
from collections.abc import Sequence
from pathlib import Path

from mediaforge.core.subprocess_utils import run_command
from mediaforge.domain.models import MediaFile
from mediaforge.exceptions import MalformedInputError
from mediaforge.introspector.parsers import parse_file

logger = logging.getLogger(__name__)

DEFAULT_PROBE_FLAGS: tuple[str, ...] = (
    "-show_format",
    "-show_chapters",
    "-show_streams",
)


def build_probe_args(path: Path | str, flags: Sequence[str]) -> list[str]:
    """Build ffprobe arguments: ``-v error -of json <flags> -i <path>``."""
    return ["-v", "error", "-of", "json", *flags, "-i", str(path)]


class FFprobeIntrospector:
    """Reads media file descriptions with ffprobe.

    Failures are logged and reported as None rather than raised, so batch
    callers can skip unreadable files.
    """

    DEFAULT_TIMEOUT: float = 60.0

    def __init__(
        self,
        ffprobe_path: Path | str = "ffprobe",
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the introspector.

        Args:
            ffprobe_path: ffprobe executable name or path.
            timeout: Per-call timeout in seconds (None for no limit).
        """
        self._ffprobe_path = str(ffprobe_path)
        self._timeout = timeout

    def probe(
        self, path: Path | str, flags: Sequence[str] = DEFAULT_PROBE_FLAGS
    ) -> str | None:
        """Run ffprobe and return its JSON report.

        Args:
            path: Media file to probe.
            flags: ffprobe section flags.

        Returns:
            The report text, or None if ffprobe failed to start, timed out,
            or exited with a nonzero code.
        """
        try:
            result = run_command(
                self._ffprobe_path,
                build_probe_args(path, flags),
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired:
            logger.error("ffprobe timed out for %s after %ss", path, self._timeout)
            return None

        if result.error is not None:
            logger.error("Failed to start ffprobe: %s", result.error)
            return None
        if result.exit_code != 0:
            logger.error(
                "ffprobe failed for %s (exit code %s): %s",
                path,
                result.exit_code,
                result.stderr.strip(),
            )
            return None
        return result.stdout

    def get_media_file(self, path: Path | str) -> MediaFile | None:
        """Probe a file and parse the report.

        Args:
            path: Media file to probe.

        Returns:
            MediaFile, or None if probing or parsing failed.
        """
        report = self.probe(path)
        if report is None:
            return None
        try:
            return parse_file(path, report)
        except MalformedInputError as e:
            logger.error("Unreadable ffprobe report for %s: %s", path, e)
            return None
