"""Domain models for parsed media files.

These models represent an ffprobe report independent of its JSON shape.
They are produced by mediaforge.introspector.parsers and are immutable
once created, so a MediaFile can be handed to several consumers (mapping
engine, argument builder, CLI formatters) without defensive copies.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any

# Tag maps hold ffprobe's "tags" object; keys keep the case the probe used.
TagMap = Mapping[str, str]


def lookup_tag(tags: TagMap, key: str) -> str | None:
    """Look up a tag value ignoring key case.

    Matroska writers are inconsistent about tag case ("title", "TITLE",
    "Title"), so every tag read goes through this helper.

    Args:
        tags: Tag map from the probe report.
        key: Tag name to look up.

    Returns:
        The tag value, or None if no key matches.
    """
    if key in tags:
        return tags[key]
    folded = key.casefold()
    for name, value in tags.items():
        if name.casefold() == folded:
            return value
    return None


@dataclass(frozen=True)
class MediaFormat:
    """Container-level metadata from the probe report."""

    filename: str | None = None
    nb_streams: int = 0
    format_name: str | None = None
    format_long_name: str | None = None
    start_time: Decimal | None = None
    duration: Decimal | None = None
    size: int | None = None
    bit_rate: int | None = None
    tags: TagMap = field(default_factory=dict)
    raw: str = ""

    @property
    def title(self) -> str | None:
        """Container title from the "title" tag."""
        return lookup_tag(self.tags, "title")


@dataclass(frozen=True)
class MediaStream:
    """One elementary stream within a container.

    ``index`` is the absolute stream index inside the container. It is the
    only identifier other components use to refer to a source stream.
    """

    index: int
    codec_type: str
    codec_name: str | None = None
    codec_long_name: str | None = None
    profile: str | None = None
    channels: int | None = None
    duration: timedelta = timedelta(0)
    tags: TagMap = field(default_factory=dict)
    # Probe fields outside the common stream shape (width, sample_rate, ...)
    extra: Mapping[str, Any] = field(default_factory=dict)
    raw: str = ""

    @property
    def language(self) -> str | None:
        """Stream language from the "language" tag."""
        return lookup_tag(self.tags, "language")

    @property
    def title(self) -> str | None:
        """Stream title from the "title" tag."""
        return lookup_tag(self.tags, "title")

    @property
    def is_audio(self) -> bool:
        return self.codec_type.casefold() == "audio"


@dataclass(frozen=True)
class MediaChapter:
    """A chapter marker."""

    id: str
    start_time: Decimal | None = None
    end_time: Decimal | None = None
    tags: TagMap = field(default_factory=dict)
    raw: str = ""

    @property
    def title(self) -> str | None:
        """Chapter title from the "title" tag."""
        return lookup_tag(self.tags, "title")


@dataclass(frozen=True)
class MediaFile:
    """Aggregate root for one probe invocation.

    Streams and chapters keep the order the probe reported them in, which
    is not necessarily grouped by stream type.
    """

    path: Path
    format: MediaFormat
    streams: tuple[MediaStream, ...] = ()
    chapters: tuple[MediaChapter, ...] = ()
    raw: str = ""

    def streams_of_type(self, codec_type: str) -> list[MediaStream]:
        """Return streams of a given type in probe order.

        Args:
            codec_type: Stream type such as "video", "audio" or "subtitle".

        Returns:
            Matching streams (may be empty).
        """
        folded = codec_type.casefold()
        return [s for s in self.streams if s.codec_type.casefold() == folded]

    @property
    def duration_ms(self) -> int | None:
        """Container duration in milliseconds, or None if unknown."""
        if self.format.duration is None:
            return None
        return int(self.format.duration * 1000)
