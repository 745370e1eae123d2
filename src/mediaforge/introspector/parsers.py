"""Pure parsing functions for ffprobe JSON output.

These functions transform ffprobe JSON data into mediaforge domain
objects. They perform no I/O and keep no state, so they are safe to call
from any thread.
"""

import json
import logging
import re
from collections.abc import Mapping
from datetime import timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from mediaforge.domain.models import (
    MediaChapter,
    MediaFile,
    MediaFormat,
    MediaStream,
    lookup_tag,
)
from mediaforge.exceptions import MalformedInputError
from mediaforge.introspector.schema import (
    ProbeChapter,
    ProbeFormat,
    ProbeReport,
    ProbeStream,
)

logger = logging.getLogger(__name__)

JsonInput = str | Mapping[str, Any]

_ModelT = TypeVar("_ModelT", bound=BaseModel)

# [h:]mm:ss with two-digit minute and second fields.
_CLOCK_PATTERN = re.compile(r"^(?:([0-9]+):)?([0-5][0-9]):([0-5][0-9])$")
_DIGITS_PATTERN = re.compile(r"^[0-9]+$")

_NANOS_PER_SECOND = 1_000_000_000
_NANOS_PER_MICROSECOND = 1_000


def _load_object(data: JsonInput, what: str) -> tuple[dict[str, Any], str]:
    """Decode a JSON object and return it with its raw text.

    Args:
        data: JSON text or an already decoded mapping.
        what: Description used in error messages.

    Returns:
        Tuple of (decoded object, raw JSON text).

    Raises:
        MalformedInputError: If the input is blank, not JSON, or not an object.
    """
    if isinstance(data, Mapping):
        obj = dict(data)
        return obj, json.dumps(obj)

    if not isinstance(data, str) or not data.strip():
        raise MalformedInputError(f"Empty {what} JSON")

    try:
        obj = json.loads(data)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"Invalid {what} JSON: {e}") from e

    if not isinstance(obj, dict):
        raise MalformedInputError(
            f"Expected a JSON object for {what}, got {type(obj).__name__}"
        )
    return obj, data


def _validate(model: type[_ModelT], obj: dict[str, Any], what: str) -> _ModelT:
    try:
        return model.model_validate(obj)
    except ValidationError as e:
        raise MalformedInputError(f"Invalid {what}: {e}") from e


def _fraction_to_nanoseconds(digits: str) -> int:
    """Interpret the digits after the decimal point as nanoseconds.

    ffprobe writes fractions with anywhere from 1 to 9 digits, so the
    digit count decides the magnitude:

    - 1 digit: hundredths (digit x 10,000,000 ns), so ".5" is 50 ms
    - 2-6 digits: ordinary fractional seconds ("0.<digits>")
    - 7-9 digits: literal nanoseconds
    - more than 9: the first 9 digits as nanoseconds
    """
    width = len(digits)
    if width == 1:
        return int(digits) * 10_000_000
    if width <= 6:
        return int(Decimal(f"0.{digits}") * _NANOS_PER_SECOND)
    return int(digits[:9])


def parse_duration(value: str) -> timedelta:
    """Parse an ffprobe duration string such as "00:43:29.481875000".

    The integral part is mm:ss or hh:mm:ss with two-digit fields. A
    fractional part that is not all digits is ignored and only the clock
    time is returned. Nanoseconds are truncated to microseconds, the
    smallest unit timedelta holds.

    Args:
        value: Duration string.

    Returns:
        Parsed duration.

    Raises:
        MalformedInputError: If the string is blank, has more than one
            ".", or the clock part is not a valid time.
    """
    if value is None or not value.strip():
        raise MalformedInputError("Duration string is empty")

    text = value.strip()
    parts = text.split(".")
    if len(parts) > 2:
        raise MalformedInputError(f"Invalid duration format: {value!r}")

    match = _CLOCK_PATTERN.match(parts[0])
    if match is None:
        raise MalformedInputError(f"Invalid time format: {value!r}")

    hours, minutes, seconds = match.groups()
    duration = timedelta(
        hours=int(hours) if hours else 0,
        minutes=int(minutes),
        seconds=int(seconds),
    )

    if len(parts) == 1:
        return duration

    fraction = parts[1]
    if not _DIGITS_PATTERN.match(fraction):
        logger.debug("Ignoring non-numeric duration fraction in %r", value)
        return duration

    nanoseconds = _fraction_to_nanoseconds(fraction)
    return duration + timedelta(microseconds=nanoseconds // _NANOS_PER_MICROSECOND)


def parse_format(data: JsonInput) -> MediaFormat:
    """Parse the ffprobe "format" object.

    Args:
        data: JSON text or decoded mapping of the format object.

    Returns:
        MediaFormat for the container.

    Raises:
        MalformedInputError: If the input is not a valid format object.
    """
    obj, raw = _load_object(data, "format")
    model = _validate(ProbeFormat, obj, "format")
    return MediaFormat(
        filename=model.filename,
        nb_streams=model.nb_streams,
        format_name=model.format_name,
        format_long_name=model.format_long_name,
        start_time=model.start_time,
        duration=model.duration,
        size=model.size,
        bit_rate=model.bit_rate,
        tags=dict(model.tags),
        raw=raw,
    )


def _resolve_stream_duration(index: int, tags: dict[str, str]) -> timedelta:
    """Read a stream duration from its "DURATION-<language>" tag.

    Matroska muxers write per-language duration tags; streams without a
    language or without the tag get a zero duration.
    """
    language = lookup_tag(tags, "language")
    if not language:
        return timedelta(0)
    tag = lookup_tag(tags, f"DURATION-{language}")
    if not tag:
        return timedelta(0)
    try:
        return parse_duration(tag)
    except MalformedInputError as e:
        logger.warning("Stream %d has an unreadable duration tag: %s", index, e)
        return timedelta(0)


def parse_stream(data: JsonInput) -> MediaStream:
    """Parse one entry of the ffprobe "streams" array.

    Fields outside the common stream shape (width, sample_rate,
    channel_layout, ...) are kept in ``MediaStream.extra``.

    Args:
        data: JSON text or decoded mapping of the stream object.

    Returns:
        MediaStream for the entry.

    Raises:
        MalformedInputError: If the input is not a valid stream object.
    """
    obj, raw = _load_object(data, "stream")
    model = _validate(ProbeStream, obj, "stream")
    tags = dict(model.tags)
    return MediaStream(
        index=model.index,
        codec_type=model.codec_type,
        codec_name=model.codec_name,
        codec_long_name=model.codec_long_name,
        profile=model.profile,
        channels=model.channels,
        duration=_resolve_stream_duration(model.index, tags),
        tags=tags,
        extra=dict(model.model_extra or {}),
        raw=raw,
    )


def parse_chapter(data: JsonInput) -> MediaChapter:
    """Parse one entry of the ffprobe "chapters" array.

    Args:
        data: JSON text or decoded mapping of the chapter object.

    Returns:
        MediaChapter for the entry.

    Raises:
        MalformedInputError: If the input is not a valid chapter object.
    """
    obj, raw = _load_object(data, "chapter")
    model = _validate(ProbeChapter, obj, "chapter")
    return MediaChapter(
        id=model.id,
        start_time=model.start_time,
        end_time=model.end_time,
        tags=dict(model.tags),
        raw=raw,
    )


def parse_file(path: Path | str, data: JsonInput) -> MediaFile:
    """Parse a complete ffprobe report.

    Args:
        path: Path of the probed file.
        data: Report produced with -show_format -show_streams
            (and optionally -show_chapters).

    Returns:
        MediaFile with streams and chapters in probe order.

    Raises:
        MalformedInputError: If the report is blank, not JSON, or lacks
            the "format" or "streams" members.
    """
    obj, raw = _load_object(data, "probe report")
    report = _validate(ProbeReport, obj, "probe report")

    media_file = MediaFile(
        path=Path(path),
        format=parse_format(report.format),
        streams=tuple(parse_stream(s) for s in report.streams),
        chapters=tuple(parse_chapter(c) for c in report.chapters),
        raw=raw,
    )
    logger.debug(
        "Parsed %s: %d stream(s), %d chapter(s)",
        media_file.path,
        len(media_file.streams),
        len(media_file.chapters),
    )
    return media_file
