"""Introspector module for mediaforge.

This module turns ffprobe reports into MediaFile models:

- FFprobeIntrospector: runs ffprobe and parses its report
- parse_format / parse_stream / parse_chapter / parse_file: pure parsers
- parse_duration: ffprobe duration strings to timedelta

Formatters for parsed files:
- format_human: Human-readable output
- format_json: JSON output
"""

from mediaforge.introspector.ffprobe import DEFAULT_PROBE_FLAGS, FFprobeIntrospector
from mediaforge.introspector.formatters import (
    format_human,
    format_json,
    format_mappings_human,
    format_mappings_json,
)
from mediaforge.introspector.parsers import (
    parse_chapter,
    parse_duration,
    parse_file,
    parse_format,
    parse_stream,
)

__all__ = [
    "DEFAULT_PROBE_FLAGS",
    "FFprobeIntrospector",
    "format_human",
    "format_json",
    "format_mappings_human",
    "format_mappings_json",
    "parse_chapter",
    "parse_duration",
    "parse_file",
    "parse_format",
    "parse_stream",
]
