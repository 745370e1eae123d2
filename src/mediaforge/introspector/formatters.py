"""Formatters for parsed media files and audio mapping plans.

Shared by the inspect and mappings CLI commands.
"""

import json
from collections.abc import Sequence
from typing import Any

from mediaforge.domain.encoding import AudioTrackMapping, EncodeAudioTrackMapping
from mediaforge.domain.models import MediaFile, MediaStream

_TYPE_HEADINGS: dict[str, str] = {
    "video": "Video",
    "audio": "Audio",
    "subtitle": "Subtitles",
}


def format_stream_line(stream: MediaStream) -> str:
    """Format a single stream for human output.

    Args:
        stream: The stream to format.

    Returns:
        Formatted stream line, e.g. ``#1 [audio] dts DTS-HD MA 6ch eng "Main"``.
    """
    parts = [f"#{stream.index}", f"[{stream.codec_type}]"]

    if stream.codec_name:
        parts.append(stream.codec_name)
    if stream.profile:
        parts.append(stream.profile)

    if stream.codec_type == "video":
        width = stream.extra.get("width")
        height = stream.extra.get("height")
        if width and height:
            parts.append(f"{width}x{height}")

    if stream.channels:
        parts.append(f"{stream.channels}ch")

    if stream.language and stream.language != "und":
        parts.append(stream.language)

    if stream.title:
        parts.append(f'"{stream.title}"')

    return " ".join(parts)


def format_human(media_file: MediaFile) -> str:
    """Format a media file for human-readable output.

    Args:
        media_file: The parsed media file.

    Returns:
        Formatted string for terminal output.
    """
    lines: list[str] = [f"File: {media_file.path}"]

    fmt = media_file.format
    if fmt.format_name:
        lines.append(f"Container: {fmt.format_name.split(',')[0]}")
    if fmt.duration is not None:
        lines.append(f"Duration: {fmt.duration}s")
    if fmt.title:
        lines.append(f"Title: {fmt.title}")
    lines.append("")

    lines.append("Streams:")
    grouped: dict[str, list[MediaStream]] = {}
    for stream in media_file.streams:
        heading = _TYPE_HEADINGS.get(stream.codec_type, "Other")
        grouped.setdefault(heading, []).append(stream)
    for heading in ("Video", "Audio", "Subtitles", "Other"):
        if heading in grouped:
            lines.append(f"  {heading}:")
            for stream in grouped[heading]:
                lines.append(f"    {format_stream_line(stream)}")
    if not media_file.streams:
        lines.append("  (no streams found)")

    if media_file.chapters:
        lines.append("")
        lines.append(f"Chapters: {len(media_file.chapters)}")

    return "\n".join(lines)


def stream_to_dict(stream: MediaStream) -> dict[str, Any]:
    """Convert a MediaStream to a JSON-serializable dict."""
    return {
        "index": stream.index,
        "type": stream.codec_type,
        "codec": stream.codec_name,
        "profile": stream.profile,
        "channels": stream.channels,
        "language": stream.language,
        "title": stream.title,
        "duration_seconds": stream.duration.total_seconds(),
    }


def format_json(media_file: MediaFile) -> str:
    """Format a media file as JSON.

    Args:
        media_file: The parsed media file.

    Returns:
        JSON string.
    """
    fmt = media_file.format
    data = {
        "file": str(media_file.path),
        "container": fmt.format_name,
        "duration_seconds": float(fmt.duration) if fmt.duration is not None else None,
        "title": fmt.title,
        "streams": [stream_to_dict(s) for s in media_file.streams],
        "chapters": [
            {"id": c.id, "title": c.title} for c in media_file.chapters
        ],
    }
    return json.dumps(data, indent=2)


def mapping_to_dict(mapping: AudioTrackMapping) -> dict[str, Any]:
    """Convert an audio track mapping to a JSON-serializable dict."""
    data: dict[str, Any] = {
        "action": "encode" if isinstance(mapping, EncodeAudioTrackMapping) else "copy",
        "source": f"{mapping.source_stream}:a:{mapping.source_index}",
        "destination_index": mapping.destination_index,
        "title": mapping.title,
    }
    if isinstance(mapping, EncodeAudioTrackMapping):
        data["codec"] = mapping.destination_codec
        data["bitrate"] = mapping.destination_bitrate
        data["channels"] = mapping.destination_channels
    return data


def format_mappings_human(mappings: Sequence[AudioTrackMapping]) -> str:
    """Format a mapping plan, one mapping per line."""
    if not mappings:
        return "No audio tracks selected."
    return "\n".join(str(m) for m in mappings)


def format_mappings_json(mappings: Sequence[AudioTrackMapping]) -> str:
    """Format a mapping plan as a JSON array."""
    return json.dumps([mapping_to_dict(m) for m in mappings], indent=2)
