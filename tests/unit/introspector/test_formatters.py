"""Unit tests for introspector formatters."""

import json

from mediaforge.domain.encoding import CopyAudioTrackMapping, EncodeAudioTrackMapping
from mediaforge.introspector.formatters import (
    format_human,
    format_json,
    format_mappings_human,
    format_mappings_json,
    format_stream_line,
)
from mediaforge.introspector.parsers import parse_file

COPY = CopyAudioTrackMapping(source_stream=0, source_index=1, destination_index=1)
ENCODE = EncodeAudioTrackMapping(
    source_stream=0,
    source_index=2,
    destination_index=0,
    destination_codec="aac",
    destination_bitrate=384,
    destination_channels=6,
    title="Surround",
)


class TestFormatHuman:
    """Tests for format_human function."""

    def test_groups_streams_by_type(self, movie_report_text):
        output = format_human(parse_file("/media/movie.mkv", movie_report_text))

        assert "File: /media/movie.mkv" in output
        assert "Container: matroska" in output
        assert "Title: Movie" in output
        assert output.index("  Video:") < output.index("  Audio:")
        assert output.index("  Audio:") < output.index("  Subtitles:")
        assert "Chapters: 2" in output

    def test_stream_line(self, movie_report_text):
        media_file = parse_file("/media/movie.mkv", movie_report_text)

        assert format_stream_line(media_file.streams[1]) == (
            '#1 [audio] dts DTS-HD MA 6ch eng "Surround 5.1"'
        )
        assert format_stream_line(media_file.streams[0]) == (
            "#0 [video] h264 High 1920x1080 eng"
        )


class TestFormatJson:
    """Tests for format_json function."""

    def test_structure(self, movie_report_text):
        media_file = parse_file("/media/movie.mkv", movie_report_text)
        data = json.loads(format_json(media_file))

        assert data["file"] == "/media/movie.mkv"
        assert data["duration_seconds"] == 2609.48
        assert [s["index"] for s in data["streams"]] == [0, 1, 2, 3, 4]
        assert data["streams"][1]["channels"] == 6
        assert data["chapters"][0] == {"id": "1", "title": "Chapter 1"}


class TestFormatMappings:
    """Tests for the mapping plan formatters."""

    def test_human(self):
        assert format_mappings_human([COPY, ENCODE]) == (
            "Audio stream 1 → copy (→ index 1) [Copy]\n"
            "Audio stream 2 → aac 384k 6ch (→ index 0) [Encode]"
        )

    def test_human_empty(self):
        assert format_mappings_human([]) == "No audio tracks selected."

    def test_json(self):
        data = json.loads(format_mappings_json([COPY, ENCODE]))

        assert data[0] == {
            "action": "copy",
            "source": "0:a:1",
            "destination_index": 1,
            "title": None,
        }
        assert data[1]["action"] == "encode"
        assert data[1]["bitrate"] == 384
        assert data[1]["title"] == "Surround"
