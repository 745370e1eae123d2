"""Unit tests for codec tables."""

import pytest

from mediaforge.core.codecs import (
    default_audio_bitrate,
    normalize_video_codec,
    require_codec,
)
from mediaforge.exceptions import MissingCodecError, UnsupportedChannelLayoutError


class TestDefaultAudioBitrate:
    """Tests for default_audio_bitrate function."""

    @pytest.mark.parametrize(
        ("channels", "bitrate"), [(1, 80), (2, 160), (6, 384), (8, 512)]
    )
    def test_known_layouts(self, channels, bitrate):
        assert default_audio_bitrate(channels) == bitrate

    @pytest.mark.parametrize("channels", [0, 3, 4, 5, 7, None])
    def test_unknown_layouts_raise(self, channels):
        with pytest.raises(UnsupportedChannelLayoutError):
            default_audio_bitrate(channels)


class TestNormalizeVideoCodec:
    """Tests for normalize_video_codec function."""

    def test_x264_alias(self):
        assert normalize_video_codec("x264") == "libx264"

    @pytest.mark.parametrize("codec", ["libx264", "libx265", "x265", "h264_nvenc"])
    def test_other_names_unchanged(self, codec):
        """Test that only x264 is aliased."""
        assert normalize_video_codec(codec) == codec


class TestRequireCodec:
    """Tests for require_codec function."""

    def test_returns_name(self):
        assert require_codec("aac") == "aac"

    @pytest.mark.parametrize("codec", [None, "", "   "])
    def test_blank_raises(self, codec):
        with pytest.raises(MissingCodecError):
            require_codec(codec)
