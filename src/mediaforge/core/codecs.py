"""Codec tables shared by the mapping engine and the argument builder."""

from __future__ import annotations

from mediaforge.exceptions import MissingCodecError, UnsupportedChannelLayoutError

# Default AAC bitrates in kbit/s, keyed by channel count.
DEFAULT_AUDIO_BITRATES: dict[int, int] = {
    1: 80,
    2: 160,
    6: 384,
    8: 512,
}

# Lossless (or lossless-capable) audio codecs that are stream-copied
# instead of re-encoded when they carry a surround layout.
LOSSLESS_AUDIO_CODECS: frozenset[str] = frozenset({"dts", "truehd"})

# User-facing encoder aliases mapped to ffmpeg encoder names.
_VIDEO_CODEC_ALIASES: dict[str, str] = {
    "x264": "libx264",
}

DEFAULT_PIXEL_FORMAT = "yuv420p"


def default_audio_bitrate(channels: int | None) -> int:
    """Get the default audio bitrate for a channel count.

    Args:
        channels: Number of audio channels.

    Returns:
        Bitrate in kbit/s.

    Raises:
        UnsupportedChannelLayoutError: If the channel count has no default.
    """
    try:
        return DEFAULT_AUDIO_BITRATES[channels]  # type: ignore[index]
    except KeyError:
        raise UnsupportedChannelLayoutError(channels) from None


def normalize_video_codec(codec: str) -> str:
    """Map a user-facing codec alias to the ffmpeg encoder name.

    Only "x264" has an alias; every other name passes through unchanged.

    Args:
        codec: Codec name as given by the user.

    Returns:
        Encoder name for ``-c:v``.
    """
    return _VIDEO_CODEC_ALIASES.get(codec, codec)


def require_codec(codec: str | None) -> str:
    """Return the codec name, rejecting blank values.

    Raises:
        MissingCodecError: If the codec is None, empty or whitespace.
    """
    if codec is None or not codec.strip():
        raise MissingCodecError()
    return codec
