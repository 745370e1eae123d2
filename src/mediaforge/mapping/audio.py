"""Audio track mapping engine.

Decides, for every audio stream in the wanted language, whether it is
copied or re-encoded to AAC, and which output slot it lands in.
"""

from __future__ import annotations

import dataclasses
import logging

from mediaforge.core.codecs import LOSSLESS_AUDIO_CODECS, default_audio_bitrate
from mediaforge.domain.encoding import (
    AudioTrackMapping,
    CopyAudioTrackMapping,
    EncodeAudioTrackMapping,
)
from mediaforge.domain.models import MediaFile, MediaStream

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "eng"
ENCODE_CODEC = "aac"

# Minimum channel count treated as surround.
SURROUND_CHANNELS = 6


def should_copy(stream: MediaStream) -> bool:
    """Check whether an audio stream is kept bit-for-bit.

    DTS and TrueHD surround tracks are copied, unless the profile is plain
    "DTS" (the lossy core), which is re-encoded like any other track.

    Args:
        stream: Audio stream to check.

    Returns:
        True if the stream should be copied.
    """
    codec = (stream.codec_name or "").casefold()
    profile = (stream.profile or "").casefold()
    return (
        codec in LOSSLESS_AUDIO_CODECS
        and (stream.channels or 0) >= SURROUND_CHANNELS
        and profile != "dts"
    )


def _build_mapping(stream: MediaStream, destination_index: int) -> AudioTrackMapping:
    if should_copy(stream):
        return CopyAudioTrackMapping(
            source_stream=0,
            source_index=stream.index,
            destination_index=destination_index,
            title=stream.title,
        )
    channels = stream.channels or 0
    return EncodeAudioTrackMapping(
        source_stream=0,
        source_index=stream.index,
        destination_index=destination_index,
        destination_codec=ENCODE_CODEC,
        destination_bitrate=default_audio_bitrate(channels),
        destination_channels=channels,
        title=stream.title,
    )


def _apply_surround_swap(mappings: list[AudioTrackMapping]) -> list[AudioTrackMapping]:
    """Put a surround AAC encode ahead of a preceding lossless copy.

    Players usually default to the first audio track, so when the first
    mapping copies a lossless track and the second encodes the same mix
    to 6+ channel AAC, the two swap destination slots. List order and
    source indices are left as they are.
    """
    if len(mappings) < 2:
        return mappings

    first, second = mappings[0], mappings[1]
    if not isinstance(first, CopyAudioTrackMapping):
        return mappings
    if not isinstance(second, EncodeAudioTrackMapping):
        return mappings
    if second.destination_codec.casefold() != ENCODE_CODEC:
        return mappings
    if second.destination_channels < SURROUND_CHANNELS:
        return mappings
    if first.source_index >= second.source_index:
        return mappings

    logger.debug(
        "Swapping destination slots of audio streams %d and %d",
        first.source_index,
        second.source_index,
    )
    swapped = list(mappings)
    swapped[0] = dataclasses.replace(
        first, destination_index=second.destination_index
    )
    swapped[1] = dataclasses.replace(
        second, destination_index=first.destination_index
    )
    return swapped


def create_audio_mappings(
    media_file: MediaFile, language: str = DEFAULT_LANGUAGE
) -> list[AudioTrackMapping]:
    """Plan audio track mappings for a media file.

    Only audio streams tagged with ``language`` take part; the result is
    empty (not an error) when there are none. Destination indices run from
    0 in probe order before the surround swap is applied.

    Args:
        media_file: Parsed media file.
        language: Language tag to keep, compared case-insensitively.

    Returns:
        Mappings in source stream order.

    Raises:
        UnsupportedChannelLayoutError: If a re-encoded stream has a channel
            count without a default bitrate.
    """
    wanted = language.casefold()
    streams = [
        s
        for s in media_file.streams
        if s.is_audio and (s.language or "").casefold() == wanted
    ]
    if not streams:
        logger.info("No %s audio streams in %s", language, media_file.path)
        return []

    mappings = [_build_mapping(stream, i) for i, stream in enumerate(streams)]
    return _apply_surround_swap(mappings)
