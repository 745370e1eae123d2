"""Domain models for mediaforge."""

from mediaforge.domain.encoding import (
    AudioTrackMapping,
    ConstantRateVideoEncodingSettings,
    CopyAudioTrackMapping,
    EncodeAudioTrackMapping,
    VariableRateVideoEncodingSettings,
    VideoEncodingSettings,
)
from mediaforge.domain.models import (
    MediaChapter,
    MediaFile,
    MediaFormat,
    MediaStream,
    lookup_tag,
)

__all__ = [
    "AudioTrackMapping",
    "ConstantRateVideoEncodingSettings",
    "CopyAudioTrackMapping",
    "EncodeAudioTrackMapping",
    "MediaChapter",
    "MediaFile",
    "MediaFormat",
    "MediaStream",
    "VariableRateVideoEncodingSettings",
    "VideoEncodingSettings",
    "lookup_tag",
]
