"""Audio track mappings and video encoding settings.

Both are closed unions of frozen dataclasses. Consumers dispatch on the
concrete class with isinstance and raise TypeError for anything else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from mediaforge.core.codecs import DEFAULT_PIXEL_FORMAT, default_audio_bitrate


@dataclass(frozen=True)
class CopyAudioTrackMapping:
    """Copy a source audio stream bit-for-bit."""

    source_stream: int
    source_index: int
    destination_index: int
    title: str | None = None

    def __str__(self) -> str:
        return (
            f"Audio stream {self.source_index} → copy "
            f"(→ index {self.destination_index}) [Copy]"
        )


@dataclass(frozen=True)
class EncodeAudioTrackMapping:
    """Re-encode a source audio stream.

    ``destination_bitrate`` is in kbit/s; 0 means "derive from the
    channel count".
    """

    source_stream: int
    source_index: int
    destination_index: int
    destination_codec: str
    destination_bitrate: int = 0
    destination_channels: int = 0
    title: str | None = None

    @property
    def effective_bitrate(self) -> int:
        """Explicit bitrate, or the channel-count default when it is 0.

        Raises:
            UnsupportedChannelLayoutError: If no default exists for the
                channel count.
        """
        if self.destination_bitrate > 0:
            return self.destination_bitrate
        return default_audio_bitrate(self.destination_channels)

    def __str__(self) -> str:
        bitrate = (
            f"{self.destination_bitrate}k" if self.destination_bitrate else "auto"
        )
        return (
            f"Audio stream {self.source_index} → {self.destination_codec} "
            f"{bitrate} {self.destination_channels}ch "
            f"(→ index {self.destination_index}) [Encode]"
        )


AudioTrackMapping = Union[CopyAudioTrackMapping, EncodeAudioTrackMapping]


@dataclass(frozen=True)
class ConstantRateVideoEncodingSettings:
    """Constant-quality (CRF) video settings. Always single pass."""

    codec: str
    preset: str
    codec_profile: str | None = None
    tune: str | None = None
    crf: int = 23
    extra_arguments: tuple[str, ...] = ()
    pixel_format: str = DEFAULT_PIXEL_FORMAT

    @property
    def is_single_pass(self) -> bool:
        return True

    @property
    def passes(self) -> tuple[int, ...]:
        return (1,)

    def __str__(self) -> str:
        return f"{self.codec} CRF {self.crf} (preset {self.preset})"


@dataclass(frozen=True)
class VariableRateVideoEncodingSettings:
    """Target-bitrate video settings. Always two pass.

    ``bitrate`` is in kbit/s.
    """

    codec: str
    preset: str
    bitrate: int
    codec_profile: str | None = None
    tune: str | None = None
    pixel_format: str = DEFAULT_PIXEL_FORMAT

    @property
    def is_single_pass(self) -> bool:
        return False

    @property
    def passes(self) -> tuple[int, ...]:
        return (1, 2)

    def __str__(self) -> str:
        return f"{self.codec} {self.bitrate}k two-pass (preset {self.preset})"


VideoEncodingSettings = Union[
    ConstantRateVideoEncodingSettings, VariableRateVideoEncodingSettings
]
