"""Pydantic model for user-supplied encoding options.

CLI flags and config values are validated here before they become one of
the frozen VideoEncodingSettings variants.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mediaforge.core.codecs import DEFAULT_PIXEL_FORMAT
from mediaforge.domain.encoding import (
    ConstantRateVideoEncodingSettings,
    VariableRateVideoEncodingSettings,
    VideoEncodingSettings,
)


class EncodingOptions(BaseModel):
    """Video encoding options: exactly one of ``crf`` or ``bitrate``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    codec: str = Field(min_length=1)
    preset: str = "medium"
    profile: str | None = None
    tune: str | None = None
    crf: int | None = Field(default=None, ge=0, le=51)
    bitrate: int | None = Field(default=None, gt=0)
    pixel_format: str = DEFAULT_PIXEL_FORMAT
    extra_arguments: tuple[str, ...] = ()

    @field_validator("codec", "preset")
    @classmethod
    def strip_required(cls, v: str) -> str:
        """Reject whitespace-only values."""
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("profile", "tune")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat blank optional values as unset."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def check_rate_control(self) -> EncodingOptions:
        """Require exactly one rate control mode."""
        if (self.crf is None) == (self.bitrate is None):
            raise ValueError("specify exactly one of crf or bitrate")
        if self.bitrate is not None and self.extra_arguments:
            raise ValueError("extra arguments are only supported with crf")
        return self

    def to_settings(self) -> VideoEncodingSettings:
        """Convert to the matching VideoEncodingSettings variant."""
        if self.crf is not None:
            return ConstantRateVideoEncodingSettings(
                codec=self.codec,
                preset=self.preset,
                codec_profile=self.profile,
                tune=self.tune,
                crf=self.crf,
                extra_arguments=self.extra_arguments,
                pixel_format=self.pixel_format,
            )
        assert self.bitrate is not None
        return VariableRateVideoEncodingSettings(
            codec=self.codec,
            preset=self.preset,
            codec_profile=self.profile,
            tune=self.tune,
            bitrate=self.bitrate,
            pixel_format=self.pixel_format,
        )
