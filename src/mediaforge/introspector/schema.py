"""Pydantic models describing the ffprobe JSON report.

The models only validate and coerce; mediaforge.introspector.parsers turns
them into the frozen domain models. Property names are matched without
regard to case, and numeric fields accept both JSON numbers and numeric
strings (ffprobe emits "duration": "2609.480000").
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class _ProbeModel(BaseModel):
    """Base for probe report objects."""

    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def lowercase_keys(cls, data: Any) -> Any:
        """Match property names case-insensitively."""
        if isinstance(data, dict):
            return {
                (k.lower() if isinstance(k, str) else k): v for k, v in data.items()
            }
        return data

    @field_validator("tags", mode="before", check_fields=False)
    @classmethod
    def default_tags(cls, v: Any) -> Any:
        """Treat a null tags object as empty."""
        return {} if v is None else v


class ProbeFormat(_ProbeModel):
    """The report's "format" object."""

    filename: str | None = None
    nb_streams: int = 0
    format_name: str | None = None
    format_long_name: str | None = None
    start_time: Decimal | None = None
    duration: Decimal | None = None
    size: int | None = None
    bit_rate: int | None = None
    tags: dict[str, str] = Field(default_factory=dict)


class ProbeStream(_ProbeModel):
    """One entry of the report's "streams" array."""

    index: int
    codec_type: str = ""
    codec_name: str | None = None
    codec_long_name: str | None = None
    profile: str | None = None
    channels: int | None = None
    tags: dict[str, str] = Field(default_factory=dict)


class ProbeChapter(_ProbeModel):
    """One entry of the report's "chapters" array."""

    id: str
    start_time: Decimal | None = None
    end_time: Decimal | None = None
    tags: dict[str, str] = Field(default_factory=dict)


class ProbeReport(_ProbeModel):
    """Top-level report. Streams and chapters stay as raw objects.

    Each fragment is parsed separately so it can keep its own raw text.
    """

    format: dict[str, Any]
    streams: list[dict[str, Any]]
    chapters: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("chapters", mode="before")
    @classmethod
    def default_chapters(cls, v: Any) -> Any:
        """Treat a null chapters array as empty."""
        return [] if v is None else v
