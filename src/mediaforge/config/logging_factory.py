"""Combine configured logging settings with command-line overrides."""

from __future__ import annotations

import dataclasses
from pathlib import Path

from mediaforge.config.models import LoggingConfig


def build_logging_config(
    base: LoggingConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
    include_stderr: bool | None = None,
) -> LoggingConfig:
    """Return ``base`` with every override that is not None applied.

    The copy is validated again, so an unknown level or format raises
    ValueError.
    """
    overrides = {
        "level": level,
        "file": file,
        "format": format,
        "include_stderr": include_stderr,
    }
    return dataclasses.replace(
        base, **{name: value for name, value in overrides.items() if value is not None}
    )
