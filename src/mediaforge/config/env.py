"""Typed access to MEDIAFORGE_* environment variables.

The reader takes an optional mapping in place of os.environ so that tests
can pass a plain dict.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class EnvReader:
    """Read and convert environment variables.

    Unset and empty variables resolve to the caller's default. A value
    that fails conversion is logged and also resolves to the default, so
    one bad variable never stops the program from starting.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = os.environ if env is None else env

    def _raw(self, var: str) -> str | None:
        value = self._env.get(var)
        return value if value else None

    def _convert(
        self, var: str, default: T | None, convert: Callable[[str], T], kind: str
    ) -> T | None:
        raw = self._raw(var)
        if raw is None:
            return default
        try:
            return convert(raw.strip())
        except ValueError:
            logger.warning("Ignoring %s=%r: not a valid %s", var, raw, kind)
            return default

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Return the variable as text."""
        raw = self._raw(var)
        return default if raw is None else raw

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Return the variable as an int, e.g. ``MEDIAFORGE_CRF=18``."""
        return self._convert(var, default, int, "integer")

    def get_float(self, var: str, default: float | None = None) -> float | None:
        """Return the variable as a float, e.g. a timeout in seconds."""
        return self._convert(var, default, float, "number")

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Return the variable as a flag.

        ``1``, ``true``, ``yes`` and ``on`` (any case) are true. Every
        other value is false.
        """
        raw = self._raw(var)
        if raw is None:
            return default
        return raw.strip().casefold() in _TRUE_VALUES

    def get_path(self, var: str, default: Path | None = None) -> Path | None:
        """Return the variable as a Path with ``~`` expanded."""
        raw = self._raw(var)
        if raw is None:
            return default
        return Path(raw).expanduser()
