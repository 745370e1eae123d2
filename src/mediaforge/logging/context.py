"""Conversion context for structured logging.

A conversion sets the file being converted and the current stage
("probe", "pass 1", "export", ...) in contextvars; ConversionContextFilter
copies them onto every log record emitted by the same thread while the
context is active.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_file_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_path", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


def get_conversion_context() -> tuple[str | None, str | None]:
    """Get the current conversion context.

    Returns:
        Tuple of (file_path, stage), either may be None.
    """
    return _file_path.get(), _stage.get()


@contextmanager
def conversion_context(
    file_path: Path | str, stage: str | None = None
) -> Generator[None, None, None]:
    """Context manager that tags log records with a file and stage.

    Restores the previous context on exit, so contexts nest.

    Args:
        file_path: File being processed.
        stage: Optional processing stage.

    Example:
        with conversion_context("/media/movie.mkv", "pass 1"):
            logger.info("Starting")  # Tagged [movie.mkv pass 1]
    """
    file_token = _file_path.set(str(file_path))
    stage_token = _stage.set(stage)
    try:
        yield
    finally:
        _stage.reset(stage_token)
        _file_path.reset(file_token)


class ConversionContextFilter(logging.Filter):
    """Logging filter that injects conversion context into log records.

    Adds ``file_path`` and ``stage`` for JSON output and a compact
    ``context_tag`` such as ``[movie.mkv pass 1] `` for text output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject conversion context into the record. Never filters."""
        file_path, stage = get_conversion_context()
        record.file_path = file_path
        record.stage = stage

        if file_path is None:
            record.context_tag = ""
        else:
            label = Path(file_path).name
            if stage:
                label = f"{label} {stage}"
            record.context_tag = f"[{label}] "
        return True
