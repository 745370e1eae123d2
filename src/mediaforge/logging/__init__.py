"""Structured logging module for mediaforge.

Provides configurable logging with JSON format support, file rotation,
and per-conversion context tags.
"""

from mediaforge.logging.config import configure_logging
from mediaforge.logging.context import (
    ConversionContextFilter,
    conversion_context,
    get_conversion_context,
)
from mediaforge.logging.handlers import JSONFormatter

__all__ = [
    "ConversionContextFilter",
    "JSONFormatter",
    "configure_logging",
    "conversion_context",
    "get_conversion_context",
]
