"""JSON log formatting for mediaforge."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Record attributes copied into "context", in output order. Set by the
# conversion context filter or passed as ``extra=`` by mediaforge modules.
CONTEXT_FIELDS: tuple[str, ...] = (
    "file_path",
    "stage",
    "path",
    "command",
    "pass",
    "arg_count",
    "exit_code",
    "elapsed_seconds",
    "timeout_seconds",
)


class JSONFormatter(logging.Formatter):
    """Render each record as a single-line JSON object.

    Output keys are ``timestamp`` (UTC, ISO-8601), ``level``, ``logger``,
    ``message``, then ``context`` and ``exception`` when there is anything
    to put in them. Values that JSON cannot encode are written with str().
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = {
            name: getattr(record, name)
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        }
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)
