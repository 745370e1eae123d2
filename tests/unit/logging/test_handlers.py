"""Unit tests for logging handlers and configuration."""

import json
import logging
import sys
from pathlib import Path

import pytest

from mediaforge.config.models import LoggingConfig
from mediaforge.logging.config import ROOT_LOGGER_NAME, configure_logging
from mediaforge.logging.context import ConversionContextFilter, conversion_context
from mediaforge.logging.handlers import JSONFormatter


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="mediaforge.executor.ffmpeg",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="ffmpeg failed for %s",
        args=("in.mkv",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "WARNING"
        assert data["logger"] == "mediaforge.executor.ffmpeg"
        assert data["message"] == "ffmpeg failed for in.mkv"
        assert data["timestamp"].endswith("+00:00")
        assert "context" not in data

    def test_extra_fields_in_context(self):
        record = make_record(exit_code=1, path=Path("/a"))
        data = json.loads(JSONFormatter().format(record))

        assert data["context"] == {"exit_code": 1, "path": "/a"}

    def test_conversion_context_fields(self):
        """Test that the filter's fields are reported without the text tag."""
        record = make_record()
        with conversion_context("/media/movie.mkv", "pass 2/2"):
            ConversionContextFilter().filter(record)

        data = json.loads(JSONFormatter().format(record))

        assert data["context"] == {"file_path": "/media/movie.mkv", "stage": "pass 2/2"}

    def test_exception(self):
        try:
            raise ValueError("bad value")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert "ValueError: bad value" in data["exception"]


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_stderr_by_default(self):
        logger = configure_logging(LoggingConfig(level="debug"))

        assert logger.name == ROOT_LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_reconfigure_replaces_handlers(self):
        configure_logging(LoggingConfig())
        logger = configure_logging(LoggingConfig(level="error"))

        assert len(logger.handlers) == 1
        assert logger.level == logging.ERROR

    def test_json_file(self, tmp_path):
        log_file = tmp_path / "logs" / "mediaforge.log"
        logger = configure_logging(LoggingConfig(file=log_file, format="json"))

        with conversion_context("/media/movie.mkv", "convert"):
            logging.getLogger("mediaforge.test").info("hello %s", "world")
        for handler in logger.handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().splitlines()[-1])
        assert entry["message"] == "hello world"
        assert entry["context"]["file_path"] == "/media/movie.mkv"

    def test_text_file_with_context_tag(self, tmp_path):
        log_file = tmp_path / "mediaforge.log"
        logger = configure_logging(LoggingConfig(file=log_file))

        with conversion_context("/media/movie.mkv", "pass 1/2"):
            logging.getLogger("mediaforge.test").info("started")
        for handler in logger.handlers:
            handler.flush()

        assert "[movie.mkv pass 1/2] mediaforge.test - INFO - started" in (
            log_file.read_text()
        )

    def test_file_and_stderr(self, tmp_path):
        logger = configure_logging(
            LoggingConfig(file=tmp_path / "x.log", include_stderr=True)
        )

        assert len(logger.handlers) == 2

    def test_unwritable_file_falls_back_to_stderr(self, tmp_path, capsys):
        blocker = tmp_path / "file"
        blocker.write_text("")

        logger = configure_logging(LoggingConfig(file=blocker / "x.log"))

        assert len(logger.handlers) == 1
        assert "Could not open log file" in capsys.readouterr().err

    @pytest.mark.parametrize("level", ["DEBUG", "Warning"])
    def test_level_is_case_insensitive(self, level):
        logger = configure_logging(LoggingConfig(level=level))

        assert logger.level == getattr(logging, level.upper())
