"""Tests for configuration loading and precedence."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from mediaforge.config.loader import (
    DEFAULT_CONFIG_FILE,
    get_config,
    get_default_config_path,
    load_config_file,
)
from mediaforge.config.logging_factory import build_logging_config
from mediaforge.config.models import ConversionConfig, LoggingConfig
from mediaforge.exceptions import ConfigurationError


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(
        """
[tools]
ffmpeg = "/opt/ffmpeg/bin/ffmpeg"
ffprobe_timeout = 30.0

[logging]
level = "debug"
format = "json"

[conversion]
codec = "libx264"
crf = 20
output_extension = "mkv"
audio_language = "fre"
"""
    )
    return path


class TestGetDefaultConfigPath:
    """Tests for get_default_config_path."""

    def test_default(self) -> None:
        """Should use ~/.mediaforge/config.toml when not overridden."""
        assert get_default_config_path(env={}) == DEFAULT_CONFIG_FILE

    def test_env_override(self, tmp_path: Path) -> None:
        """Should honor MEDIAFORGE_CONFIG_PATH."""
        path = tmp_path / "custom.toml"
        env = {"MEDIAFORGE_CONFIG_PATH": str(path)}
        assert get_default_config_path(env=env) == path


class TestLoadConfigFile:
    """Tests for load_config_file."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        """Should return an empty dict for a missing file."""
        assert load_config_file(tmp_path / "missing.toml") == {}

    def test_parses_toml(self, config_file: Path) -> None:
        """Should parse the TOML tables."""
        data = load_config_file(config_file)

        assert data["tools"]["ffmpeg"] == "/opt/ffmpeg/bin/ffmpeg"
        assert data["conversion"]["crf"] == 20

    def test_invalid_toml_raises(self, tmp_path: Path) -> None:
        """Should raise ConfigurationError for invalid TOML."""
        path = tmp_path / "bad.toml"
        path.write_text("[tools\nffmpeg = ")

        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            load_config_file(path)

    def test_reloads_when_modified(self, config_file: Path) -> None:
        """Should return cached data until the file's mtime changes."""
        first = load_config_file(config_file)
        assert load_config_file(config_file) is first

        config_file.write_text('[tools]\nffmpeg = "ffmpeg7"\n')
        stat = config_file.stat()
        os.utime(config_file, (stat.st_atime, stat.st_mtime + 10))

        assert load_config_file(config_file)["tools"]["ffmpeg"] == "ffmpeg7"


class TestGetConfig:
    """Tests for get_config precedence."""

    def test_defaults(self, tmp_path: Path) -> None:
        """Should use defaults without file or environment."""
        config = get_config(tmp_path / "missing.toml", env={})

        assert config.tools.ffmpeg == "ffmpeg"
        assert config.tools.ffprobe == "ffprobe"
        assert config.logging.level == "info"
        assert config.conversion == ConversionConfig()

    def test_file_values(self, config_file: Path) -> None:
        """Should apply values from the config file."""
        config = get_config(config_file, env={})

        assert config.tools.ffmpeg == "/opt/ffmpeg/bin/ffmpeg"
        assert config.tools.ffprobe_timeout == 30.0
        assert config.logging.level == "debug"
        assert config.logging.format == "json"
        assert config.conversion.codec == "libx264"
        assert config.conversion.crf == 20
        assert config.conversion.output_extension == ".mkv"
        assert config.conversion.audio_language == "fre"

    def test_env_overrides_file(self, config_file: Path, tmp_path: Path) -> None:
        """Should prefer MEDIAFORGE_* variables over file values."""
        env = {
            "MEDIAFORGE_FFMPEG_PATH": "/usr/local/bin/ffmpeg",
            "MEDIAFORGE_FFPROBE_PATH": "/usr/local/bin/ffprobe",
            "MEDIAFORGE_LOG_LEVEL": "warning",
            "MEDIAFORGE_LOG_FORMAT": "text",
            "MEDIAFORGE_LOG_FILE": str(tmp_path / "mf.log"),
            "MEDIAFORGE_CRF": "18",
            "MEDIAFORGE_PRESET": "slow",
        }

        config = get_config(config_file, env=env)

        assert config.tools.ffmpeg == "/usr/local/bin/ffmpeg"
        assert config.tools.ffprobe == "/usr/local/bin/ffprobe"
        assert config.logging.level == "warning"
        assert config.logging.format == "text"
        assert config.logging.file == tmp_path / "mf.log"
        assert config.conversion.crf == 18
        assert config.conversion.preset == "slow"

    def test_env_timeout_and_stderr(self, config_file: Path) -> None:
        """Should read the probe timeout and stderr mirror from the env."""
        env = {"MEDIAFORGE_FFPROBE_TIMEOUT": "5", "MEDIAFORGE_LOG_STDERR": "yes"}

        config = get_config(config_file, env=env)

        assert config.tools.ffprobe_timeout == 5.0
        assert config.logging.include_stderr is True

    def test_bad_env_number_falls_back_to_file(self, config_file: Path) -> None:
        """Should ignore an unparseable env value and keep the file value."""
        config = get_config(config_file, env={"MEDIAFORGE_FFPROBE_TIMEOUT": "x"})

        assert config.tools.ffprobe_timeout == 30.0

    def test_config_path_from_env(self, config_file: Path) -> None:
        """Should find the file through MEDIAFORGE_CONFIG_PATH."""
        config = get_config(env={"MEDIAFORGE_CONFIG_PATH": str(config_file)})

        assert config.conversion.codec == "libx264"

    def test_invalid_value_raises(self, tmp_path: Path) -> None:
        """Should wrap validation errors in ConfigurationError."""
        path = tmp_path / "config.toml"
        path.write_text("[conversion]\ncrf = 99\n")

        with pytest.raises(ConfigurationError, match="crf"):
            get_config(path, env={})

    def test_non_table_section_raises(self, tmp_path: Path) -> None:
        """Should reject a section that is not a table."""
        path = tmp_path / "config.toml"
        path.write_text('tools = "ffmpeg"\n')

        with pytest.raises(ConfigurationError, match=r"\[tools\]"):
            get_config(path, env={})


class TestBuildLoggingConfig:
    """Tests for build_logging_config."""

    def test_overrides(self, tmp_path: Path) -> None:
        """Should apply CLI overrides on top of the base config."""
        base = LoggingConfig(level="info", max_bytes=1024)

        config = build_logging_config(
            base, level="debug", file=tmp_path / "x.log", format="json"
        )

        assert config.level == "debug"
        assert config.file == tmp_path / "x.log"
        assert config.format == "json"
        assert config.max_bytes == 1024

    def test_keeps_base_values(self) -> None:
        """Should keep base values when no override is given."""
        base = LoggingConfig(level="warning", format="json")

        assert build_logging_config(base) == base

    def test_invalid_level_raises(self) -> None:
        """Should validate the merged config."""
        with pytest.raises(ValueError):
            build_logging_config(LoggingConfig(), level="verbose")
