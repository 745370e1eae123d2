"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (applied by the CLI on top of get_config())
2. Environment variables (MEDIAFORGE_*)
3. Config file (~/.mediaforge/config.toml)
4. Default values

Environment variables:
- MEDIAFORGE_CONFIG_PATH: Path to config file (overrides default location)
- MEDIAFORGE_FFMPEG_PATH: ffmpeg executable
- MEDIAFORGE_FFPROBE_PATH: ffprobe executable
- MEDIAFORGE_LOG_LEVEL: debug, info, warning or error
- MEDIAFORGE_LOG_FILE: Log file path
- MEDIAFORGE_LOG_FORMAT: text or json
- MEDIAFORGE_CRF: Default CRF for convert-auto
- MEDIAFORGE_PRESET: Default preset for convert-auto
"""

from __future__ import annotations

import logging
import threading
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from mediaforge.config.env import EnvReader
from mediaforge.config.models import (
    ConversionConfig,
    LoggingConfig,
    MediaForgeConfig,
    ToolsConfig,
)
from mediaforge.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".mediaforge"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

# Cache for loaded config files (path -> (parsed dict, mtime))
_config_cache: dict[Path, tuple[dict[str, Any], float]] = {}
_config_cache_lock = threading.Lock()


def get_default_config_path(env: Mapping[str, str] | None = None) -> Path:
    """Get the default config file path.

    Can be overridden by the MEDIAFORGE_CONFIG_PATH environment variable.

    Returns:
        Path to config file.
    """
    reader = EnvReader(env)
    return reader.get_path("MEDIAFORGE_CONFIG_PATH") or DEFAULT_CONFIG_FILE


def _read_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    logger.debug("Loaded config from %s", path)
    return data


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from a TOML file.

    Results are cached per path and reloaded when the file's mtime changes.

    Args:
        path: Path to config file. If None, uses the default location.

    Returns:
        Parsed configuration dict. Empty dict if the file doesn't exist.

    Raises:
        ConfigurationError: If the file exists but cannot be parsed.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except FileNotFoundError:
        current_mtime = 0.0

    with _config_cache_lock:
        cached = _config_cache.get(path)
        if cached is not None and cached[1] == current_mtime:
            return cached[0]

        result = _read_toml(path)
        _config_cache[path] = (result, current_mtime)
        return result


def clear_config_cache() -> None:
    """Clear the config file cache. Primarily useful for testing."""
    with _config_cache_lock:
        _config_cache.clear()


def _section(file_config: dict[str, Any], name: str) -> dict[str, Any]:
    section = file_config.get(name, {})
    if not isinstance(section, dict):
        raise ConfigurationError(f"[{name}] must be a table")
    return section


def get_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> MediaForgeConfig:
    """Get the effective configuration.

    Args:
        config_path: Config file path (overrides MEDIAFORGE_CONFIG_PATH).
        env: Environment mapping, os.environ when None.

    Returns:
        MediaForgeConfig with env > file > default precedence applied.

    Raises:
        ConfigurationError: If the file is unreadable or holds invalid values.
    """
    reader = EnvReader(env)
    file_config = load_config_file(config_path or get_default_config_path(env))

    tools_file = _section(file_config, "tools")
    logging_file = _section(file_config, "logging")
    conversion_file = _section(file_config, "conversion")

    log_file = reader.get_path("MEDIAFORGE_LOG_FILE") or (
        Path(logging_file["file"]).expanduser() if logging_file.get("file") else None
    )

    try:
        return MediaForgeConfig(
            tools=ToolsConfig(
                ffmpeg=reader.get_str(
                    "MEDIAFORGE_FFMPEG_PATH", tools_file.get("ffmpeg", "ffmpeg")
                ),
                ffprobe=reader.get_str(
                    "MEDIAFORGE_FFPROBE_PATH", tools_file.get("ffprobe", "ffprobe")
                ),
                ffprobe_timeout=reader.get_float(
                    "MEDIAFORGE_FFPROBE_TIMEOUT",
                    tools_file.get("ffprobe_timeout", 60.0),
                ),
                ffmpeg_timeout=tools_file.get("ffmpeg_timeout"),
            ),
            logging=LoggingConfig(
                level=reader.get_str(
                    "MEDIAFORGE_LOG_LEVEL", logging_file.get("level", "info")
                ),
                file=log_file,
                format=reader.get_str(
                    "MEDIAFORGE_LOG_FORMAT", logging_file.get("format", "text")
                ),
                include_stderr=reader.get_bool(
                    "MEDIAFORGE_LOG_STDERR", logging_file.get("include_stderr", False)
                ),
                max_bytes=logging_file.get("max_bytes", 10_485_760),
                backup_count=logging_file.get("backup_count", 5),
            ),
            conversion=ConversionConfig(
                codec=conversion_file.get("codec", "libx265"),
                preset=reader.get_str(
                    "MEDIAFORGE_PRESET", conversion_file.get("preset", "fast")
                ),
                profile=conversion_file.get("profile", "high"),
                tune=conversion_file.get("tune", "film"),
                crf=reader.get_int("MEDIAFORGE_CRF", conversion_file.get("crf", 22)),
                output_extension=conversion_file.get("output_extension", ".mp4"),
                audio_language=conversion_file.get("audio_language", "eng"),
            ),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
