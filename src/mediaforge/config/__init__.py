"""Configuration management for mediaforge.

Precedence, highest first: CLI flags, MEDIAFORGE_* environment variables,
the config file (~/.mediaforge/config.toml), defaults.
"""

from mediaforge.config.env import EnvReader
from mediaforge.config.loader import (
    clear_config_cache,
    get_config,
    get_default_config_path,
    load_config_file,
)
from mediaforge.config.logging_factory import build_logging_config
from mediaforge.config.models import (
    ConversionConfig,
    LoggingConfig,
    MediaForgeConfig,
    ToolsConfig,
)

__all__ = [
    "ConversionConfig",
    "EnvReader",
    "LoggingConfig",
    "MediaForgeConfig",
    "ToolsConfig",
    "build_logging_config",
    "clear_config_cache",
    "get_config",
    "get_default_config_path",
    "load_config_file",
]
