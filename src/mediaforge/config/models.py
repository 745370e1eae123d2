"""Dataclasses holding the effective mediaforge configuration."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ToolsConfig:
    """External tool locations.

    Bare names are looked up in PATH when the process is started.
    """

    ffmpeg: str = "ffmpeg"
    ffprobe: str = "ffprobe"

    # Per-invocation limits in seconds (None = no limit)
    ffprobe_timeout: float | None = 60.0
    ffmpeg_timeout: float | None = None


LOG_LEVELS = ("debug", "info", "warning", "error")
LOG_FORMATS = ("text", "json")


@dataclass
class LoggingConfig:
    """Where and how mediaforge writes its log.

    ``level`` and ``format`` are matched without regard to case. With no
    ``file`` the log goes to stderr; with a file it rotates once it
    reaches ``max_bytes``, keeping ``backup_count`` old files.
    """

    level: str = "info"
    file: Path | None = None
    format: str = "text"
    include_stderr: bool = False
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5

    def __post_init__(self) -> None:
        if self.level.casefold() not in LOG_LEVELS:
            raise ValueError(
                f"log level {self.level!r} is not one of {', '.join(LOG_LEVELS)}"
            )
        if self.format.casefold() not in LOG_FORMATS:
            raise ValueError(
                f"log format {self.format!r} is not one of {', '.join(LOG_FORMATS)}"
            )
        if self.max_bytes < 0 or self.backup_count < 0:
            raise ValueError("max_bytes and backup_count must not be negative")


@dataclass
class ConversionConfig:
    """Defaults for automatic conversion (convert-auto)."""

    codec: str = "libx265"
    preset: str = "fast"
    profile: str | None = "high"
    tune: str | None = "film"
    crf: int = 22

    # Extension (with dot) of converted files
    output_extension: str = ".mp4"

    # Audio streams in this language are kept
    audio_language: str = "eng"

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 0 <= self.crf <= 51:
            raise ValueError(f"crf must be between 0 and 51, got {self.crf}")
        if not self.output_extension.startswith("."):
            self.output_extension = f".{self.output_extension}"


@dataclass
class MediaForgeConfig:
    """Effective mediaforge configuration."""

    tools: ToolsConfig = field(default_factory=ToolsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    conversion: ConversionConfig = field(default_factory=ConversionConfig)
