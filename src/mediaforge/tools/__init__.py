"""Parsers for external tool output."""

from mediaforge.tools.ffmpeg_progress import FFmpegProgress, parse_progress_line

__all__ = ["FFmpegProgress", "parse_progress_line"]
