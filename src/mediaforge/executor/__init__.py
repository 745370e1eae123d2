"""Executor module for mediaforge.

- command: ffmpeg argument building for video settings and audio mappings
- ffmpeg: FFmpegService, runs ffmpeg with progress reporting
- conversion: MediaConversionService, single and batch conversions
- options: validated encoding options for the CLI
"""

from mediaforge.executor.command import (
    build_audio_args,
    build_export_stream_args,
    build_ffmpeg_arguments,
    build_video_args,
)
from mediaforge.executor.conversion import (
    ConversionProgress,
    ConversionResult,
    MediaConversionService,
)
from mediaforge.executor.ffmpeg import FFmpegService
from mediaforge.executor.options import EncodingOptions

__all__ = [
    "ConversionProgress",
    "ConversionResult",
    "EncodingOptions",
    "FFmpegService",
    "MediaConversionService",
    "build_audio_args",
    "build_export_stream_args",
    "build_ffmpeg_arguments",
    "build_video_args",
]
