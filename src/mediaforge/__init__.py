"""mediaforge - Probe media files, plan audio tracks, and drive ffmpeg."""

__version__ = "0.1.0"
