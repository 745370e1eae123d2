"""Audio track mapping engine."""

from mediaforge.mapping.audio import create_audio_mappings, should_copy

__all__ = ["create_audio_mappings", "should_copy"]
