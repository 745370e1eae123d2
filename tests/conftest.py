"""Shared test fixtures for mediaforge."""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from mediaforge.config import clear_config_cache
from mediaforge.domain.models import MediaFile, MediaFormat, MediaStream

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def ffprobe_fixtures_dir() -> Path:
    """Return the directory holding recorded ffprobe reports."""
    return FIXTURES_DIR / "ffprobe"


@pytest.fixture
def movie_report_text(ffprobe_fixtures_dir: Path) -> str:
    """Raw ffprobe report of a movie with DTS, AAC and French AC3 audio."""
    return (ffprobe_fixtures_dir / "movie_dts_aac.json").read_text()


@pytest.fixture
def movie_report(movie_report_text: str) -> dict[str, Any]:
    """Decoded movie ffprobe report."""
    return json.loads(movie_report_text)


@pytest.fixture(autouse=True)
def _clear_config_cache():
    """Keep the config file cache from leaking between tests."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture(autouse=True)
def _reset_mediaforge_logger():
    """Undo logging configured by CLI tests."""
    yield
    logger = logging.getLogger("mediaforge")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def _make_audio_stream(
    index: int,
    codec: str,
    channels: int,
    language: str | None = "eng",
    profile: str | None = None,
    title: str | None = None,
) -> MediaStream:
    tags: dict[str, str] = {}
    if language is not None:
        tags["language"] = language
    if title is not None:
        tags["title"] = title
    return MediaStream(
        index=index,
        codec_type="audio",
        codec_name=codec,
        profile=profile,
        channels=channels,
        tags=tags,
    )


def _make_media_file(
    *streams: MediaStream, path: str = "/media/movie.mkv"
) -> MediaFile:
    video = MediaStream(index=0, codec_type="video", codec_name="h264")
    return MediaFile(
        path=Path(path),
        format=MediaFormat(nb_streams=len(streams) + 1),
        streams=(video, *streams),
    )


@pytest.fixture
def audio_stream() -> Callable[..., MediaStream]:
    """Factory for audio streams: (index, codec, channels, language="eng", ...)."""
    return _make_audio_stream


@pytest.fixture
def media_file_factory() -> Callable[..., MediaFile]:
    """Factory for MediaFiles with a video stream at index 0 plus the given streams."""
    return _make_media_file
