"""FFmpeg argument building.

This module turns video encoding settings and audio track mappings into
the ordered token list placed between ``-i <input>`` and ``-y <output>``.
By default track titles are quoted for the target shell so that a printed
command line can be pasted unchanged. Callers that hand the list straight
to a process pass ``quote_titles=False``; no shell strips the quotes there,
so ffmpeg would store them in the metadata.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from mediaforge.core.codecs import normalize_video_codec, require_codec
from mediaforge.core.quoting import ShellStyle, quote_argument
from mediaforge.domain.encoding import (
    AudioTrackMapping,
    ConstantRateVideoEncodingSettings,
    CopyAudioTrackMapping,
    EncodeAudioTrackMapping,
    VariableRateVideoEncodingSettings,
    VideoEncodingSettings,
)
from mediaforge.exceptions import InvalidPassError

logger = logging.getLogger(__name__)

# Stream type letters accepted by ffmpeg stream specifiers.
STREAM_TYPE_SPECIFIERS: dict[str, str] = {
    "video": "v",
    "audio": "a",
    "subtitle": "s",
    "data": "d",
}

# Passthrough of container metadata and chapters, plus moov-first layout.
_OUTPUT_TRAILER: tuple[str, ...] = (
    "-map_metadata",
    "0",
    "-map_chapters",
    "0",
    "-movflags",
    "+faststart",
)


def _build_crf_args(settings: ConstantRateVideoEncodingSettings) -> list[str]:
    codec = normalize_video_codec(require_codec(settings.codec))
    args = [
        "-map",
        "0:v:0",
        "-c:v",
        codec,
        "-preset",
        settings.preset,
        "-crf",
        str(settings.crf),
        "-pix_fmt",
        settings.pixel_format,
    ]
    args.extend(settings.extra_arguments)
    args.extend(_OUTPUT_TRAILER)
    return args


def _build_vbr_args(
    settings: VariableRateVideoEncodingSettings,
    pass_number: int | None,
    passlog_file: Path | str | None,
) -> list[str]:
    if pass_number not in (1, 2):
        raise InvalidPassError(pass_number)

    codec = normalize_video_codec(require_codec(settings.codec))
    rate_args = [
        "-c:v",
        codec,
        "-preset",
        settings.preset,
        "-b:v",
        f"{settings.bitrate}k",
        "-pass",
        str(pass_number),
    ]
    if passlog_file is not None:
        rate_args.extend(["-passlogfile", str(passlog_file)])

    if pass_number == 1:
        # Analysis only: no stream mapping, no audio, no metadata
        return [*rate_args, "-an"]

    return [
        "-map",
        "0:v:0",
        *rate_args,
        "-pix_fmt",
        settings.pixel_format,
        *_OUTPUT_TRAILER,
    ]


def build_video_args(
    settings: VideoEncodingSettings,
    pass_number: int | None = None,
    passlog_file: Path | str | None = None,
) -> list[str]:
    """Build the video part of an ffmpeg command.

    Constant-quality settings always produce the single-pass shape and
    ignore ``pass_number``. Variable-bitrate settings need pass 1 or 2.

    Args:
        settings: Video encoding settings.
        pass_number: Pass to build for two-pass settings.
        passlog_file: Prefix for the two-pass statistics file. ffmpeg
            writes to its working directory when None.

    Returns:
        List of ffmpeg arguments.

    Raises:
        InvalidPassError: If variable-bitrate settings get a pass other
            than 1 or 2.
        MissingCodecError: If the codec is blank.
    """
    if isinstance(settings, ConstantRateVideoEncodingSettings):
        return _build_crf_args(settings)
    if isinstance(settings, VariableRateVideoEncodingSettings):
        return _build_vbr_args(settings, pass_number, passlog_file)
    raise TypeError(f"Unsupported video settings: {type(settings).__name__}")


def build_audio_args(
    mapping: AudioTrackMapping,
    shell_style: ShellStyle | None = None,
    *,
    quote_titles: bool = True,
) -> list[str]:
    """Build the ffmpeg arguments for one audio track mapping.

    Args:
        mapping: Copy or encode mapping.
        shell_style: Quoting convention for the title. Detected from the
            platform when None.
        quote_titles: Quote the title for a shell. Off for direct process
            invocation.

    Returns:
        List of ffmpeg arguments.

    Raises:
        MissingCodecError: If an encode mapping has a blank codec.
        UnsupportedChannelLayoutError: If an encode mapping has no explicit
            bitrate and its channel count has no default.
    """
    dest = mapping.destination_index
    args = ["-map", f"{mapping.source_stream}:a:{mapping.source_index}"]

    if isinstance(mapping, CopyAudioTrackMapping):
        args.extend(["-c:a", "copy"])
    elif isinstance(mapping, EncodeAudioTrackMapping):
        codec = require_codec(mapping.destination_codec)
        args.extend(["-c:a", codec])
        args.extend([f"-b:a:{dest}", f"{mapping.effective_bitrate}k"])
        if mapping.destination_channels > 0:
            args.extend([f"-ac:a:{dest}", str(mapping.destination_channels)])
    else:
        raise TypeError(f"Unsupported audio mapping: {type(mapping).__name__}")

    if mapping.title and mapping.title.strip():
        title = (
            quote_argument(mapping.title, shell_style)
            if quote_titles
            else mapping.title
        )
        args.extend([f"-metadata:s:a:{dest}", f"title={title}"])

    return args


def build_ffmpeg_arguments(
    settings: VideoEncodingSettings,
    mappings: Iterable[AudioTrackMapping] = (),
    pass_number: int | None = None,
    shell_style: ShellStyle | None = None,
    passlog_file: Path | str | None = None,
    *,
    quote_titles: bool = True,
) -> list[str]:
    """Build the full argument list for one ffmpeg invocation.

    The first pass of a two-pass encode only analyzes video, so audio
    mappings are left out of it.

    Args:
        settings: Video encoding settings.
        mappings: Audio track mappings, in output order.
        pass_number: Pass to build for two-pass settings.
        shell_style: Quoting convention for titles.
        passlog_file: Two-pass statistics file prefix.
        quote_titles: Quote titles for a shell; see build_audio_args.

    Returns:
        Video arguments followed by the arguments of every mapping.
    """
    args = build_video_args(settings, pass_number, passlog_file)
    if isinstance(settings, VariableRateVideoEncodingSettings) and pass_number == 1:
        return args
    for mapping in mappings:
        args.extend(
            build_audio_args(mapping, shell_style, quote_titles=quote_titles)
        )
    logger.debug("Built %d ffmpeg argument(s) for %s", len(args), settings)
    return args


def build_export_stream_args(
    stream_index: int, stream_type: str | None = None
) -> list[str]:
    """Build arguments that copy a single stream into its own file.

    Args:
        stream_index: Absolute stream index, or the index within
            ``stream_type`` when a type is given.
        stream_type: Optional "video", "audio", "subtitle" or "data".

    Returns:
        ``-map <spec> -c copy``.

    Raises:
        ValueError: If the stream type is unknown or the index negative.
    """
    if stream_index < 0:
        raise ValueError(f"Stream index must be non-negative, got {stream_index}")
    if stream_type is None:
        spec = f"0:{stream_index}"
    else:
        letter = STREAM_TYPE_SPECIFIERS.get(stream_type.casefold())
        if letter is None:
            raise ValueError(f"Unknown stream type: {stream_type}")
        spec = f"0:{letter}:{stream_index}"
    return ["-map", spec, "-c", "copy"]
