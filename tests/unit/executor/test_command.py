"""Unit tests for ffmpeg argument building."""

import pytest

from mediaforge.core.quoting import ShellStyle
from mediaforge.domain.encoding import (
    ConstantRateVideoEncodingSettings,
    CopyAudioTrackMapping,
    EncodeAudioTrackMapping,
    VariableRateVideoEncodingSettings,
)
from mediaforge.exceptions import (
    InvalidPassError,
    MissingCodecError,
    UnsupportedChannelLayoutError,
)
from mediaforge.executor.command import (
    build_audio_args,
    build_export_stream_args,
    build_ffmpeg_arguments,
    build_video_args,
)
from mediaforge.mapping import create_audio_mappings

TRAILER = ["-map_metadata", "0", "-map_chapters", "0", "-movflags", "+faststart"]


def crf_settings(**overrides) -> ConstantRateVideoEncodingSettings:
    values = {"codec": "libx265", "preset": "fast", "crf": 22}
    values.update(overrides)
    return ConstantRateVideoEncodingSettings(**values)


def vbr_settings(**overrides) -> VariableRateVideoEncodingSettings:
    values = {"codec": "libx264", "preset": "slow", "bitrate": 4000}
    values.update(overrides)
    return VariableRateVideoEncodingSettings(**values)


def contains_sequence(args: list[str], expected: list[str]) -> int:
    """Return the position of ``expected`` as a contiguous run in ``args``."""
    for start in range(len(args) - len(expected) + 1):
        if args[start : start + len(expected)] == expected:
            return start
    return -1


class TestBuildVideoArgsConstantRate:
    """Tests for constant-quality video arguments."""

    def test_shape(self):
        args = build_video_args(crf_settings())

        assert args == [
            "-map",
            "0:v:0",
            "-c:v",
            "libx265",
            "-preset",
            "fast",
            "-crf",
            "22",
            "-pix_fmt",
            "yuv420p",
            *TRAILER,
        ]

    def test_x264_alias(self):
        """Test that x264 is passed to ffmpeg as libx264."""
        args = build_video_args(crf_settings(codec="x264"))

        assert args[args.index("-c:v") + 1] == "libx264"

    def test_pass_number_ignored(self):
        """Test that single-pass settings build the same args for any pass."""
        assert build_video_args(crf_settings(), 2) == build_video_args(crf_settings())

    def test_extra_arguments_before_trailer(self):
        settings = crf_settings(extra_arguments=("-x265-params", "aq-mode=3"))
        args = build_video_args(settings)

        position = contains_sequence(args, ["-x265-params", "aq-mode=3"])
        assert position != -1
        assert args[position + 2 :] == TRAILER

    def test_custom_pixel_format(self):
        args = build_video_args(crf_settings(pixel_format="yuv420p10le"))

        assert contains_sequence(args, ["-pix_fmt", "yuv420p10le"]) != -1

    @pytest.mark.parametrize("codec", ["", "  "])
    def test_blank_codec_raises(self, codec):
        with pytest.raises(MissingCodecError):
            build_video_args(crf_settings(codec=codec))


class TestBuildVideoArgsVariableRate:
    """Tests for two-pass video arguments."""

    def test_first_pass(self):
        """Test that pass 1 only analyzes video."""
        args = build_video_args(vbr_settings(), 1)

        assert args == [
            "-c:v",
            "libx264",
            "-preset",
            "slow",
            "-b:v",
            "4000k",
            "-pass",
            "1",
            "-an",
        ]

    def test_second_pass(self):
        args = build_video_args(vbr_settings(), 2)

        assert args == [
            "-map",
            "0:v:0",
            "-c:v",
            "libx264",
            "-preset",
            "slow",
            "-b:v",
            "4000k",
            "-pass",
            "2",
            "-pix_fmt",
            "yuv420p",
            *TRAILER,
        ]

    def test_passlog_file(self, tmp_path):
        """Test that both passes share the statistics file prefix."""
        passlog = tmp_path / "stats"

        first = build_video_args(vbr_settings(), 1, passlog)
        second = build_video_args(vbr_settings(), 2, passlog)

        assert contains_sequence(first, ["-passlogfile", str(passlog)]) != -1
        assert contains_sequence(second, ["-passlogfile", str(passlog)]) != -1

    def test_x264_alias(self):
        args = build_video_args(vbr_settings(codec="x264"), 2)

        assert args[args.index("-c:v") + 1] == "libx264"

    @pytest.mark.parametrize("pass_number", [None, 0, 3, -1])
    def test_invalid_pass_raises(self, pass_number):
        with pytest.raises(InvalidPassError) as exc_info:
            build_video_args(vbr_settings(), pass_number)

        assert exc_info.value.pass_number == pass_number

    def test_unknown_settings_type(self):
        with pytest.raises(TypeError):
            build_video_args(object())  # type: ignore[arg-type]


class TestBuildAudioArgs:
    """Tests for build_audio_args function."""

    def test_copy(self):
        mapping = CopyAudioTrackMapping(
            source_stream=0, source_index=1, destination_index=0
        )

        assert build_audio_args(mapping) == ["-map", "0:a:1", "-c:a", "copy"]

    def test_encode(self):
        mapping = EncodeAudioTrackMapping(
            source_stream=0,
            source_index=2,
            destination_index=1,
            destination_codec="aac",
            destination_bitrate=160,
            destination_channels=2,
        )

        assert build_audio_args(mapping) == [
            "-map",
            "0:a:2",
            "-c:a",
            "aac",
            "-b:a:1",
            "160k",
            "-ac:a:1",
            "2",
        ]

    @pytest.mark.parametrize(
        ("channels", "bitrate"), [(1, "80k"), (2, "160k"), (6, "384k"), (8, "512k")]
    )
    def test_zero_bitrate_uses_default(self, channels, bitrate):
        mapping = EncodeAudioTrackMapping(
            source_stream=0,
            source_index=1,
            destination_index=0,
            destination_codec="aac",
            destination_bitrate=0,
            destination_channels=channels,
        )

        args = build_audio_args(mapping)

        assert args[args.index("-b:a:0") + 1] == bitrate

    def test_zero_bitrate_unsupported_layout(self):
        mapping = EncodeAudioTrackMapping(
            source_stream=0,
            source_index=1,
            destination_index=0,
            destination_codec="aac",
            destination_channels=3,
        )

        with pytest.raises(UnsupportedChannelLayoutError):
            build_audio_args(mapping)

    def test_zero_channels_omits_channel_option(self):
        mapping = EncodeAudioTrackMapping(
            source_stream=0,
            source_index=1,
            destination_index=0,
            destination_codec="aac",
            destination_bitrate=128,
        )

        assert "-ac:a:0" not in build_audio_args(mapping)

    def test_blank_codec_raises(self):
        mapping = EncodeAudioTrackMapping(
            source_stream=0,
            source_index=1,
            destination_index=0,
            destination_codec=" ",
            destination_bitrate=128,
        )

        with pytest.raises(MissingCodecError):
            build_audio_args(mapping)

    def test_title_posix(self):
        """Test that a title with a double quote is single-quoted on POSIX."""
        mapping = CopyAudioTrackMapping(
            source_stream=0, source_index=1, destination_index=1, title='The "Cut"'
        )

        args = build_audio_args(mapping, ShellStyle.POSIX)

        assert args[-2:] == ["-metadata:s:a:1", "title='The \"Cut\"'"]

    def test_title_windows(self):
        """Test that embedded double quotes are backslash-escaped on Windows."""
        mapping = CopyAudioTrackMapping(
            source_stream=0, source_index=1, destination_index=1, title='The "Cut"'
        )

        args = build_audio_args(mapping, ShellStyle.WINDOWS)

        assert args[-2:] == ["-metadata:s:a:1", 'title="The \\"Cut\\""']

    def test_plain_title_unquoted(self):
        mapping = CopyAudioTrackMapping(
            source_stream=0, source_index=1, destination_index=0, title="Stereo"
        )

        assert build_audio_args(mapping)[-2:] == ["-metadata:s:a:0", "title=Stereo"]

    @pytest.mark.parametrize("title", [None, "", "   "])
    def test_blank_title_omitted(self, title):
        mapping = CopyAudioTrackMapping(
            source_stream=0, source_index=1, destination_index=0, title=title
        )

        assert build_audio_args(mapping) == ["-map", "0:a:1", "-c:a", "copy"]

    @pytest.mark.parametrize("style", [ShellStyle.POSIX, ShellStyle.WINDOWS])
    def test_title_raw_for_process_invocation(self, style):
        """Test that quote_titles=False passes the title through untouched."""
        mapping = CopyAudioTrackMapping(
            source_stream=0,
            source_index=1,
            destination_index=1,
            title='Surround 5.1 "Cut"',
        )

        args = build_audio_args(mapping, style, quote_titles=False)

        assert args[-2:] == ["-metadata:s:a:1", 'title=Surround 5.1 "Cut"']


class TestBuildFfmpegArguments:
    """Tests for build_ffmpeg_arguments function."""

    def test_dts_and_stereo_aac_end_to_end(self, audio_stream, media_file_factory):
        """Test the copy block precedes the encode block in the final command."""
        media_file = media_file_factory(
            audio_stream(1, "dts", 6, profile="DTS-HD MA"),
            audio_stream(2, "aac", 2),
        )
        mappings = create_audio_mappings(media_file)

        args = build_ffmpeg_arguments(crf_settings(), mappings)

        copy_at = contains_sequence(args, ["-map", "0:a:1", "-c:a", "copy"])
        encode_at = contains_sequence(
            args, ["-map", "0:a:2", "-c:a", "aac", "-b:a:1", "160k"]
        )
        assert copy_at != -1
        assert encode_at > copy_at

    def test_video_before_audio(self):
        mapping = CopyAudioTrackMapping(
            source_stream=0, source_index=1, destination_index=0
        )

        args = build_ffmpeg_arguments(crf_settings(), [mapping])

        assert args[:2] == ["-map", "0:v:0"]
        assert args[-4:] == ["-map", "0:a:1", "-c:a", "copy"]

    def test_first_pass_has_no_audio(self):
        mapping = CopyAudioTrackMapping(
            source_stream=0, source_index=1, destination_index=0
        )

        args = build_ffmpeg_arguments(vbr_settings(), [mapping], 1)

        assert "0:a:1" not in args
        assert args[-1] == "-an"

    def test_second_pass_has_audio(self):
        mapping = CopyAudioTrackMapping(
            source_stream=0, source_index=1, destination_index=0
        )

        args = build_ffmpeg_arguments(vbr_settings(), [mapping], 2)

        assert args[-4:] == ["-map", "0:a:1", "-c:a", "copy"]

    def test_no_mappings(self):
        assert build_ffmpeg_arguments(crf_settings()) == build_video_args(
            crf_settings()
        )

    def test_quote_titles_forwarded(self):
        mapping = CopyAudioTrackMapping(
            source_stream=0, source_index=1, destination_index=0, title="Surround 5.1"
        )

        quoted = build_ffmpeg_arguments(
            crf_settings(), [mapping], shell_style=ShellStyle.POSIX
        )
        raw = build_ffmpeg_arguments(
            crf_settings(), [mapping], shell_style=ShellStyle.POSIX, quote_titles=False
        )

        assert quoted[-1] == "title='Surround 5.1'"
        assert raw[-1] == "title=Surround 5.1"


class TestBuildExportStreamArgs:
    """Tests for build_export_stream_args function."""

    def test_absolute_index(self):
        assert build_export_stream_args(3) == ["-map", "0:3", "-c", "copy"]

    @pytest.mark.parametrize(
        ("stream_type", "spec"),
        [
            ("video", "0:v:0"),
            ("audio", "0:a:0"),
            ("Subtitle", "0:s:0"),
            ("data", "0:d:0"),
        ],
    )
    def test_typed_index(self, stream_type, spec):
        assert build_export_stream_args(0, stream_type)[1] == spec

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError, match="Unknown stream type"):
            build_export_stream_args(0, "attachment")

    def test_negative_index_raises(self):
        with pytest.raises(ValueError):
            build_export_stream_args(-1)
