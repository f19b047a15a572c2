"""
Tests for MediaTranscoder and the ffmpeg/Pillow helpers.

ffmpeg itself is never run: subprocess.Popen is patched with the
``fake_ffmpeg`` fixture, which writes HLS files into the output directory.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from PIL import Image

from media_api.cores.exceptions import IOFailure, TranscodeFailure
from media_api.schemas.media import MediaKind, StagedFile
from media_api.services.transcoder import PHOTO_DERIVATIVE_NAME, MediaTranscoder
from media_api.utils.hls_generator import build_hls_command


@pytest.fixture
def transcoder(pipeline_config):
    return MediaTranscoder(pipeline_config)


@pytest.fixture
def staged_video(tmp_path):
    path = tmp_path / "upload-123-movie.mp4"
    path.write_bytes(b"fake-video")
    return StagedFile(path, "movie.mp4")


class TestBuildHlsCommand:
    def test_fixed_arguments(self):
        args = build_hls_command("/in/movie.mp4", "/out/abc", segment_time=10)

        def _value(flag):
            return args[args.index(flag) + 1]

        assert args[0] == "ffmpeg"
        assert _value("-i") == "/in/movie.mp4"
        assert _value("-codec") == "copy"
        assert _value("-start_number") == "0"
        assert _value("-hls_time") == "10"
        assert _value("-hls_list_size") == "0"
        assert _value("-f") == "hls"
        assert args[-1] == str(Path("/out/abc") / "playlist.m3u8")

    def test_custom_binary(self):
        assert build_hls_command("a.mp4", "/out", ffmpeg_binary="/usr/local/bin/ffmpeg")[0] == "/usr/local/bin/ffmpeg"


class TestTranscodeVideo:
    def test_produces_playlist_and_segments(self, transcoder, staged_video, pipeline_config, fake_ffmpeg):
        popen, calls = fake_ffmpeg(segments=("seg0000.ts", "seg0001.ts"))

        with patch("media_api.utils.hls_generator.subprocess.Popen", side_effect=popen):
            output = transcoder.transcode_video(staged_video)

        assert output.kind is MediaKind.VIDEO
        assert output.directory.parent == pipeline_config.hls_output_dir
        assert [c.name for c in output.chunks()] == ["playlist.m3u8", "seg0000.ts", "seg0001.ts"]
        args, kwargs = calls[0]
        assert str(staged_video.path.resolve()) in args
        assert kwargs["stderr"] is not None

    def test_each_run_gets_a_fresh_directory(self, transcoder, staged_video, fake_ffmpeg):
        popen, _ = fake_ffmpeg()

        with patch("media_api.utils.hls_generator.subprocess.Popen", side_effect=popen):
            first = transcoder.transcode_video(staged_video)
            second = transcoder.transcode_video(staged_video)

        assert first.directory != second.directory

    def test_non_zero_exit_raises_and_removes_directory(self, transcoder, staged_video, pipeline_config, fake_ffmpeg):
        popen, _ = fake_ffmpeg(exit_code=1)

        with patch("media_api.utils.hls_generator.subprocess.Popen", side_effect=popen):
            with pytest.raises(TranscodeFailure) as exc_info:
                transcoder.transcode_video(staged_video)

        assert exc_info.value.exit_code == 1
        assert list(pipeline_config.hls_output_dir.iterdir()) == []

    def test_missing_ffmpeg_is_io_failure(self, transcoder, staged_video, pipeline_config):
        with patch("media_api.utils.hls_generator.subprocess.Popen", side_effect=FileNotFoundError("ffmpeg")):
            with pytest.raises(IOFailure):
                transcoder.transcode_video(staged_video)

        assert list(pipeline_config.hls_output_dir.iterdir()) == []

    def test_directory_collision_is_io_failure(self, transcoder, staged_video, pipeline_config):
        pipeline_config.hls_output_dir.mkdir(parents=True)
        (pipeline_config.hls_output_dir / "fixed").mkdir()

        with patch("media_api.services.transcoder.uuid.uuid4") as mock_uuid:
            mock_uuid.return_value.hex = "fixed"
            with pytest.raises(IOFailure):
                transcoder.transcode_video(staged_video)


class TestTranscodePhoto:
    def test_archives_original_and_writes_bounded_jpeg(self, transcoder, tmp_path, jpeg_bytes, pipeline_config):
        source = tmp_path / "upload-1-beach.jpg"
        source.write_bytes(jpeg_bytes)

        output = transcoder.transcode_photo(StagedFile(source, "beach.jpg"))

        assert output.kind is MediaKind.PHOTO
        assert output.directory.parent == pipeline_config.photo_output_dir
        names = sorted(c.name for c in output.chunks())
        assert names == ["image.jpg", "original_beach.jpg"]
        assert (output.directory / "original_beach.jpg").read_bytes() == jpeg_bytes
        with Image.open(output.directory / PHOTO_DERIVATIVE_NAME) as img:
            assert img.format == "JPEG"
            assert img.size == (800, 600)

    def test_png_with_alpha_is_converted(self, transcoder, tmp_path):
        source = tmp_path / "logo.png"
        Image.new("RGBA", (300, 100), color=(0, 0, 0, 0)).save(source)

        output = transcoder.transcode_photo(StagedFile(source, "logo.png"))

        with Image.open(output.directory / PHOTO_DERIVATIVE_NAME) as img:
            assert img.mode == "RGB"
            assert img.size == (300, 100)

    def test_undecodable_image_raises_and_removes_directory(self, transcoder, tmp_path, pipeline_config):
        source = tmp_path / "broken.jpg"
        source.write_bytes(b"not an image")

        with pytest.raises(IOFailure):
            transcoder.transcode_photo(StagedFile(source, "broken.jpg"))

        assert list(pipeline_config.photo_output_dir.iterdir()) == []
