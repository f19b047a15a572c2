"""
Shared fixtures for media-api tests.

Every working directory lives under pytest's ``tmp_path`` so tests can assert
that nothing is leaked after a pipeline run.
"""

import io
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image

from media_api.cores.config import PipelineConfig
from media_api.schemas.media import UploadRequest
from shared_storage.s3 import S3Client


@pytest.fixture
def pipeline_config(tmp_path: Path) -> PipelineConfig:
    return PipelineConfig(
        bucket="test-bucket",
        base_url="http://minio:9000",
        tmp_dir=tmp_path / "uploads",
        hls_output_dir=tmp_path / "hls_output",
        photo_output_dir=tmp_path / "photo_output",
    )


@pytest.fixture
def mock_store():
    """S3Client stand-in that records put_object payloads."""
    store = MagicMock(spec=S3Client)
    store.bucket = "test-bucket"
    store.uploaded = {}

    def _put(key, stream, length, content_type):
        store.uploaded[key] = (stream.read(), length, content_type)

    store.put_object.side_effect = _put
    store.presigned_url.return_value = "http://minio:9000/test-bucket/signed?X-Amz-Signature=abc"
    return store


@pytest.fixture
def make_request():
    def _make(filename="movie.mp4", content=b"fake-video-bytes", content_type="video/mp4"):
        return UploadRequest(
            filename=filename,
            stream=io.BytesIO(content),
            size=len(content),
            content_type=content_type,
        )
    return _make


@pytest.fixture
def jpeg_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (1600, 1200), color=(200, 30, 30)).save(buffer, format="JPEG")
    return buffer.getvalue()


def leftover_files(*roots: Path) -> list[Path]:
    return [p for root in roots if root.exists() for p in root.rglob("*")]


@pytest.fixture
def leaked_paths(pipeline_config):
    return lambda: leftover_files(
        pipeline_config.tmp_dir,
        pipeline_config.hls_output_dir,
        pipeline_config.photo_output_dir,
    )


@pytest.fixture
def fake_ffmpeg():
    """Factory for a subprocess.Popen replacement that mimics ffmpeg writing an HLS set."""
    def _factory(exit_code=0, segments=("seg0000.ts",), log_lines=("frame=1\n", "done\n")):
        calls = []

        def _popen(args, **kwargs):
            calls.append((args, kwargs))
            playlist = Path(args[-1])
            if exit_code == 0:
                playlist.write_text("#EXTM3U\n" + "".join(f"{s}\n" for s in segments))
                for name in segments:
                    (playlist.parent / name).write_bytes(b"\x47" * 188)
            process = MagicMock()
            process.stdout = io.StringIO("".join(log_lines))
            process.wait.return_value = exit_code
            return process

        return _popen, calls
    return _factory
