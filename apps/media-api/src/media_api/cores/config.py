from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class PipelineConfig:
    bucket: str
    base_url: str
    tmp_dir: Path
    hls_output_dir: Path
    photo_output_dir: Path
    ffmpeg_binary: str = "ffmpeg"
    segment_seconds: int = 10
    photo_max_size: tuple[int, int] = (800, 600)
    photo_quality: int = 85
    presigned_expiry_minutes: int = 60
    upload_prefix: str = "uploads"


class Settings(BaseSettings):
    PROJECT_NAME: str = "Media API"
    LOG_LEVEL: str = "INFO"

    # S3 / MinIO
    S3_ENDPOINT: Optional[str] = "http://localhost:9000"
    S3_PUBLIC_URL: str = "http://localhost:9000"
    S3_REGION: str = "us-east-1"
    S3_ACCESS_KEY: str = "S3_ACCESS_KEY"
    S3_SECRET_KEY: str = "S3_SECRET_KEY"
    S3_BUCKET_NAME: str = "artsy-bucket"

    # Retry
    STORE_RETRY_ATTEMPTS: int = 3
    BUCKET_RETRY_DELAY: float = 0.5
    OBJECT_RETRY_DELAY: float = 1.0
    EMPTY_STREAM_ON_UNAVAILABLE: bool = False

    # Local working dirs
    TMP_DIR: str = "tmp/media-api/uploads"
    HLS_OUTPUT_DIR: str = "tmp/media-api/hls_output"
    PHOTO_OUTPUT_DIR: str = "tmp/media-api/photo_output"

    # Transcoding
    FFMPEG_BINARY: str = "ffmpeg"
    HLS_SEGMENT_SECONDS: int = 10
    PHOTO_MAX_WIDTH: int = 800
    PHOTO_MAX_HEIGHT: int = 600
    PHOTO_QUALITY: int = 85

    PRESIGNED_EXPIRY_MINUTES: int = 60
    UPLOAD_PREFIX: str = "uploads"

    class Config:
        env_file = ".env"

    def pipeline_config(self) -> PipelineConfig:
        return PipelineConfig(
            bucket=self.S3_BUCKET_NAME,
            base_url=self.S3_PUBLIC_URL,
            tmp_dir=Path(self.TMP_DIR).resolve(),
            hls_output_dir=Path(self.HLS_OUTPUT_DIR).resolve(),
            photo_output_dir=Path(self.PHOTO_OUTPUT_DIR).resolve(),
            ffmpeg_binary=self.FFMPEG_BINARY,
            segment_seconds=self.HLS_SEGMENT_SECONDS,
            photo_max_size=(self.PHOTO_MAX_WIDTH, self.PHOTO_MAX_HEIGHT),
            photo_quality=self.PHOTO_QUALITY,
            presigned_expiry_minutes=self.PRESIGNED_EXPIRY_MINUTES,
            upload_prefix=self.UPLOAD_PREFIX,
        )


settings = Settings()
