from __future__ import annotations

from media_api.cores.config import Settings
from media_api.services.upload_flow import MediaUploadService
from shared_storage.retry import RetryPolicy
from shared_storage.s3 import S3Client


def build_s3_client(settings: Settings) -> S3Client:
    return S3Client(
        bucket=settings.S3_BUCKET_NAME,
        endpoint=settings.S3_ENDPOINT,
        access_key=settings.S3_ACCESS_KEY,
        secret_key=settings.S3_SECRET_KEY,
        region=settings.S3_REGION,
        bucket_retry=RetryPolicy(settings.STORE_RETRY_ATTEMPTS, settings.BUCKET_RETRY_DELAY),
        object_retry=RetryPolicy(settings.STORE_RETRY_ATTEMPTS, settings.OBJECT_RETRY_DELAY),
        empty_on_unavailable=settings.EMPTY_STREAM_ON_UNAVAILABLE,
    )


_MediaService: MediaUploadService | None = None


def get_media_service() -> MediaUploadService:
    if _MediaService is None:
        raise RuntimeError("Media service not initialized")
    return _MediaService
