import logging
from typing import BinaryIO, Callable, Optional

from media_api.cores.config import PipelineConfig
from media_api.cores.exceptions import InvalidInput
from media_api.schemas.media import (
    MediaKind,
    StagedFile,
    TranscodeOutput,
    UploadRequest,
    UploadResult,
    UploadStage,
)
from media_api.services.chunk_uploader import ChunkUploader
from media_api.services.transcoder import PHOTO_DERIVATIVE_NAME, MediaTranscoder
from media_api.utils import object_keys
from media_api.utils.staging import TempStager
from shared_storage.s3 import S3Client

logger = logging.getLogger(__name__)


class MediaUploadService:
    """Runs one upload through stage -> transcode -> ensure bucket -> upload chunks -> cleanup."""

    def __init__(self, store: S3Client, transcoder: MediaTranscoder, stager: TempStager,
                 uploader: ChunkUploader, config: PipelineConfig):
        self.store = store
        self.transcoder = transcoder
        self.stager = stager
        self.uploader = uploader
        self.config = config

    @classmethod
    def build(cls, store: S3Client, config: PipelineConfig) -> "MediaUploadService":
        return cls(
            store=store,
            transcoder=MediaTranscoder(config),
            stager=TempStager(config.tmp_dir),
            uploader=ChunkUploader(store),
            config=config,
        )

    @staticmethod
    def _validate(request: UploadRequest) -> str:
        if request.size <= 0:
            raise InvalidInput("File is empty.")
        return object_keys.object_prefix(request.filename)

    @staticmethod
    def _advance(filename: str, stage: UploadStage) -> UploadStage:
        logger.info(f"Upload {filename}: {stage.value}")
        return stage

    def _run(self, request: UploadRequest,
             transcode: Callable[[StagedFile], TranscodeOutput],
             content_type_fn: Callable[[str], str]) -> list[str]:
        filename = request.filename
        staged: Optional[StagedFile] = None
        output: Optional[TranscodeOutput] = None
        stage = UploadStage.RECEIVED
        try:
            staged = self.stager.stage(request)
            stage = self._advance(filename, UploadStage.STAGED)
            output = transcode(staged)
            stage = self._advance(filename, UploadStage.TRANSCODED)
            self.store.ensure_bucket()
            stage = self._advance(filename, UploadStage.BUCKET_ENSURED)
            stage = self._advance(filename, UploadStage.CHUNKS_UPLOADING)
            keys = self.uploader.upload_chunks(
                output,
                key_fn=lambda chunk_name: object_keys.object_key(filename, chunk_name),
                content_type_fn=content_type_fn,
            )
            self._advance(filename, UploadStage.COMPLETE)
            logger.info(f"All {len(keys)} chunks for {filename} uploaded successfully.")
            return keys
        except Exception as e:
            logger.error(f"Upload {filename} failed after {stage.value}: {e}")
            self._advance(filename, UploadStage.FAILED)
            raise
        finally:
            self.stager.release(staged)
            self.stager.release_output(output)

    def upload_video(self, request: UploadRequest) -> UploadResult:
        prefix = self._validate(request)
        keys = self._run(request, self.transcoder.transcode_video, object_keys.video_chunk_content_type)
        return UploadResult(
            original_filename=request.filename,
            kind=MediaKind.VIDEO,
            object_prefix=prefix,
            url=object_keys.stream_url(self.config.base_url, self.config.bucket, request.filename),
            size=request.size,
            object_keys=keys,
        )

    def upload_photo(self, request: UploadRequest) -> UploadResult:
        prefix = self._validate(request)
        keys = self._run(request, self.transcoder.transcode_photo, object_keys.content_type)
        thumbnail_key = object_keys.object_key(request.filename, PHOTO_DERIVATIVE_NAME)
        url = self.store.presigned_url(thumbnail_key, "GET", self.config.presigned_expiry_minutes)
        return UploadResult(
            original_filename=request.filename,
            kind=MediaKind.PHOTO,
            object_prefix=prefix,
            url=url,
            size=request.size,
            object_keys=keys,
            thumbnail_key=thumbnail_key,
        )

    def presigned_upload_url(self, file_name: str, expiry_minutes: Optional[int] = None) -> tuple[str, str]:
        if not file_name:
            raise InvalidInput("File name is required")
        object_name = f"{self.config.upload_prefix}/{file_name}"
        expiry = expiry_minutes or self.config.presigned_expiry_minutes
        logger.info(f"Generating pre-signed upload URL for object: {object_name}")
        return object_name, self.store.presigned_url(object_name, "PUT", expiry)

    def open_chunk(self, video_prefix: str, file_name: str) -> tuple[BinaryIO, str]:
        object_name = object_keys.chunk_object_name(video_prefix, file_name)
        logger.info(f"Retrieving object stream for object: {object_name}")
        return self.store.get_object(object_name), object_keys.content_type(file_name)
