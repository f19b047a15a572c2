import logging
from typing import Callable, List

from media_api.schemas.media import TranscodeOutput
from shared_storage.s3 import S3Client

logger = logging.getLogger(__name__)


class ChunkUploader:
    def __init__(self, store: S3Client):
        self.store = store

    def upload_chunks(self, output: TranscodeOutput,
                      key_fn: Callable[[str], str],
                      content_type_fn: Callable[[str], str]) -> List[str]:
        # No rollback: chunks already in the store stay there if a later one fails.
        keys = []
        for chunk in output.chunks():
            key = key_fn(chunk.name)
            logger.debug(f"Uploading chunk: {chunk.name} to bucket: {self.store.bucket}")
            with chunk.open() as stream:
                self.store.put_object(key, stream, chunk.size, content_type_fn(chunk.name))
            keys.append(key)
        return keys
