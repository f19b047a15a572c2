import asyncio
import logging
import os
from typing import BinaryIO, Iterator

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import StreamingResponse

from media_api.cores.exceptions import InvalidInput
from media_api.cores.injectable import get_media_service
from media_api.dtos.response.upload import PresignedUploadResponse, UploadResultResponse
from media_api.schemas.media import UploadRequest
from media_api.services.upload_flow import MediaUploadService
from shared_storage.errors import ObjectNotFound

logger = logging.getLogger(__name__)

router = APIRouter()

STREAM_CHUNK_SIZE = 64 * 1024


def _to_request(file: UploadFile) -> UploadRequest:
    # UploadFile.size is not always populated, measure the spooled file instead
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    return UploadRequest(
        filename=file.filename,
        stream=file.file,
        size=size,
        content_type=file.content_type,
    )


def _iter_body(body: BinaryIO) -> Iterator[bytes]:
    try:
        for data in iter(lambda: body.read(STREAM_CHUNK_SIZE), b""):
            yield data
    finally:
        body.close()


@router.post("/upload", response_model=UploadResultResponse)
async def upload_video(
        file: UploadFile = File(...),
        service: MediaUploadService = Depends(get_media_service)
):
    request = _to_request(file)
    try:
        result = await asyncio.to_thread(service.upload_video, request)
    except InvalidInput as e:
        raise HTTPException(400, f"Upload failed: {e}")
    except Exception as e:
        logger.error(f"Video upload failed for file: {file.filename}: {e}")
        raise HTTPException(500, f"Upload failed: {e}")
    return UploadResultResponse.model_validate(result)


@router.post("/photos", response_model=UploadResultResponse)
async def upload_photo(
        file: UploadFile = File(...),
        service: MediaUploadService = Depends(get_media_service)
):
    request = _to_request(file)
    try:
        result = await asyncio.to_thread(service.upload_photo, request)
    except InvalidInput as e:
        raise HTTPException(400, f"Upload failed: {e}")
    except Exception as e:
        logger.error(f"Photo upload failed for file: {file.filename}: {e}")
        raise HTTPException(500, f"Upload failed: {e}")
    return UploadResultResponse.model_validate(result)


@router.get("/presigned-url", response_model=PresignedUploadResponse)
async def get_presigned_upload_url(
        file_name: str = Query(..., alias="fileName"),
        expiry_minutes: int = Query(60, alias="expiryMinutes", gt=0, le=7 * 24 * 60),
        service: MediaUploadService = Depends(get_media_service)
):
    try:
        object_name, url = await asyncio.to_thread(service.presigned_upload_url, file_name, expiry_minutes)
    except InvalidInput as e:
        raise HTTPException(400, str(e))
    except Exception as e:
        logger.error(f"Failed to generate pre-signed URL for file: {file_name}: {e}")
        raise HTTPException(500, f"Error generating pre-signed URL: {e}")
    return PresignedUploadResponse(object_name=object_name, url=url, expires_in=expiry_minutes)


@router.get("/stream/{video_prefix}/{file_name}")
async def stream_video_chunk(
        video_prefix: str,
        file_name: str,
        service: MediaUploadService = Depends(get_media_service)
):
    try:
        body, media_type = await asyncio.to_thread(service.open_chunk, video_prefix, file_name)
    except ObjectNotFound as e:
        logger.warning(f"Video chunk not found: {e.key}")
        raise HTTPException(404, "Chunk not found")
    except Exception as e:
        logger.error(f"Error streaming video chunk {video_prefix}/{file_name}: {e}")
        raise HTTPException(500, f"Streaming failed: {e}")
    return StreamingResponse(
        _iter_body(body),
        media_type=media_type,
        headers={
            "Content-Disposition": f'inline;filename="{file_name}"',
            "Cache-Control": "max-age=3600, public",
        },
    )
