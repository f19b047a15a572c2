from typing import List, Optional

from pydantic import Field

from media_api.cores.model import CamelModel
from media_api.schemas.media import MediaKind


class UploadResultResponse(CamelModel):
    original_filename: str = Field(..., description="Original name of the uploaded file")
    kind: MediaKind
    object_prefix: str = Field(..., description="Key prefix shared by every stored chunk")
    url: str = Field(..., description="Stream URL for videos, pre-signed GET URL for photos")
    size: int = Field(..., description="Uploaded size in bytes")
    object_keys: List[str] = Field(default_factory=list)
    thumbnail_key: Optional[str] = None


class PresignedUploadResponse(CamelModel):
    object_name: str = Field(..., description="Object key the client should PUT to")
    url: str = Field(..., description="Pre-signed PUT URL")
    expires_in: int = Field(..., description="Expiry in minutes")
