import re
from typing import Optional

from media_api.cores.exceptions import InvalidInput

SLASH = "/"
PLAYLIST_FILE = "playlist.m3u8"
PLAYLIST_CONTENT_TYPE = "application/vnd.apple.mpegurl"
VIDEO_MP2T_CONTENT_TYPE = "video/MP2T"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_EXTENSION = re.compile(r"\.[^.]+$")

_CONTENT_TYPES = {
    ".m3u8": PLAYLIST_CONTENT_TYPE,
    ".ts": VIDEO_MP2T_CONTENT_TYPE,
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
}


def strip_extension(filename: str) -> str:
    """Drop the last extension only: ``a.b.c`` -> ``a.b``."""
    return _EXTENSION.sub("", filename)


def object_prefix(filename: Optional[str]) -> str:
    if not filename:
        raise InvalidInput("Original filename is missing")
    prefix = strip_extension(filename)
    if not prefix:
        raise InvalidInput(f"Filename '{filename}' has no name before its extension")
    return prefix


def object_key(filename: Optional[str], chunk_name: str) -> str:
    return object_prefix(filename) + SLASH + chunk_name


def stream_url(base_url: str, bucket: str, filename: Optional[str]) -> str:
    return base_url.rstrip(SLASH) + SLASH + bucket + SLASH + object_prefix(filename) + SLASH + PLAYLIST_FILE


def chunk_object_name(video_prefix: str, file_name: str) -> str:
    return video_prefix + SLASH + file_name


def content_type(filename: str) -> str:
    match = _EXTENSION.search(filename.lower())
    if not match:
        return DEFAULT_CONTENT_TYPE
    return _CONTENT_TYPES.get(match.group(0), DEFAULT_CONTENT_TYPE)


def video_chunk_content_type(filename: str) -> str:
    # playlists are m3u8, every other HLS output is a transport-stream segment
    return PLAYLIST_CONTENT_TYPE if filename.endswith(".m3u8") else VIDEO_MP2T_CONTENT_TYPE
