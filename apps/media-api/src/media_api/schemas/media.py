from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import BinaryIO, List, Optional


class MediaKind(str, Enum):
    VIDEO = "VIDEO"
    PHOTO = "PHOTO"


class UploadStage(str, Enum):
    RECEIVED = "RECEIVED"
    STAGED = "STAGED"
    TRANSCODED = "TRANSCODED"
    BUCKET_ENSURED = "BUCKET_ENSURED"
    CHUNKS_UPLOADING = "CHUNKS_UPLOADING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


@dataclass(frozen=True)
class UploadRequest:
    filename: Optional[str]
    stream: BinaryIO
    size: int
    content_type: Optional[str] = None


@dataclass(frozen=True)
class StagedFile:
    path: Path
    original_name: Optional[str] = None

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def archive_name(self) -> str:
        return Path(self.original_name).name if self.original_name else self.path.name


@dataclass(frozen=True)
class Chunk:
    name: str
    size: int
    path: Path

    def open(self) -> BinaryIO:
        return self.path.open("rb")


@dataclass(frozen=True)
class TranscodeOutput:
    directory: Path
    kind: MediaKind

    def chunks(self) -> List[Chunk]:
        return [
            Chunk(name=p.name, size=p.stat().st_size, path=p)
            for p in sorted(self.directory.iterdir())
            if p.is_file()
        ]


@dataclass(frozen=True)
class UploadResult:
    original_filename: str
    kind: MediaKind
    object_prefix: str
    url: str
    size: int
    object_keys: List[str] = field(default_factory=list)
    thumbnail_key: Optional[str] = None
