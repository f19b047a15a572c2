import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from media_api.cores.exceptions import IOFailure
from media_api.schemas.media import StagedFile, TranscodeOutput, UploadRequest

logger = logging.getLogger(__name__)


def _safe_suffix(filename: Optional[str]) -> str:
    # keep only the basename so a client filename can't point outside tmp_dir
    return "-" + Path(filename).name if filename else ""


class TempStager:
    def __init__(self, tmp_dir: Path):
        self.tmp_dir = Path(tmp_dir)

    def stage(self, request: UploadRequest) -> StagedFile:
        path: Optional[Path] = None
        try:
            self.tmp_dir.mkdir(parents=True, exist_ok=True)
            fd, name = tempfile.mkstemp(prefix="upload-", suffix=_safe_suffix(request.filename), dir=self.tmp_dir)
            path = Path(name)
            with os.fdopen(fd, "wb") as out:
                shutil.copyfileobj(request.stream, out)
        except BaseException as e:
            if path is not None:
                self.release(StagedFile(path))
            if isinstance(e, OSError):
                raise IOFailure(f"Failed to stage upload {request.filename}: {e}") from e
            raise
        logger.info(f"Created temporary file: {path}")
        return StagedFile(path, request.filename)

    def release(self, staged: Optional[StagedFile]) -> None:
        if staged is None or not staged.path.exists():
            return
        try:
            staged.path.unlink()
            logger.info(f"Successfully deleted file: {staged.path}")
        except OSError as e:
            logger.warning(f"Failed to delete temp file {staged.path}: {e}")

    def release_output(self, output: Optional[TranscodeOutput]) -> None:
        if output is None or not output.directory.is_dir():
            return
        try:
            shutil.rmtree(output.directory)
            logger.info(f"Successfully deleted directory: {output.directory}")
        except OSError as e:
            logger.warning(f"Failed to delete directory {output.directory}: {e}")
