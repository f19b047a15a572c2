import logging
import shutil
import uuid
from pathlib import Path

from media_api.cores.config import PipelineConfig
from media_api.cores.exceptions import IOFailure
from media_api.schemas.media import MediaKind, StagedFile, TranscodeOutput
from media_api.utils.hls_generator import generate_hls
from media_api.utils.image_ops import resize_image

logger = logging.getLogger(__name__)

PHOTO_DERIVATIVE_NAME = "image.jpg"


class MediaTranscoder:
    def __init__(self, config: PipelineConfig):
        self.config = config

    @staticmethod
    def _new_output_dir(root: Path) -> Path:
        output_dir = root / uuid.uuid4().hex
        try:
            root.mkdir(parents=True, exist_ok=True)
            output_dir.mkdir()
        except OSError as e:
            raise IOFailure(f"Failed to create output directory {output_dir}: {e}") from e
        return output_dir

    @staticmethod
    def _discard(output_dir: Path):
        try:
            shutil.rmtree(output_dir)
        except OSError as e:
            logger.warning(f"Failed to delete directory {output_dir}: {e}")

    def transcode_video(self, staged: StagedFile) -> TranscodeOutput:
        output_dir = self._new_output_dir(self.config.hls_output_dir)
        try:
            generate_hls(
                str(staged.path.resolve()),
                str(output_dir),
                segment_time=self.config.segment_seconds,
                ffmpeg_binary=self.config.ffmpeg_binary,
            )
        except BaseException:
            self._discard(output_dir)
            raise
        logger.info(f"Video transcoded to HLS output directory: {output_dir}")
        return TranscodeOutput(output_dir, MediaKind.VIDEO)

    def transcode_photo(self, staged: StagedFile) -> TranscodeOutput:
        output_dir = self._new_output_dir(self.config.photo_output_dir)
        try:
            shutil.copyfile(staged.path, output_dir / f"original_{staged.archive_name}")
            resize_image(
                staged.path,
                output_dir / PHOTO_DERIVATIVE_NAME,
                max_size=self.config.photo_max_size,
                quality=self.config.photo_quality,
            )
        except (OSError, ValueError) as e:
            self._discard(output_dir)
            raise IOFailure(f"Failed to process photo {staged.name}: {e}") from e
        logger.info(f"Photo processed into output directory: {output_dir}")
        return TranscodeOutput(output_dir, MediaKind.PHOTO)
