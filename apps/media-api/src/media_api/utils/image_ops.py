import logging
from pathlib import Path

from PIL import Image

logger = logging.getLogger(__name__)


def resize_image(input_path: Path, output_path: Path, max_size: tuple[int, int] = (800, 600),
                 quality: int = 85) -> Path:
    """Fit the image inside ``max_size`` (aspect ratio kept) and save it as JPEG."""
    with Image.open(input_path) as img:
        img.thumbnail(max_size, Image.Resampling.LANCZOS)
        # JPEG has no alpha or palette
        if img.mode != "RGB":
            img = img.convert("RGB")
        img.save(output_path, format="JPEG", quality=quality)
        logger.info(f"Resized {input_path.name} -> {output_path.name} {img.size[0]}x{img.size[1]}")
    return output_path
