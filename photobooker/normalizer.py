"""
Image normalization: orientation, grayscale and fixed-size resampling.
"""

import logging
from pathlib import Path

from PIL import Image

from .errors import DecodeError, EncodeError
from .metadata import ImageRecord

logger = logging.getLogger(__name__)


def page_name(sequence: int) -> str:
    """File name of the normalized artifact for a 1-based page number."""
    return f"page-{sequence:03d}.jpg"


class ImageNormalizer:
    """Turns a source photograph into a grayscale page of fixed size."""

    def __init__(
        self,
        size: tuple[int, int] = (1275, 1650),
        dpi: int = 150,
        quality: int = 95,
    ) -> None:
        self.size = size
        self.dpi = dpi
        self.quality = quality

    def load(self, image_path: Path) -> Image.Image:
        """Decode an image into an 8-bit RGB raster.

        Raises:
            DecodeError: if the file cannot be decoded
        """
        try:
            with Image.open(image_path) as img:
                return img.convert("RGB")
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(f"Could not decode {image_path}: {e}") from e

    def to_page(self, img: Image.Image) -> Image.Image:
        """Apply rotation, grayscale and resize to a decoded RGB image."""
        width, height = img.size
        if width > height:
            # Landscape: turn 90 degrees counter-clockwise
            img = img.transpose(Image.ROTATE_90)

        gray = img.convert("L")

        # Pillow's bicubic kernel is Catmull-Rom (a=-0.5); aspect is not kept
        return gray.resize(self.size, Image.BICUBIC)

    def normalize(self, record: ImageRecord, sequence: int, work_dir: Path) -> Path:
        """Normalize one image and write it as page `sequence`.

        Args:
            record: Source image
            sequence: 1-based page number
            work_dir: Directory receiving the artifact

        Returns:
            Path of the written JPEG

        Raises:
            DecodeError: if the source cannot be decoded
            EncodeError: if the artifact cannot be written
        """
        page = self.to_page(self.load(record.path))
        output_path = Path(work_dir) / page_name(sequence)

        try:
            page.save(output_path, "JPEG", quality=self.quality, dpi=(self.dpi, self.dpi))
        except (OSError, ValueError) as e:
            raise EncodeError(f"Could not write {output_path}: {e}") from e

        logger.debug(f"{record.path.name} -> {output_path.name}")
        return output_path
