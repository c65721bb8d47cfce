"""
Configuration for the photo book pipeline.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

METADATA_ERROR_POLICIES = ("abort", "skip")
WORK_DIR_PREFIX = "photobooker-"


@dataclass
class BookerConfig:
    """Configuration for the photo book pipeline.

    Attributes:
        input_dir: Directory scanned recursively for photographs
        output_path: Destination of the composed PDF (overwritten)
        title: Document title (stored in PDF metadata)
        author: Document author (stored in PDF metadata)

        # Scanning
        on_metadata_error: 'abort' fails the run on the first image without
            a capture time, 'skip' drops such images with a warning

        # Normalization
        page_size_px: Width and height of every normalized page
        page_dpi: Resolution the normalized pages are tagged with
        jpeg_quality: Quality of the intermediate JPEG artifacts

        # Composition
        page_size_mm: Physical page size of the output document
        image_offset_mm: Placement of each image from the lower-left corner
    """

    # Required
    input_dir: Path
    output_path: Path
    title: str

    # Optional metadata
    author: str = "Unknown"

    # Scanning
    on_metadata_error: Literal["abort", "skip"] = "abort"

    # Normalization (8.5x11" at 150 dpi)
    page_size_px: tuple[int, int] = (1275, 1650)
    page_dpi: int = 150
    jpeg_quality: int = 95

    # Composition (US Letter)
    page_size_mm: tuple[float, float] = (216.0, 279.0)
    image_offset_mm: tuple[float, float] = (2.0, 2.0)

    def __post_init__(self) -> None:
        """Validate and convert paths."""
        self.input_dir = Path(self.input_dir)
        self.output_path = Path(self.output_path)

        if not self.title or not self.title.strip():
            raise ValueError("title cannot be empty")

        if self.on_metadata_error not in METADATA_ERROR_POLICIES:
            raise ValueError(
                f"on_metadata_error must be one of {METADATA_ERROR_POLICIES}, "
                f"got {self.on_metadata_error!r}"
            )

        if min(self.page_size_px) <= 0:
            raise ValueError(f"page_size_px must be positive, got {self.page_size_px}")

        if min(self.page_size_mm) <= 0:
            raise ValueError(f"page_size_mm must be positive, got {self.page_size_mm}")

        if self.page_dpi <= 0:
            raise ValueError(f"page_dpi must be > 0, got {self.page_dpi}")

        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError(f"jpeg_quality must be in [1, 100], got {self.jpeg_quality}")
