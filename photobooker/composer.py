"""
Page composition: one normalized image per PDF page.

Uses PyMuPDF (fitz) to build the document. Pages are US Letter sized and
each carries a single image anchored near the lower-left corner.
"""

import logging
import os
from functools import reduce
from pathlib import Path
from typing import TextIO

import fitz  # PyMuPDF
from PIL import Image

from .errors import ComposeError, WriteError
from .normalizer import page_name
from .progress import PageProgress

logger = logging.getLogger(__name__)

MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0
DEFAULT_DPI = 150


def mm_to_points(mm: float) -> float:
    """Convert millimetres to PDF points."""
    return mm * POINTS_PER_INCH / MM_PER_INCH


def artifact_paths(work_dir: Path, page_count: int) -> list[Path]:
    """Artifact paths for pages 1..page_count, in page order."""
    return [Path(work_dir) / page_name(n) for n in range(1, page_count + 1)]


class PageComposer:
    """Builds the output PDF from normalized page images."""

    def __init__(
        self,
        page_size_mm: tuple[float, float] = (216.0, 279.0),
        image_offset_mm: tuple[float, float] = (2.0, 2.0),
        author: str = "Unknown",
        output: TextIO | None = None,
    ) -> None:
        self.page_size_mm = page_size_mm
        self.image_offset_mm = image_offset_mm
        self.author = author
        self.output = output

    def _image_rect(self, page_rect: fitz.Rect, size_px: tuple[int, int], dpi: float) -> fitz.Rect:
        """Rectangle for an image at its native size, offset from the lower-left corner.

        PyMuPDF measures y from the top edge, so the bottom of the image sits
        at page height minus the vertical offset.
        """
        width_pt = size_px[0] / dpi * POINTS_PER_INCH
        height_pt = size_px[1] / dpi * POINTS_PER_INCH
        x0 = mm_to_points(self.image_offset_mm[0])
        y1 = page_rect.height - mm_to_points(self.image_offset_mm[1])
        return fitz.Rect(x0, y1 - height_pt, x0 + width_pt, y1)

    def _read_artifact(self, artifact: Path) -> tuple[bytes, tuple[int, int], float]:
        """Read a JPEG artifact, returning its bytes, pixel size and dpi."""
        try:
            with Image.open(artifact) as img:
                if img.format != "JPEG":
                    raise ComposeError(f"{artifact} is not a JPEG image (got {img.format})")
                img.load()
                size = img.size
                dpi = img.info.get("dpi", (DEFAULT_DPI, DEFAULT_DPI))[0] or DEFAULT_DPI
            return artifact.read_bytes(), size, float(dpi)
        except (OSError, SyntaxError, ValueError) as e:
            raise ComposeError(f"Could not read page image {artifact}: {e}") from e

    def _append_page(self, doc: fitz.Document, artifact: Path) -> fitz.Document:
        """Fold step: add one page holding `artifact` and return the document."""
        data, size_px, dpi = self._read_artifact(artifact)

        width_mm, height_mm = self.page_size_mm
        page = doc.new_page(width=mm_to_points(width_mm), height=mm_to_points(height_mm))
        rect = self._image_rect(page.rect, size_px, dpi)

        try:
            page.insert_image(rect, stream=data)
        except (RuntimeError, ValueError) as e:
            raise ComposeError(f"Could not place {artifact.name} on page {doc.page_count}: {e}") from e

        logger.debug(f"Placed {artifact.name} on page {doc.page_count}")
        return doc

    def build_document(self, artifacts: list[Path], title: str) -> fitz.Document:
        """Create a document with one page per artifact, in list order.

        The document carries only basic info metadata: no XMP packet and no
        output-intent ICC profile.
        """
        doc = fitz.open()
        doc.set_metadata({
            "title": title,
            "author": self.author,
            "creator": "photobooker",
            "producer": "photobooker",
        })
        doc.del_xml_metadata()

        try:
            with PageProgress(total=len(artifacts), desc="Writing page", output=self.output) as progress:

                def step(doc: fitz.Document, artifact: Path) -> fitz.Document:
                    progress.start(doc.page_count + 1)
                    doc = self._append_page(doc, artifact)
                    progress.done()
                    return doc

                return reduce(step, artifacts, doc)
        except ComposeError:
            doc.close()
            raise

    def save(self, doc: fitz.Document, output_path: Path) -> Path:
        """Serialize the document over output_path.

        The PDF is written to a hidden file beside output_path and swapped in
        with os.replace, so the destination holds either the previous file or
        the complete new one.

        Raises:
            WriteError: if the document cannot be written or moved
        """
        output_path = Path(output_path)
        staging = output_path.parent / f".{output_path.name}.part"

        if output_path.is_dir():
            doc.close()
            raise WriteError(f"Output path is a directory: {output_path}")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            doc.save(str(staging), garbage=3, deflate=True)
            os.replace(staging, output_path)
        except (RuntimeError, ValueError, OSError) as e:
            staging.unlink(missing_ok=True)
            raise WriteError(f"Could not write {output_path}: {e}") from e
        finally:
            doc.close()

        logger.info(f"PDF saved: {output_path}")
        return output_path

    def compose(self, work_dir: Path, output_path: Path, title: str, page_count: int) -> Path:
        """Compose pages 1..page_count from work_dir into output_path.

        Args:
            work_dir: Directory holding page-NNN.jpg artifacts
            output_path: Destination PDF, replaced if it exists
            title: Document title
            page_count: Number of artifacts to place

        Returns:
            output_path

        Raises:
            ComposeError: if an artifact is missing or unreadable
            WriteError: if the finished document cannot be written
        """
        artifacts = artifact_paths(work_dir, page_count)
        missing = [a.name for a in artifacts if not a.is_file()]
        if missing:
            raise ComposeError(f"Missing page images: {', '.join(missing)}")

        doc = self.build_document(artifacts, title)
        return self.save(doc, output_path)
