"""
Main pipeline orchestration: scan, sort, normalize, compose.
"""

import logging
import sys
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path

from .composer import PageComposer
from .config import WORK_DIR_PREFIX, BookerConfig
from .errors import BookerError, EmptyCorpusError
from .metadata import ImageRecord
from .normalizer import ImageNormalizer
from .progress import PageProgress, format_time
from .scanner import CorpusScanner, sort_chronologically

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Result of running the full pipeline."""

    success: bool
    output_path: Path | None
    page_count: int
    message: str
    records: list[ImageRecord] = field(default_factory=list)


class PhotoBookPipeline:
    """Main orchestrator for turning a photo directory into a PDF.

    Usage:
        config = BookerConfig(
            input_dir="./photos",
            output_path="./book.pdf",
            title="Summer 2020",
        )
        pipeline = PhotoBookPipeline(config)
        result = pipeline.run()
    """

    def __init__(self, config: BookerConfig) -> None:
        """Initialize the pipeline.

        Args:
            config: Pipeline configuration
        """
        self.config = config
        self._setup_logging()
        self._validate_config()

        self.scanner = CorpusScanner(on_metadata_error=config.on_metadata_error)
        self.normalizer = ImageNormalizer(
            size=config.page_size_px,
            dpi=config.page_dpi,
            quality=config.jpeg_quality,
        )
        self.composer = PageComposer(
            page_size_mm=config.page_size_mm,
            image_offset_mm=config.image_offset_mm,
            author=config.author,
        )

    def _setup_logging(self) -> None:
        """Ensure logging is configured.

        Only sets up a basic config if no handlers are configured,
        allowing the CLI to control logging setup.
        """
        if not logging.root.handlers:
            logging.basicConfig(
                level=logging.INFO,
                format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )

    def _validate_config(self) -> None:
        """Validate configuration before running."""
        if not self.config.input_dir.is_dir():
            raise ValueError(f"Input directory does not exist: {self.config.input_dir}")

    def collect_records(self) -> list[ImageRecord]:
        """Scan the input directory and return records in chronological order.

        Raises:
            MetadataError: if an image lacks a capture time (policy 'abort')
            EmptyCorpusError: if no images were found
        """
        records = self.scanner.scan(self.config.input_dir)
        if self.scanner.scan_errors:
            logger.warning(f"Skipped {len(self.scanner.scan_errors)} unreadable entries")
        if not records:
            raise EmptyCorpusError(f"No images found to process in {self.config.input_dir}")
        return sort_chronologically(records)

    def _normalize_all(self, records: list[ImageRecord], work_dir: Path) -> None:
        with PageProgress(total=len(records)) as progress:
            for sequence, record in enumerate(records, start=1):
                progress.start(sequence)
                self.normalizer.normalize(record, sequence, work_dir)
                progress.done()

    def run(self) -> PipelineResult:
        """Run the complete pipeline.

        Every failure is reported through the returned result; the temporary
        work directory is removed whether or not the run succeeds.

        Returns:
            PipelineResult with output path and status
        """
        start_time = time.time()
        sys.stderr.write(f"Processing: {self.config.title}\n")
        sys.stderr.write(f"Input: {self.config.input_dir}\n")
        sys.stderr.write(f"Output: {self.config.output_path}\n")
        sys.stderr.flush()

        try:
            records = self.collect_records()

            with tempfile.TemporaryDirectory(prefix=WORK_DIR_PREFIX) as tmp:
                work_dir = Path(tmp)
                logger.debug(f"Work directory: {work_dir}")

                self._normalize_all(records, work_dir)
                output_path = self.composer.compose(
                    work_dir,
                    self.config.output_path,
                    self.config.title,
                    len(records),
                )

        except BookerError as e:
            logger.error(f"Pipeline failed: {e}")
            return PipelineResult(
                success=False,
                output_path=None,
                page_count=0,
                message=f"Pipeline failed: {e}",
            )
        except Exception as e:
            logger.exception("Pipeline failed")
            return PipelineResult(
                success=False,
                output_path=None,
                page_count=0,
                message=f"Pipeline failed: {e}",
            )

        sys.stderr.write(f"Complete in {format_time(time.time() - start_time)}\n")
        sys.stderr.flush()

        return PipelineResult(
            success=True,
            output_path=output_path,
            page_count=len(records),
            message=f"Successfully composed {len(records)} pages",
            records=records,
        )
