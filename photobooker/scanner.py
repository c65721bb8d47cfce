"""
Corpus discovery: recursive scan, per-file extraction, chronological sort.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Literal

from .errors import MetadataError, ScanError
from .metadata import ImageRecord, extract_record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionOutcome:
    """Result of extracting one file: either a record or the error."""

    path: Path
    record: ImageRecord | None = None
    error: MetadataError | None = None

    @property
    def ok(self) -> bool:
        return self.record is not None


def _log_scan_error(error: ScanError) -> None:
    logger.debug(f"Skipping unreadable entry: {error}")


def iter_candidate_files(
    input_dir: Path,
    on_error: Callable[[ScanError], None] = _log_scan_error,
) -> Iterator[Path]:
    """Yield every regular file below input_dir, at any depth.

    Entries that cannot be enumerated are skipped and reported to on_error.
    Directories are walked in sorted order so repeated scans visit files
    identically.
    """

    def report(error: OSError) -> None:
        on_error(ScanError(error.filename or input_dir, error.strerror or str(error)))

    for root, dirnames, filenames in os.walk(input_dir, onerror=report):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(root) / name
            try:
                if not path.is_file():
                    continue
            except OSError as e:
                report(e)
                continue
            yield path


class CorpusScanner:
    """Collects ImageRecords for every file under a directory.

    Entries skipped during the last collection are kept in `scan_errors`.
    """

    def __init__(
        self,
        on_metadata_error: Literal["abort", "skip"] = "abort",
        extractor: Callable[[Path], ImageRecord] = extract_record,
    ) -> None:
        self.on_metadata_error = on_metadata_error
        self.extractor = extractor
        self.scan_errors: list[ScanError] = []

    def _skip_entry(self, error: ScanError) -> None:
        self.scan_errors.append(error)
        _log_scan_error(error)

    def _extract(self, path: Path) -> ExtractionOutcome:
        try:
            return ExtractionOutcome(path=path, record=self.extractor(path))
        except MetadataError as e:
            return ExtractionOutcome(path=path, error=e)

    def collect(self, input_dir: Path) -> list[ExtractionOutcome]:
        """Run the extractor on every candidate file.

        Under the 'abort' policy collection stops at the first failure,
        which is the last outcome in the returned list.
        """
        self.scan_errors = []
        outcomes = []
        for path in iter_candidate_files(Path(input_dir), on_error=self._skip_entry):
            outcome = self._extract(path)
            outcomes.append(outcome)
            if not outcome.ok and self.on_metadata_error == "abort":
                break
        return outcomes

    def scan(self, input_dir: Path) -> list[ImageRecord]:
        """Scan input_dir and return the unordered records.

        Raises:
            MetadataError: on the first file without a usable capture time,
                unless the policy is 'skip'
        """
        records = []
        skipped = 0
        for outcome in self.collect(input_dir):
            if outcome.ok:
                records.append(outcome.record)
            elif self.on_metadata_error == "abort":
                raise outcome.error
            else:
                skipped += 1
                logger.warning(f"Skipping {outcome.path}: {outcome.error.reason}")

        if skipped:
            logger.info(f"Found {len(records)} images in {input_dir} ({skipped} skipped)")
        else:
            logger.info(f"Found {len(records)} images in {input_dir}")
        return records


def sort_chronologically(records: list[ImageRecord]) -> list[ImageRecord]:
    """Sort records by capture time, ascending.

    Equal timestamps fall back to lexical path order.
    """
    sorted_records = sorted(records, key=lambda r: (r.captured_at, str(r.path)))

    logger.info(f"Sorted {len(sorted_records)} images by timestamp")
    return sorted_records
