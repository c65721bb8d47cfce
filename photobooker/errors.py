"""
Exception types raised by the photo book pipeline.
"""

from pathlib import Path


class BookerError(Exception):
    """Base class for every pipeline failure."""


class ScanError(BookerError):
    """A directory entry could not be read or enumerated.

    Never propagated: the scanner records it and moves on.
    """

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class MetadataError(BookerError):
    """An image has no usable capture timestamp."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class DecodeError(BookerError):
    """A source image could not be decoded."""


class EncodeError(BookerError):
    """A normalized page could not be written to the work directory."""


class ComposeError(BookerError):
    """The output document could not be assembled."""


class WriteError(BookerError):
    """The finished document could not be written to its destination."""


class EmptyCorpusError(BookerError):
    """The input directory yielded no images."""
