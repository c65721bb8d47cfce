"""
Capture-time extraction from embedded EXIF metadata.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from PIL import Image
from PIL.ExifTags import TAGS

from .errors import MetadataError

logger = logging.getLogger(__name__)

EXIF_IFD_POINTER = 0x8769
DATETIME_ORIGINAL = 36867

# Date components may be separated by '-' (display form) or ':' (raw EXIF form)
_DATE_SEPARATOR = re.compile(r"[-:]")


@dataclass(frozen=True)
class ImageRecord:
    """A source image and the moment it was captured."""

    path: Path
    captured_at: datetime

    def __str__(self) -> str:
        return f"{self.path} {self.captured_at}"


def read_capture_time(image_path: Path) -> str:
    """Return the raw DateTimeOriginal text of an image.

    The Exif sub-IFD is checked first, then IFD0 (some writers put the tag
    there).

    Raises:
        MetadataError: if the file or its EXIF container cannot be read, or
            the tag is absent
    """
    try:
        with Image.open(image_path) as img:
            exif = img.getexif()
            value = exif.get_ifd(EXIF_IFD_POINTER).get(DATETIME_ORIGINAL)
            if value is None:
                for tag_id, tag_value in exif.items():
                    if TAGS.get(tag_id, tag_id) == "DateTimeOriginal":
                        value = tag_value
                        break
    except FileNotFoundError as e:
        raise MetadataError(image_path, "file not found") from e
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise MetadataError(image_path, f"could not read metadata: {e}") from e

    if value is None:
        raise MetadataError(image_path, "no DateTimeOriginal field")

    if isinstance(value, bytes):
        value = value.decode("ascii", errors="replace")
    return str(value).strip("\x00 ")


def _parse_unsigned(component: str, name: str) -> int:
    if not component.isdigit():
        raise ValueError(f"{name} is not an unsigned integer: {component!r}")
    return int(component)


def _parse_signed(component: str, name: str) -> int:
    digits = component[1:] if component[:1] in "+-" else component
    if not digits.isdigit():
        raise ValueError(f"{name} is not an integer: {component!r}")
    return int(component)


def parse_capture_time(text: str) -> datetime:
    """Parse 'YYYY-MM-DD HH:MM:SS' (or the raw 'YYYY:MM:DD HH:MM:SS') text.

    Each component is parsed on its own; calendar validity is left to the
    datetime constructor.

    Raises:
        ValueError: if the text does not follow the pattern
    """
    parts = text.strip().split(" ")
    if len(parts) != 2:
        raise ValueError(f"expected '<date> <time>', got {text!r}")

    date_part, time_part = parts
    date_fields = _DATE_SEPARATOR.split(date_part)
    time_fields = time_part.split(":")
    if len(date_fields) != 3 or len(time_fields) != 3:
        raise ValueError(f"expected 'YYYY-MM-DD HH:MM:SS', got {text!r}")

    year = _parse_signed(date_fields[0], "year")
    month = _parse_unsigned(date_fields[1], "month")
    day = _parse_unsigned(date_fields[2], "day")
    hour = _parse_unsigned(time_fields[0], "hour")
    minute = _parse_unsigned(time_fields[1], "minute")
    second = _parse_unsigned(time_fields[2], "second")

    return datetime(year, month, day, hour, minute, second)


def extract_record(image_path: Path) -> ImageRecord:
    """Build an ImageRecord from an image's embedded capture time.

    Args:
        image_path: Path to an image file

    Returns:
        ImageRecord with the parsed timestamp

    Raises:
        MetadataError: if no valid capture time can be read
    """
    image_path = Path(image_path)
    raw = read_capture_time(image_path)

    try:
        captured_at = parse_capture_time(raw)
    except ValueError as e:
        raise MetadataError(image_path, f"invalid capture time {raw!r}: {e}") from e

    logger.debug(f"{image_path.name}: captured {captured_at}")
    return ImageRecord(path=image_path, captured_at=captured_at)
