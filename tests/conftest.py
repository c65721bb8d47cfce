"""Pytest configuration and fixtures."""

import tempfile

import pytest
from PIL import Image

from photobooker.metadata import DATETIME_ORIGINAL, EXIF_IFD_POINTER


@pytest.fixture
def make_photo():
    """Factory writing a solid-colour JPEG, optionally with a capture time.

    `captured` is stored as DateTimeOriginal in IFD0, or in the Exif
    sub-IFD when `exif_ifd` is set.
    """

    def _make(path, captured=None, size=(120, 160), color=(128, 128, 128), exif_ifd=False):
        path.parent.mkdir(parents=True, exist_ok=True)
        img = Image.new("RGB", size, color)
        kwargs = {}
        if captured is not None:
            exif = Image.Exif()
            if exif_ifd:
                exif[EXIF_IFD_POINTER] = {DATETIME_ORIGINAL: captured}
            else:
                exif[DATETIME_ORIGINAL] = captured
            kwargs["exif"] = exif.tobytes()
        img.save(path, "JPEG", quality=95, **kwargs)
        return path

    return _make


@pytest.fixture
def photo_dir(tmp_path):
    """Create an empty input directory."""
    input_dir = tmp_path / "photos"
    input_dir.mkdir()
    return input_dir


@pytest.fixture
def isolated_tmp(tmp_path, monkeypatch):
    """Point tempfile at a private directory so leftovers can be checked."""
    tmp_root = tmp_path / "tmp"
    tmp_root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_root))
    return tmp_root
