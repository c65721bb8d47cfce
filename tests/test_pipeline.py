"""Tests for the end-to-end pipeline."""

import io

import fitz
import pytest
from PIL import Image
from photobooker.config import BookerConfig
from photobooker.pipeline import PhotoBookPipeline

RED, GREEN, BLUE = (255, 0, 0), (0, 255, 0), (0, 0, 255)
# ITU-R 601-2 luma of each primary
LUMA = {RED: 76, GREEN: 150, BLUE: 29}


def _page_grays(path):
    grays = []
    with fitz.open(path) as doc:
        for page in doc:
            xref = page.get_images()[0][0]
            with Image.open(io.BytesIO(doc.extract_image(xref)["image"])) as img:
                grays.append(img.convert("L").getpixel((637, 825)))
    return grays


def _pipeline(input_dir, output, **kwargs):
    config = BookerConfig(input_dir=input_dir, output_path=output, title="Test Book", **kwargs)
    return PhotoBookPipeline(config)


@pytest.fixture
def three_photos(photo_dir, make_photo):
    """Three photos whose file order differs from their capture order."""
    make_photo(photo_dir / "a.jpg", captured="2020:01:02 10:00:00", color=RED, size=(200, 100))
    make_photo(photo_dir / "b.jpg", captured="2020:01:01 09:00:00", color=GREEN)
    make_photo(photo_dir / "nested" / "c.jpg", captured="2020:01:03 11:00:00", color=BLUE)
    return photo_dir


class TestPipelineRun:
    """Tests for successful runs."""

    def test_pages_in_capture_order(self, three_photos, tmp_path, isolated_tmp):
        """Pages follow ascending capture time."""
        output = tmp_path / "book.pdf"
        result = _pipeline(three_photos, output).run()

        assert result.success, result.message
        assert result.output_path == output
        assert result.page_count == 3
        assert [r.path.name for r in result.records] == ["b.jpg", "a.jpg", "c.jpg"]

        grays = _page_grays(output)
        assert grays == [
            pytest.approx(LUMA[GREEN], abs=4),
            pytest.approx(LUMA[RED], abs=4),
            pytest.approx(LUMA[BLUE], abs=4),
        ]

    def test_timestamps_non_decreasing(self, three_photos, tmp_path, isolated_tmp):
        result = _pipeline(three_photos, tmp_path / "book.pdf").run()
        stamps = [r.captured_at for r in result.records]
        assert stamps == sorted(stamps)

    def test_every_page_normalized(self, three_photos, tmp_path, isolated_tmp):
        """Every embedded image is 1275x1650 grayscale."""
        output = tmp_path / "book.pdf"
        _pipeline(three_photos, output).run()

        with fitz.open(output) as doc:
            for page in doc:
                xref, _, width, height = page.get_images()[0][:4]
                assert (width, height) == (1275, 1650)
                assert doc.extract_image(xref)["colorspace"] == 1

    def test_rerun_overwrites_and_cleans_up(self, three_photos, tmp_path, isolated_tmp):
        """A second run replaces the output and leaves no temp files."""
        output = tmp_path / "book.pdf"
        assert _pipeline(three_photos, output).run().success
        first_size = output.stat().st_size

        assert _pipeline(three_photos, output).run().success
        with fitz.open(output) as doc:
            assert doc.page_count == 3
        assert output.stat().st_size == pytest.approx(first_size, rel=0.1)
        assert list(isolated_tmp.iterdir()) == []

    def test_progress_lines(self, three_photos, tmp_path, isolated_tmp, capsys):
        _pipeline(three_photos, tmp_path / "book.pdf").run()
        out = capsys.readouterr().out
        for n in (1, 2, 3):
            assert f"Processing page {n} of 3...Done" in out
            assert f"Writing page {n} of 3...Done" in out

    def test_skip_policy(self, three_photos, make_photo, tmp_path, isolated_tmp):
        """With skip, photos lacking a capture time are left out."""
        make_photo(three_photos / "undated.jpg")
        output = tmp_path / "book.pdf"

        result = _pipeline(three_photos, output, on_metadata_error="skip").run()

        assert result.success
        assert result.page_count == 3
        with fitz.open(output) as doc:
            assert doc.page_count == 3


class TestPipelineFailures:
    """Tests for failed runs."""

    def test_missing_metadata_aborts(self, three_photos, make_photo, tmp_path, isolated_tmp):
        """One undated photo fails the run without output."""
        make_photo(three_photos / "undated.jpg")
        output = tmp_path / "book.pdf"

        result = _pipeline(three_photos, output).run()

        assert not result.success
        assert "undated.jpg" in result.message
        assert not output.exists()
        assert list(isolated_tmp.iterdir()) == []

    def test_empty_directory_fails(self, photo_dir, tmp_path, isolated_tmp):
        """Zero images is an explicit failure."""
        output = tmp_path / "book.pdf"
        result = _pipeline(photo_dir, output).run()

        assert not result.success
        assert "No images found" in result.message
        assert result.page_count == 0
        assert not output.exists()

    def test_decode_failure_cleans_up(self, photo_dir, tmp_path, isolated_tmp):
        """A photo whose pixel data is truncated fails after scanning."""
        src = photo_dir / "broken.jpg"
        exif = Image.Exif()
        exif[36867] = "2020:01:01 00:00:00"
        Image.effect_noise((400, 400), 100).convert("RGB").save(
            src, "JPEG", quality=95, exif=exif.tobytes()
        )
        data = src.read_bytes()
        src.write_bytes(data[: int(len(data) * 0.6)])
        output = tmp_path / "book.pdf"

        result = _pipeline(photo_dir, output).run()

        assert not result.success
        assert "broken.jpg" in result.message
        assert not output.exists()
        assert list(isolated_tmp.iterdir()) == []

    def test_missing_input_dir(self, tmp_path):
        """A missing input directory is rejected up front."""
        with pytest.raises(ValueError, match="does not exist"):
            _pipeline(tmp_path / "missing", tmp_path / "book.pdf")
