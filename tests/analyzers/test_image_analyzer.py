"""
tests/analyzers/test_image_analyzer.py

Unit tests for ImageAnalyzer.

Real images are generated in memory with Pillow; thumbnails are written to
a per-test tmp_path.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from fileproc.analyzers.image_analyzer import ImageAnalyzer, thumbnail_name
from fileproc.core.exceptions import (
    ImageProcessingFailed,
    ThumbnailWriteError,
    UnsupportedMediaTypeError,
)
from fileproc.models.processing_models import ImageAnalysis


@pytest.fixture
def analyzer(tmp_path: Path) -> ImageAnalyzer:
    return ImageAnalyzer(thumbnail_dir=tmp_path / "thumbnails")


# ── Metadata ───────────────────────────────────────────────────────────────────

class TestImageMetadata:

    def test_large_png_metadata(self, analyzer: ImageAnalyzer, make_image) -> None:
        result = analyzer.run(make_image(4000, 2000), "image/png", "abc_wide.png")

        assert isinstance(result, ImageAnalysis)
        assert result.kind == "image"
        assert (result.width, result.height) == (4000, 2000)
        assert result.format == "png"
        assert result.channels == 3
        assert result.has_alpha is False
        assert result.color_space == "srgb"
        assert result.aspect_ratio == 2.0
        assert result.megapixels == 8.0
        assert result.estimated_colors == "Color"

    def test_ratios_round_exact_ties_up(self, analyzer: ImageAnalyzer, make_image) -> None:
        # 9/8 = 1.125 and 500*500/1e6 = 0.25 are exact binary ties.
        assert analyzer.run(make_image(9, 8), "image/png", "t.png").aspect_ratio == 1.13
        assert analyzer.run(make_image(500, 500), "image/png", "m.png").megapixels == 0.3

    def test_rgba_png_reports_alpha(self, analyzer: ImageAnalyzer, make_image) -> None:
        result = analyzer.run(make_image(30, 20, mode="RGBA"), "image/png", "a.png")

        assert result.has_alpha is True
        assert result.channels == 4

    def test_grayscale_image(self, analyzer: ImageAnalyzer, make_image) -> None:
        result = analyzer.run(make_image(10, 10, mode="L"), "image/png", "g.png")

        assert result.channels == 1
        assert result.color_space == "b-w"
        assert result.estimated_colors == "Grayscale"

    def test_jpeg_format_is_lowercase(self, analyzer: ImageAnalyzer, make_image) -> None:
        result = analyzer.run(make_image(40, 30, fmt="JPEG"), "image/jpeg", "p.jpg")
        assert result.format == "jpeg"

    def test_gif_is_decoded(self, analyzer: ImageAnalyzer, make_image) -> None:
        result = analyzer.run(make_image(40, 30, fmt="GIF"), "image/gif", "anim.gif")
        assert result.format == "gif"
        assert (result.width, result.height) == (40, 30)


# ── Thumbnails ─────────────────────────────────────────────────────────────────

class TestThumbnail:

    def test_thumbnail_fits_inside_200_box(self, analyzer: ImageAnalyzer, make_image) -> None:
        """4000×2000 → longest side 200, aspect preserved."""
        result = analyzer.run(make_image(4000, 2000), "image/png", "abc_wide.png")

        thumb = analyzer.thumbnail_dir / "thumb_abc_wide.jpg"
        assert thumb.is_file()
        with Image.open(thumb) as img:
            assert img.format == "JPEG"
            assert max(img.size) <= 200
            assert img.size == (200, 100)
        assert result.thumbnail_path == "/uploads/thumbnails/thumb_abc_wide.jpg"

    def test_small_image_is_not_upscaled(self, analyzer: ImageAnalyzer, make_image) -> None:
        analyzer.run(make_image(50, 40), "image/png", "tiny.png")

        with Image.open(analyzer.thumbnail_dir / "thumb_tiny.jpg") as img:
            assert img.size == (50, 40)

    def test_alpha_is_flattened_to_rgb(self, analyzer: ImageAnalyzer, make_image) -> None:
        analyzer.run(make_image(30, 30, mode="RGBA"), "image/png", "alpha.png")

        with Image.open(analyzer.thumbnail_dir / "thumb_alpha.jpg") as img:
            assert img.mode == "RGB"

    def test_no_temp_files_left_behind(self, analyzer: ImageAnalyzer, make_image) -> None:
        analyzer.run(make_image(30, 30), "image/png", "clean.png")

        leftovers = [p for p in analyzer.thumbnail_dir.iterdir() if p.suffix == ".tmp"]
        assert leftovers == []

    def test_thumbnail_name_replaces_extension(self) -> None:
        assert thumbnail_name("1234_photo.png") == "thumb_1234_photo.jpg"


# ── Failures ───────────────────────────────────────────────────────────────────

class TestImageFailures:

    def test_corrupt_image_raises_typed_failure(self, analyzer: ImageAnalyzer) -> None:
        with pytest.raises(ImageProcessingFailed):
            analyzer.run(b"\x89PNG\r\n\x1a\nnot really a png", "image/png", "bad.png")

    def test_corrupt_image_writes_no_thumbnail(self, analyzer: ImageAnalyzer) -> None:
        with pytest.raises(ImageProcessingFailed):
            analyzer.run(b"garbage", "image/jpeg", "bad.jpg")

        assert not (analyzer.thumbnail_dir / "thumb_bad.jpg").exists()

    def test_unwritable_thumbnail_dir_raises_resource_failure(
        self, tmp_path: Path, make_image
    ) -> None:
        blocker = tmp_path / "not_a_dir"
        blocker.write_bytes(b"")
        analyzer = ImageAnalyzer(thumbnail_dir=blocker)

        with pytest.raises(ThumbnailWriteError):
            analyzer.run(make_image(10, 10), "image/png", "x.png")

    def test_unsupported_media_type_is_rejected(self, analyzer: ImageAnalyzer) -> None:
        with pytest.raises(UnsupportedMediaTypeError):
            analyzer.run(b"hello", "text/plain", "notes.txt")
