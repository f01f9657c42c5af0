"""
fileproc/analyzers/image_analyzer.py

Image analysis and thumbnailing using Pillow.

Responsibility: decode the payload to read its intrinsic metadata, render a
bounded JPEG thumbnail and persist it all-or-nothing under a path derived
from the stored filename.
"""

from __future__ import annotations

import contextlib
import io
import os
import tempfile
from pathlib import Path
from typing import Optional

from PIL import Image

from fileproc.analyzers.base import Analyzer, round_half_up
from fileproc.core.config import settings
from fileproc.core.constants import (
    IMAGE_MEDIA_TYPES,
    THUMBNAIL_MAX_SIDE,
    THUMBNAIL_PUBLIC_PREFIX,
    THUMBNAIL_QUALITY,
)
from fileproc.core.exceptions import ImageProcessingFailed, ThumbnailWriteError
from fileproc.core.logger import get_logger
from fileproc.models.processing_models import ImageAnalysis

logger = get_logger(__name__)

# Pillow mode -> colour-space label reported to clients.
_COLOR_SPACES = {
    "1": "b-w",
    "L": "b-w",
    "LA": "b-w",
    "I": "b-w",
    "F": "b-w",
    "I;16": "grey16",
    "CMYK": "cmyk",
    "LAB": "lab",
    "HSV": "hsv",
}


def thumbnail_name(filename: str) -> str:
    """``photo.png`` -> ``thumb_photo.jpg`` (extension always replaced)."""
    return f"thumb_{Path(filename).stem}.jpg"


class ImageAnalyzer(Analyzer):
    """
    Analyzer for JPEG, PNG and GIF uploads.

    The thumbnail is fully encoded in memory before anything touches the
    disk, then written to a temporary file in the target directory and
    renamed into place — readers never observe a partial thumbnail.
    """

    media_types = IMAGE_MEDIA_TYPES
    failure = ImageProcessingFailed

    def __init__(
        self,
        thumbnail_dir: Optional[Path] = None,
        max_side: int = THUMBNAIL_MAX_SIDE,
        quality: int = THUMBNAIL_QUALITY,
    ) -> None:
        """
        Args:
            thumbnail_dir : Where thumbnails are written.
                            Defaults to ``<settings.upload_dir>/thumbnails``.
            max_side      : Longest thumbnail side in pixels.
            quality       : JPEG quality of the thumbnail.
        """
        self.thumbnail_dir = Path(thumbnail_dir or Path(settings.upload_dir) / "thumbnails")
        self.max_side = max_side
        self.quality = quality

    # ── Analyzer interface ─────────────────────────────────────────────────────

    def analyze(self, data: bytes, media_type: str, filename: str) -> ImageAnalysis:
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()  # force a full decode; truncated files fail here
                width, height = img.size
                has_alpha = "A" in img.getbands() or "transparency" in img.info
                channels = _channel_count(img, has_alpha)
                color_space = _COLOR_SPACES.get(img.mode, "srgb")
                image_format = (img.format or media_type.split("/")[-1]).lower()
                thumbnail = self._render_thumbnail(img)
        except Exception as exc:
            raise ImageProcessingFailed(
                f"'{filename}' could not be decoded as an image: {exc}"
            ) from exc

        name = thumbnail_name(filename)
        self._write_atomic(self.thumbnail_dir / name, thumbnail)
        logger.debug("'%s' — thumbnail written (%d bytes).", filename, len(thumbnail))

        return ImageAnalysis(
            width=width,
            height=height,
            format=image_format,
            channels=channels,
            has_alpha=has_alpha,
            color_space=color_space,
            thumbnail_path=f"{THUMBNAIL_PUBLIC_PREFIX}/{name}",
            aspect_ratio=round_half_up(width / height, 2),
            megapixels=round_half_up(width * height / 1_000_000, 1),
            estimated_colors="Grayscale" if channels == 1 else "Color",
        )

    # ── Internals ──────────────────────────────────────────────────────────────

    def _render_thumbnail(self, img: Image.Image) -> bytes:
        """Fit inside a ``max_side`` box (never upscaling) and encode as JPEG."""
        thumb = img.copy()
        if thumb.mode in ("RGBA", "LA", "PA") or (
            thumb.mode == "P" and "transparency" in thumb.info
        ):
            # JPEG has no alpha: flatten onto white.
            rgba = thumb.convert("RGBA")
            thumb = Image.new("RGB", rgba.size, (255, 255, 255))
            thumb.paste(rgba, mask=rgba.getchannel("A"))
        elif thumb.mode != "RGB":
            thumb = thumb.convert("RGB")

        thumb.thumbnail((self.max_side, self.max_side), Image.Resampling.LANCZOS)

        buf = io.BytesIO()
        thumb.save(buf, format="JPEG", quality=self.quality)
        return buf.getvalue()

    @staticmethod
    def _write_atomic(target: Path, payload: bytes) -> None:
        """Write ``payload`` to ``target`` via temp file + rename."""
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=target.parent, prefix=".thumb-", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(payload)
                os.replace(tmp_path, target)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)
                raise
        except OSError as exc:
            raise ThumbnailWriteError(f"Thumbnail could not be written to '{target}': {exc}") from exc


def _channel_count(img: Image.Image, has_alpha: bool) -> int:
    """Channels as a decoder would report them; palette images expand to RGB(A)."""
    if img.mode == "P":
        return 4 if has_alpha else 3
    return len(img.getbands())
