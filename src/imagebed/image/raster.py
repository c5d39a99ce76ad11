"""Raster surface: decode, draw, resample, and encode images.

The watermark and compression stages never touch an imaging library
directly.  They go through a :class:`RasterSurface`, so tests can swap in
a surface that fails on demand, and so the decoded image is always a
context-managed handle that is closed on every exit path.

:class:`PillowSurface` is the default implementation.
"""

from __future__ import annotations

import functools
import io
import os
from typing import Protocol, runtime_checkable

from PIL import Image, ImageDraw, ImageFont, ImageOps

from imagebed.observability import get_logger

log = get_logger("imagebed.image")

# Pillow encoder names for every media type the stages re-encode.
_PIL_FORMATS: dict[str, str] = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
}

_FONT_CANDIDATES = (
    "DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "C:/Windows/Fonts/arialbd.ttf",
    "arialbd.ttf",
)

Color = tuple[int, int, int, int]


@runtime_checkable
class RasterSurface(Protocol):
    """Imaging operations used by the processing stages.

    Every method may raise any exception on malformed input; the stages
    turn those into :class:`~imagebed.errors.ProcessingError`.
    """

    def decode(self, data: bytes) -> Image.Image:
        """Decode *data* into a fully loaded image handle."""
        ...

    def resize(self, image: Image.Image, size: tuple[int, int]) -> Image.Image:
        """Return a copy of *image* resampled to ``(width, height)``."""
        ...

    def draw_text(
        self,
        image: Image.Image,
        text: str,
        anchor: tuple[float, float],
        font_size: int,
        fill: Color,
        outline: Color,
    ) -> Image.Image:
        """Return a copy of *image* with bold *text* centred on *anchor*."""
        ...

    def encode(self, image: Image.Image, mime_type: str, quality: float) -> bytes:
        """Encode *image* as *mime_type*; *quality* is in ``[0, 1]``."""
        ...


@functools.lru_cache(maxsize=32)
def load_bold_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Return a bold font at *size* px, falling back to Pillow's default."""
    candidates = (os.getenv("IMAGEBED_WATERMARK_FONT"), *_FONT_CANDIDATES)
    for path in candidates:
        if not path:
            continue
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    log.warning(
        "No bold TrueType font found; using Pillow's default font",
        extra={"extra_fields": {"op": "load_font", "size": size}},
    )
    return ImageFont.load_default(size=size)


class PillowSurface:
    """:class:`RasterSurface` backed by Pillow.

    Parameters
    ----------
    stroke_width:
        Outline width in pixels drawn around watermark glyphs.
    """

    def __init__(self, stroke_width: int = 1) -> None:
        self.stroke_width = stroke_width

    def decode(self, data: bytes) -> Image.Image:
        image = Image.open(io.BytesIO(data))
        try:
            image.load()
            # Browsers honour EXIF orientation when drawing to a canvas.
            oriented = ImageOps.exif_transpose(image)
        except Exception:
            image.close()
            raise
        if oriented is not None and oriented is not image:
            image.close()
            return oriented
        return image

    def resize(self, image: Image.Image, size: tuple[int, int]) -> Image.Image:
        return image.resize(size, Image.Resampling.LANCZOS)

    def draw_text(
        self,
        image: Image.Image,
        text: str,
        anchor: tuple[float, float],
        font_size: int,
        fill: Color,
        outline: Color,
    ) -> Image.Image:
        base = image.convert("RGBA")
        overlay = Image.new("RGBA", base.size, (255, 255, 255, 0))
        draw = ImageDraw.Draw(overlay)
        draw.text(
            anchor,
            text,
            font=load_bold_font(font_size),
            fill=fill,
            anchor="mm",
            stroke_width=self.stroke_width,
            stroke_fill=outline,
        )
        try:
            return Image.alpha_composite(base, overlay)
        finally:
            overlay.close()
            if base is not image:
                base.close()

    def encode(self, image: Image.Image, mime_type: str, quality: float) -> bytes:
        fmt = _PIL_FORMATS.get(mime_type.lower())
        if fmt is None:
            raise ValueError(f"Cannot encode images as {mime_type!r}")

        out = image
        if fmt == "JPEG" and image.mode not in ("RGB", "L"):
            out = image.convert("RGB")

        buf = io.BytesIO()
        try:
            if fmt == "PNG":
                out.save(buf, format=fmt, optimize=True)
            else:
                out.save(buf, format=fmt, quality=round(quality * 100))
        finally:
            if out is not image:
                out.close()
        return buf.getvalue()
