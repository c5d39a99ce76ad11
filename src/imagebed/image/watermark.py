"""Client-side text watermark stage.

Draws white, black-outlined, bold text onto a copy of the image at one of
five anchor positions and re-encodes it in its original media type.  The
stage can never block an upload: on any imaging failure it returns the
original file and records a :class:`ProcessingWarning`.
"""

from __future__ import annotations

from imagebed.config import WATERMARK_POSITIONS
from imagebed.errors import ProcessingError
from imagebed.models import ProcessingWarning, SourceFile
from imagebed.observability import get_logger

from .detect import is_raster_type
from .raster import PillowSurface, RasterSurface

log = get_logger("imagebed.image")

WATERMARK_QUALITY = 0.9
"""Encoder quality used when re-encoding a watermarked image."""

# Estimated glyph width as a fraction of the font size.
_CHAR_WIDTH_FACTOR = 0.6

_DEFAULT_SURFACE = PillowSurface()


def is_watermarkable(file: SourceFile) -> bool:
    """Return True if the watermark stage can process *file*."""
    return is_raster_type(file.mime_type)


def position_options() -> list[str]:
    """Return the accepted ``watermark_position`` values in display order."""
    return list(WATERMARK_POSITIONS)


def compute_anchor(
    image_width: int,
    image_height: int,
    position: str,
    font_size: int,
    text: str,
) -> tuple[float, float]:
    """Compute the point the watermark text is centred on.

    Corner positions keep the estimated text block ``font_size`` pixels
    away from both adjacent edges; ``"center"`` is the image centre; any
    other value behaves like ``"bottom-right"``.
    """
    padding = font_size
    text_width = len(text) * font_size * _CHAR_WIDTH_FACTOR
    text_height = font_size

    left = padding + text_width / 2
    right = image_width - padding - text_width / 2
    top = padding + text_height / 2
    bottom = image_height - padding - text_height / 2

    if position == "top-left":
        return left, top
    if position == "top-right":
        return right, top
    if position == "bottom-left":
        return left, bottom
    if position == "center":
        return image_width / 2, image_height / 2
    return right, bottom


def _render(
    file: SourceFile,
    text: str,
    position: str,
    font_size: int,
    opacity: float,
    surface: RasterSurface,
) -> bytes:
    fill = (255, 255, 255, round(255 * opacity))
    outline = (0, 0, 0, round(255 * opacity * 0.5))
    with surface.decode(file.data) as image:
        anchor = compute_anchor(image.width, image.height, position, font_size, text)
        with surface.draw_text(image, text, anchor, font_size, fill, outline) as marked:
            return surface.encode(marked, file.mime_type, WATERMARK_QUALITY)


def add_watermark(
    file: SourceFile,
    text: str,
    position: str,
    font_size: int,
    opacity: float,
    *,
    surface: RasterSurface | None = None,
    warnings: list[ProcessingWarning] | None = None,
) -> SourceFile:
    """Add a text watermark to *file*.

    Parameters
    ----------
    file:
        The image to watermark.
    text:
        Watermark text.  Blank text makes the stage a no-op.
    position:
        One of :data:`~imagebed.config.WATERMARK_POSITIONS`.
    font_size:
        Font size in pixels; also the distance from the image edges.
    opacity:
        Text opacity in ``[0, 1]``.  The outline uses half of it.
    surface:
        Imaging backend.  Defaults to :class:`PillowSurface`.
    warnings:
        If given, a :class:`ProcessingWarning` is appended when the stage
        falls back to the original file.

    Returns
    -------
    SourceFile
        A new file with the same name and media type, or *file* itself
        when the stage was skipped or failed.
    """
    if not text.strip():
        log.debug(
            "Watermark text is empty, skipping watermark",
            extra={"extra_fields": {"op": "watermark", "file_name": file.name}},
        )
        return file
    if not is_watermarkable(file):
        log.debug(
            "Media type cannot be watermarked, skipping watermark",
            extra={"extra_fields": {
                "op": "watermark", "file_name": file.name, "mime_type": file.mime_type,
            }},
        )
        return file

    try:
        data = _render(file, text, position, font_size, opacity, surface or _DEFAULT_SURFACE)
    except Exception as exc:
        err = ProcessingError(
            message=f"Failed to add watermark to {file.name}: {exc}",
            context={"stage": "watermark", "file_name": file.name, "mime_type": file.mime_type},
            cause=exc,
        )
        log.warning(
            "Watermark failed, uploading the original file",
            exc_info=err,
            extra={"extra_fields": {"op": "watermark", **err.context}},
        )
        if warnings is not None:
            warnings.append(ProcessingWarning(
                code="WATERMARK_FAILED",
                message="Failed to add watermark, uploading the original file",
                context={**err.context, "error": str(err.cause)},
            ))
        return file

    log.info(
        "Watermark added",
        extra={"extra_fields": {
            "op": "watermark", "file_name": file.name, "position": position,
            "bytes_before": file.byte_size, "bytes_after": len(data),
        }},
    )
    return SourceFile(name=file.name, mime_type=file.mime_type, data=data)
