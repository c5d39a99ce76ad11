"""Client-side compression stage.

Files larger than the configured threshold are resampled towards the
target byte size (see :mod:`imagebed.image.sizing`) and re-encoded as
JPEG.  Like the watermark stage, compression never blocks an upload.
"""

from __future__ import annotations

from imagebed.errors import ProcessingError
from imagebed.models import ProcessingWarning, SourceFile
from imagebed.observability import get_logger

from .detect import is_raster_type
from .raster import PillowSurface, RasterSurface
from .sizing import compute_dimensions

log = get_logger("imagebed.image")

COMPRESSED_MIME_TYPE = "image/jpeg"
"""Every compressed image is re-encoded as JPEG, whatever its source format."""

COMPRESSION_QUALITY = 0.8

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")

_DEFAULT_SURFACE = PillowSurface()


def is_compressible(file: SourceFile) -> bool:
    """Return True if the compression stage can process *file*."""
    return is_raster_type(file.mime_type)


def format_file_size(size_bytes: int) -> str:
    """Format a byte count for display, e.g. ``1536 -> "1.5 KB"``."""
    if size_bytes <= 0:
        return "0 Bytes"
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit]}"


def _render(
    file: SourceFile,
    target_size_mb: float,
    surface: RasterSurface,
) -> tuple[bytes, tuple[int, int]]:
    with surface.decode(file.data) as image:
        size = compute_dimensions(image.width, image.height, target_size_mb, file.size_mb)
        with surface.resize(image, size) as resized:
            return surface.encode(resized, COMPRESSED_MIME_TYPE, COMPRESSION_QUALITY), size


def compress_image(
    file: SourceFile,
    target_size_mb: float,
    threshold_mb: float,
    *,
    surface: RasterSurface | None = None,
    warnings: list[ProcessingWarning] | None = None,
) -> SourceFile:
    """Compress *file* if it is larger than *threshold_mb*.

    Parameters
    ----------
    file:
        The image to compress.
    target_size_mb:
        Desired output size in MB.  Approximate.
    threshold_mb:
        Files at or below this size are returned unchanged.
    surface:
        Imaging backend.  Defaults to :class:`PillowSurface`.
    warnings:
        If given, a :class:`ProcessingWarning` is appended when the stage
        falls back to the original file.

    Returns
    -------
    SourceFile
        A new ``image/jpeg`` file with the original name, or *file* itself
        when the stage was skipped or failed.
    """
    if file.size_mb <= threshold_mb:
        log.debug(
            "File size does not exceed threshold, skipping compression",
            extra={"extra_fields": {
                "op": "compress", "file_name": file.name,
                "size_mb": round(file.size_mb, 2), "threshold_mb": threshold_mb,
            }},
        )
        return file
    if not is_compressible(file):
        log.debug(
            "Media type cannot be compressed, skipping compression",
            extra={"extra_fields": {
                "op": "compress", "file_name": file.name, "mime_type": file.mime_type,
            }},
        )
        return file

    try:
        data, size = _render(file, target_size_mb, surface or _DEFAULT_SURFACE)
    except Exception as exc:
        err = ProcessingError(
            message=f"Failed to compress {file.name}: {exc}",
            context={"stage": "compress", "file_name": file.name, "mime_type": file.mime_type},
            cause=exc,
        )
        log.warning(
            "Compression failed, uploading the original file",
            exc_info=err,
            extra={"extra_fields": {"op": "compress", **err.context}},
        )
        if warnings is not None:
            warnings.append(ProcessingWarning(
                code="COMPRESSION_FAILED",
                message="Image compression failed, uploading the original file",
                context={**err.context, "error": str(err.cause)},
            ))
        return file

    log.info(
        "Compression complete",
        extra={"extra_fields": {
            "op": "compress", "file_name": file.name,
            "width": size[0], "height": size[1],
            "size_before": format_file_size(file.byte_size),
            "size_after": format_file_size(len(data)),
            "target_mb": target_size_mb,
        }},
    )
    return SourceFile(name=file.name, mime_type=COMPRESSED_MIME_TYPE, data=data)
