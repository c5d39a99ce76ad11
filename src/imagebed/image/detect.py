"""Image type detection.

Works out a file's extension and media type so the pipeline can apply the
extension allowlist and decide which stages can handle the file.
"""

from __future__ import annotations

import mimetypes

# Map of magic bytes to MIME types for sniffing.
_MAGIC_BYTES: list[tuple[bytes, str]] = [
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"RIFF", "image/webp"),  # RIFF....WEBP (check further)
    (b"BM", "image/bmp"),
]

# Media types the raster stages can decode and re-encode.
RASTER_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
})


def file_extension(name: str) -> str:
    """Return the lowercase text after the last ``.`` in *name*.

    Returns ``""`` when the name has no dot.
    """
    _, dot, ext = name.rpartition(".")
    return ext.lower() if dot else ""


def sniff_mime(data: bytes) -> str | None:
    """Attempt to detect MIME type from the first bytes of image data."""
    for magic, mime in _MAGIC_BYTES:
        if data[:len(magic)] == magic:
            if magic == b"RIFF" and data[8:12] != b"WEBP":
                continue
            return mime
    return None


def guess_mime_type(name: str, data: bytes | None = None) -> str:
    """Guess the media type of a file, preferring its content over its name."""
    mime_type = sniff_mime(data) if data else None
    if not mime_type:
        mime_type, _ = mimetypes.guess_type(name)
    return mime_type or "application/octet-stream"


def is_raster_type(mime_type: str) -> bool:
    """Return True if *mime_type* can be watermarked and compressed."""
    return mime_type.lower() in RASTER_MIME_TYPES
