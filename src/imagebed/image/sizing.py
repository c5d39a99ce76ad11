"""Target pixel dimensions for client-side compression.

Raster byte size grows roughly with pixel count, i.e. with the square of
the linear dimensions, so scaling each side by ``sqrt(target / original)``
aims the output at the target byte size.  The estimate is approximate;
JPEG encoding may land above or below it.
"""

from __future__ import annotations

import math

MIN_DIMENSION = 100
"""Smallest side length (px) a compressed image is allowed to have."""

MAX_DIMENSION = 4000
"""Largest side length (px) a compressed image is allowed to have."""


def compute_dimensions(
    orig_width: int,
    orig_height: int,
    target_size_mb: float,
    original_size_mb: float,
) -> tuple[int, int]:
    """Compute compressed image dimensions.

    Parameters
    ----------
    orig_width, orig_height:
        Decoded pixel size of the source image.
    target_size_mb:
        Desired output size in MB.
    original_size_mb:
        Current file size in MB.  Must be greater than zero.

    Returns
    -------
    tuple[int, int]
        ``(width, height)``.  If the scaled image is smaller than
        :data:`MIN_DIMENSION` on either side it is scaled up, keeping the
        aspect ratio, until its smaller side is :data:`MIN_DIMENSION`.  Then,
        if either side exceeds :data:`MAX_DIMENSION`, it is scaled down until
        its larger side is :data:`MAX_DIMENSION`.
    """
    ratio = math.sqrt(target_size_mb / original_size_mb)
    width = math.floor(orig_width * ratio)
    height = math.floor(orig_height * ratio)

    aspect = orig_width / orig_height
    landscape = orig_width >= orig_height

    if width < MIN_DIMENSION or height < MIN_DIMENSION:
        if landscape:
            height = MIN_DIMENSION
            width = math.floor(MIN_DIMENSION * aspect)
        else:
            width = MIN_DIMENSION
            height = math.floor(MIN_DIMENSION / aspect)

    if width > MAX_DIMENSION or height > MAX_DIMENSION:
        if landscape:
            width = MAX_DIMENSION
            height = math.floor(MAX_DIMENSION / aspect)
        else:
            height = MAX_DIMENSION
            width = math.floor(MAX_DIMENSION * aspect)

    # Extreme aspect ratios can floor the short side to zero.
    return max(1, width), max(1, height)
