"""Image stages: validation, watermarking, compression, and sizing.

Exports
-------
validate_source
    Check configuration, extension, and size before processing.
add_watermark
    Draw watermark text and re-encode in the original media type.
compress_image
    Resample towards a target byte size and re-encode as JPEG.
compute_dimensions
    Target pixel size for compression.
compute_anchor
    Point the watermark text is centred on.
PillowSurface / RasterSurface
    Imaging backend used by the stages.
UploadStateMachine
    Track upload lifecycle state and enforce valid transitions.
"""

from .compress import compress_image, format_file_size, is_compressible
from .detect import file_extension, guess_mime_type, is_raster_type
from .raster import PillowSurface, RasterSurface
from .sizing import MAX_DIMENSION, MIN_DIMENSION, compute_dimensions
from .state import UploadStateMachine
from .validate import validate_file_size, validate_file_type, validate_source
from .watermark import add_watermark, compute_anchor, is_watermarkable, position_options

__all__ = [
    "MAX_DIMENSION",
    "MIN_DIMENSION",
    "PillowSurface",
    "RasterSurface",
    "UploadStateMachine",
    "add_watermark",
    "compress_image",
    "compute_anchor",
    "compute_dimensions",
    "file_extension",
    "format_file_size",
    "guess_mime_type",
    "is_compressible",
    "is_raster_type",
    "is_watermarkable",
    "position_options",
    "validate_file_size",
    "validate_file_type",
    "validate_source",
]
