"""Upload validation: configuration, extension, and size checks.

Runs before any processing stage.  A file that fails here never reaches
the watermark, compression, or network stages.
"""

from __future__ import annotations

from imagebed.config import UploadConfig
from imagebed.errors import (
    ConfigMissingError,
    FileTooLargeError,
    UnsupportedTypeError,
)
from imagebed.models import BYTES_PER_MB, SourceFile

from .detect import file_extension


def validate_file_type(file_name: str, allowed_types: list[str]) -> bool:
    """Return True if the extension of *file_name* is in *allowed_types*."""
    extension = file_extension(file_name)
    return bool(extension) and extension in allowed_types


def validate_file_size(size_bytes: int, max_size_mb: float) -> bool:
    """Return True if *size_bytes* does not exceed *max_size_mb*."""
    return size_bytes <= max_size_mb * BYTES_PER_MB


def validate_source(file: SourceFile, config: UploadConfig) -> None:
    """Validate an upload request.

    Checks run in a fixed order: configuration, then file type, then size.

    Parameters
    ----------
    file:
        The file the caller wants to upload.
    config:
        The configuration for this call.

    Raises
    ------
    ConfigMissingError
        If ``api_url`` or ``auth_code`` is empty.
    UnsupportedTypeError
        If the file extension is not in ``config.allowed_file_types``.
    FileTooLargeError
        If the file exceeds ``config.max_file_size`` MB.
    """
    missing = [
        name
        for name, value in (("api_url", config.api_url), ("auth_code", config.auth_code))
        if not value
    ]
    if missing:
        raise ConfigMissingError(
            message="Please configure the API URL and auth code first",
            context={"missing": missing},
        )

    if not validate_file_type(file.name, config.allowed_file_types):
        raise UnsupportedTypeError(
            message=f"Unsupported file type: {file_extension(file.name) or file.name!r}",
            context={
                "file_name": file.name,
                "extension": file_extension(file.name),
                "allowed": list(config.allowed_file_types),
            },
        )

    if not validate_file_size(file.byte_size, config.max_file_size):
        raise FileTooLargeError(
            message=(
                f"File size {file.size_mb:.2f} MB exceeds "
                f"the {config.max_file_size} MB limit"
            ),
            context={
                "file_name": file.name,
                "size_bytes": file.byte_size,
                "max_bytes": int(config.max_file_size * BYTES_PER_MB),
            },
        )
