"""imagebed: client-side image upload pipeline for CF-ImageBed style hosts.

Public re-exports
-----------------

* **Pipeline:** :class:`UploadPipeline`, :func:`upload_image`
* **Configuration:** :class:`UploadConfig`, :func:`validate_settings`
* **Errors:** Every :class:`ImageBedError` subclass and :class:`ErrorCode`
* **Models:** :class:`SourceFile`, :class:`UploadResult`, and friends
* **Backup:** :class:`BackupStorage`, :class:`LocalBackupStorage`

Usage::

    import asyncio
    from imagebed import SourceFile, UploadConfig, upload_image

    config = UploadConfig(api_url="https://img.example.com", auth_code="secret")
    result = asyncio.run(upload_image(SourceFile.from_path("cat.png"), config))
    print(result.unwrap())
"""

from __future__ import annotations

# ── Backup ──────────────────────────────────────────────────────────────
from imagebed.backup import BackupStorage, LocalBackupStorage, backup_file, normalize_path

# ── Configuration ───────────────────────────────────────────────────────
from imagebed.config import (
    DEFAULT_ALLOWED_FILE_TYPES,
    WATERMARK_POSITIONS,
    UploadConfig,
    validate_settings,
)

# ── Errors ──────────────────────────────────────────────────────────────
from imagebed.errors import (
    BackupError,
    BadResponseError,
    ConfigMissingError,
    ErrorCode,
    FileTooLargeError,
    ImageBedError,
    ProcessingError,
    UnsupportedTypeError,
    UploadConfigError,
    UploadHTTPError,
    UploadNetworkError,
    UploadTransportError,
)

# ── Models ──────────────────────────────────────────────────────────────
from imagebed.models import ProcessingWarning, SourceFile, UploadResult, UploadStage

# ── Pipeline ────────────────────────────────────────────────────────────
from imagebed.pipeline import UploadPipeline, upload_image

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Pipeline
    "UploadPipeline",
    "upload_image",
    # Configuration
    "UploadConfig",
    "DEFAULT_ALLOWED_FILE_TYPES",
    "WATERMARK_POSITIONS",
    "validate_settings",
    # Error base + code enum
    "ImageBedError",
    "ErrorCode",
    # Validation errors
    "UploadConfigError",
    "ConfigMissingError",
    "UnsupportedTypeError",
    "FileTooLargeError",
    # Transport errors
    "UploadTransportError",
    "UploadHTTPError",
    "BadResponseError",
    "UploadNetworkError",
    # Recoverable errors
    "ProcessingError",
    "BackupError",
    # Models
    "SourceFile",
    "UploadResult",
    "ProcessingWarning",
    "UploadStage",
    # Backup
    "BackupStorage",
    "LocalBackupStorage",
    "backup_file",
    "normalize_path",
]
