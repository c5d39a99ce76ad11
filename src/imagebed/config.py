"""Upload configuration for imagebed.

:class:`UploadConfig` is a dataclass that captures every option the
upload pipeline reads.  The host application stores the same options as a
flat camelCase settings object; :meth:`UploadConfig.from_settings` and
:meth:`UploadConfig.to_settings` convert between the two.

The pipeline trusts its configuration.  :func:`validate_settings` is the
separate check the settings screen runs before saving.

One module-level constant defines the default extension allowlist:

* :data:`DEFAULT_ALLOWED_FILE_TYPES`: accepted file extensions.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal
from urllib.parse import urlparse

# ---------------------------------------------------------------------------
# Allowlist constants
# ---------------------------------------------------------------------------

DEFAULT_ALLOWED_FILE_TYPES: list[str] = [
    "jpg",
    "jpeg",
    "png",
    "gif",
    "webp",
    "bmp",
]
"""Lowercase file extensions accepted for upload."""

UPLOAD_CHANNELS = ("telegram", "cfr2", "s3")
UPLOAD_NAME_TYPES = ("default", "index", "origin", "short")
RETURN_FORMATS = ("default", "full")
WATERMARK_POSITIONS = ("top-left", "top-right", "bottom-left", "bottom-right", "center")


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class UploadConfig:
    """Complete configuration for one upload call.

    Every parameter has a default, but an upload fails with
    :class:`~imagebed.errors.ConfigMissingError` until ``api_url`` and
    ``auth_code`` are set.

    Parameters
    ----------
    api_url:
        Root URL of the image host, without a trailing slash.  Uploads go
        to ``<api_url>/upload``.
    auth_code:
        Upload authentication code.  **Required.**  Never logged.
    upload_channel:
        Storage backend the server should use.
    upload_name_type:
        How the server names the stored file.
    return_format:
        ``"full"`` if the server returns absolute URLs, ``"default"`` if it
        returns paths that must be prefixed with ``api_url``.
    upload_folder:
        Optional server-side folder.  Empty means no folder.
    server_compress:
        Ask the server to compress the image.
    auto_retry:
        Ask the server to retry on alternate channels.  The client never
        retries on its own.
    max_file_size:
        Upload ceiling in MB.
    allowed_file_types:
        Lowercase extensions accepted for upload.
    enable_watermark, watermark_text, watermark_position, watermark_size, watermark_opacity:
        Client-side text watermark.  Blank text disables it.
    enable_client_compress, compress_threshold, target_size:
        Client-side compression.  Files above ``compress_threshold`` MB are
        resampled towards ``target_size`` MB and re-encoded as JPEG.
    show_upload_progress, show_success_notification, show_error_notification:
        Gate the transient notifications sent to the host's notifier.
    notification_duration:
        Seconds a success notification stays visible.
    enable_local_backup, backup_path:
        Copy the processed file into the host's storage after a
        successful upload.
    timeout_seconds:
        HTTP timeout.  ``None`` keeps the httpx default.
    """

    # ── Server ──────────────────────────────────────────────────────────
    api_url: str = ""

    auth_code: str = ""

    upload_channel: Literal["telegram", "cfr2", "s3"] = "telegram"

    upload_name_type: Literal["default", "index", "origin", "short"] = "default"

    return_format: Literal["default", "full"] = "default"

    upload_folder: str = ""

    server_compress: bool = True

    auto_retry: bool = True

    # ── Limits ──────────────────────────────────────────────────────────
    max_file_size: float = 10

    allowed_file_types: list[str] = field(
        default_factory=lambda: list(DEFAULT_ALLOWED_FILE_TYPES),
    )

    # ── Watermark ───────────────────────────────────────────────────────
    enable_watermark: bool = False

    watermark_text: str = ""

    watermark_position: str = "bottom-right"

    watermark_size: int = 24

    watermark_opacity: float = 0.7

    # ── Client compression ──────────────────────────────────────────────
    enable_client_compress: bool = False

    compress_threshold: float = 2

    target_size: float = 1

    # ── Notifications ───────────────────────────────────────────────────
    show_upload_progress: bool = True

    show_success_notification: bool = True

    show_error_notification: bool = True

    notification_duration: float = 5

    # ── Backup ──────────────────────────────────────────────────────────
    enable_local_backup: bool = False

    backup_path: str = "attachments/backup"

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        self.allowed_file_types = [ext.lower().lstrip(".") for ext in self.allowed_file_types]

    # -- settings object ---------------------------------------------------

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> UploadConfig:
        """Build a config from the host's camelCase settings object.

        Missing keys keep their defaults and unknown keys are ignored, so
        settings saved by an older version still load.
        """
        kwargs: dict[str, Any] = {}
        for f in dataclasses.fields(cls):
            key = _to_camel(f.name)
            if key in settings:
                kwargs[f.name] = settings[key]
        return cls(**kwargs)

    def to_settings(self) -> dict[str, Any]:
        """Return the camelCase settings object for this config."""
        return {
            _to_camel(f.name): _copy_value(getattr(self, f.name))
            for f in dataclasses.fields(self)
        }

    def __repr__(self) -> str:
        """Mask the auth code to prevent accidental credential leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "auth_code":
                masked = f"...{val[-4:]}" if len(val) >= 4 else "****"
                parts.append(f"auth_code='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"UploadConfig({', '.join(parts)})"


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _copy_value(value: Any) -> Any:
    return list(value) if isinstance(value, list) else value


# ---------------------------------------------------------------------------
# Settings validation
# ---------------------------------------------------------------------------

def is_valid_url(url: str) -> bool:
    """Return True if *url* is an absolute http(s) URL with a host."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_settings(config: UploadConfig) -> list[str]:
    """Check a configuration before it is saved.

    Returns
    -------
    list[str]
        One human-readable message per problem.  An empty list means the
        configuration is valid.
    """
    errors: list[str] = []

    if not config.api_url:
        errors.append("API URL must not be empty")
    elif not is_valid_url(config.api_url):
        errors.append("API URL is not a valid URL")

    if not config.auth_code:
        errors.append("Auth code must not be empty")

    if config.upload_channel not in UPLOAD_CHANNELS:
        errors.append(f"Upload channel must be one of {', '.join(UPLOAD_CHANNELS)}")
    if config.upload_name_type not in UPLOAD_NAME_TYPES:
        errors.append(f"Upload name type must be one of {', '.join(UPLOAD_NAME_TYPES)}")
    if config.return_format not in RETURN_FORMATS:
        errors.append(f"Return format must be one of {', '.join(RETURN_FORMATS)}")

    if config.max_file_size < 1 or config.max_file_size > 100:
        errors.append("Max file size must be between 1 and 100 MB")

    if config.enable_client_compress:
        if config.compress_threshold < 0.1 or config.compress_threshold > 20:
            errors.append("Compression threshold must be between 0.1 and 20 MB")
        if config.target_size < 0.1 or config.target_size > 10:
            errors.append("Target size must be between 0.1 and 10 MB")
        if config.target_size >= config.compress_threshold:
            errors.append("Target size must be smaller than the compression threshold")

    if config.notification_duration < 1 or config.notification_duration > 30:
        errors.append("Notification duration must be between 1 and 30 seconds")

    if not config.allowed_file_types:
        errors.append("At least one allowed file type is required")

    if config.enable_watermark:
        if not config.watermark_text.strip():
            errors.append("Watermark text is required when the watermark is enabled")
        if config.watermark_size < 8 or config.watermark_size > 100:
            errors.append("Watermark size must be between 8 and 100 px")
        if config.watermark_opacity < 0.1 or config.watermark_opacity > 1:
            errors.append("Watermark opacity must be between 0.1 and 1")
        if config.watermark_position not in WATERMARK_POSITIONS:
            errors.append(f"Watermark position must be one of {', '.join(WATERMARK_POSITIONS)}")

    if config.enable_local_backup and not config.backup_path.strip():
        errors.append("Backup path is required when local backup is enabled")

    return errors
