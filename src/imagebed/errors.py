"""Full error hierarchy for the imagebed uploader.

Every public error class inherits from ImageBedError. Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

Error codes are defined as a :class:`str` enum so that they serialise
naturally to JSON and can be matched with simple ``==`` comparisons.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the uploader can raise."""

    CONFIG_MISSING = "CONFIG_MISSING"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    HTTP_ERROR = "HTTP_ERROR"
    BAD_RESPONSE = "BAD_RESPONSE"
    NETWORK_ERROR = "NETWORK_ERROR"
    PROCESSING_FAILED = "PROCESSING_FAILED"
    BACKUP_FAILED = "BACKUP_FAILED"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class ImageBedError(Exception):
    """Base exception for all imagebed errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A human-readable description of what went wrong.  This is the text
        shown to the user in the failure notification.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys and expected types are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Validation errors (raised before any stage runs)
# ---------------------------------------------------------------------------

class UploadConfigError(ImageBedError):
    """Base class for failures detected while validating an upload request.

    Context varies by subclass.
    """


class ConfigMissingError(UploadConfigError):
    """``api_url`` or ``auth_code`` is not configured.

    Context keys: ``missing`` (list of setting names).
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.CONFIG_MISSING,
            message=message,
            context=context,
            cause=cause,
        )


class UnsupportedTypeError(UploadConfigError):
    """The file extension is not in ``allowed_file_types``.

    Context keys: ``file_name``, ``extension``, ``allowed``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UNSUPPORTED_TYPE,
            message=message,
            context=context,
            cause=cause,
        )


class FileTooLargeError(UploadConfigError):
    """The file exceeds ``max_file_size``.

    Context keys: ``file_name``, ``size_bytes``, ``max_bytes``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.FILE_TOO_LARGE,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Transport errors
# ---------------------------------------------------------------------------

class UploadTransportError(ImageBedError):
    """Base class for failures while sending the request or reading the reply.

    Context varies by subclass.
    """


class UploadHTTPError(UploadTransportError):
    """The image host answered with a non-2xx status.

    Context keys: ``status``, ``status_text``, ``url`` (redacted).
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.HTTP_ERROR,
            message=message,
            context=context,
            cause=cause,
        )

    @property
    def status(self) -> int | None:
        return self.context.get("status")

    @property
    def status_text(self) -> str:
        return self.context.get("status_text", "")


class BadResponseError(UploadTransportError):
    """The response body was not the expected ``[{"src": ...}]`` shape.

    Context keys: ``reason``, ``body`` (truncated).
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.BAD_RESPONSE,
            message=message,
            context=context,
            cause=cause,
        )


class UploadNetworkError(UploadTransportError):
    """A transport-level failure occurred (timeout, DNS, connection refused).

    Context keys: ``url`` (redacted).
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.NETWORK_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Recoverable errors
# ---------------------------------------------------------------------------

class ProcessingError(ImageBedError):
    """Watermarking or compression could not decode, draw, or encode an image.

    Never reaches the caller: the stage that raised it falls back to the
    unmodified file and records a :class:`~imagebed.models.ProcessingWarning`.

    Context keys: ``stage``, ``file_name``, ``mime_type``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.PROCESSING_FAILED,
            message=message,
            context=context,
            cause=cause,
        )


class BackupError(ImageBedError):
    """Writing the local backup copy failed.  Logged only.

    Context keys: ``path``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.BACKUP_FAILED,
            message=message,
            context=context,
            cause=cause,
        )
