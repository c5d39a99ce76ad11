"""Public data models for the imagebed uploader.

This module contains the file type that flows through the pipeline, the
result type returned to the caller, the non-fatal warning type, and the
stage enum used by the upload state machine.  All types are plain
dataclasses with no behaviour beyond small derived properties.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from imagebed.errors import ImageBedError

BYTES_PER_MB = 1024 * 1024
"""Size unit used by every ``*_mb`` setting."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class UploadStage(str, Enum):
    """Lifecycle states of a single :meth:`UploadPipeline.upload` call."""

    IDLE = "idle"
    """Initial state, nothing has run yet."""

    VALIDATING = "validating"
    """Checking configuration, extension, and size."""

    WATERMARKING = "watermarking"
    """Drawing the watermark text (skipped when disabled)."""

    COMPRESSING = "compressing"
    """Resampling and re-encoding as JPEG (skipped when disabled)."""

    ENCODING = "encoding"
    """Building query parameters and the multipart body."""

    TRANSMITTING = "transmitting"
    """The POST request is in flight."""

    INTERPRETING = "interpreting"
    """Parsing the JSON reply into a canonical URL."""

    SUCCEEDED = "succeeded"
    """Terminal: a URL was produced."""

    FAILED = "failed"
    """Terminal: an :class:`ImageBedError` was produced."""


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceFile:
    """An immutable image blob flowing through the pipeline.

    Stages never mutate a ``SourceFile``; they either return the same
    instance or build a new one.

    Attributes
    ----------
    name:
        File name including extension (e.g. ``"photo.png"``).
    mime_type:
        Media type (e.g. ``"image/png"``).
    data:
        Raw file bytes.
    """

    name: str
    mime_type: str
    data: bytes = field(repr=False)

    @property
    def byte_size(self) -> int:
        return len(self.data)

    @property
    def size_mb(self) -> float:
        return len(self.data) / BYTES_PER_MB

    @classmethod
    def from_path(cls, path: str | Path, mime_type: str | None = None) -> SourceFile:
        """Read *path* from disk.

        When *mime_type* is not given it is sniffed from the leading bytes
        and, failing that, guessed from the extension.
        """
        from imagebed.image.detect import guess_mime_type

        file_path = Path(path).expanduser()
        data = file_path.read_bytes()
        return cls(
            name=file_path.name,
            mime_type=mime_type or guess_mime_type(file_path.name, data),
            data=data,
        )


# ---------------------------------------------------------------------------
# Warnings
# ---------------------------------------------------------------------------

@dataclass
class ProcessingWarning:
    """A non-fatal issue raised by the watermark or compression stage.

    The stage that produced the warning fell back to the unmodified file,
    so the upload itself carried on.

    Attributes
    ----------
    code:
        ``"WATERMARK_FAILED"`` or ``"COMPRESSION_FAILED"``.
    message:
        A human-readable description of the issue.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class UploadResult:
    """Outcome of :meth:`UploadPipeline.upload`.

    Exactly one of ``url`` and ``error`` is set.

    Attributes
    ----------
    url:
        The canonical URL of the stored image.
    error:
        The terminal failure.
    file:
        The file that was (or would have been) transmitted, after
        watermarking and compression.  ``None`` when validation failed.
    warnings:
        Processing warnings recovered along the way.
    stage:
        The terminal stage (``SUCCEEDED`` or ``FAILED``).
    """

    url: str | None = None
    error: ImageBedError | None = None
    file: SourceFile | None = None
    warnings: list[ProcessingWarning] = field(default_factory=list)
    stage: UploadStage = UploadStage.SUCCEEDED

    def __post_init__(self) -> None:
        if (self.url is None) == (self.error is None):
            raise ValueError("UploadResult needs exactly one of url or error")

    @property
    def ok(self) -> bool:
        return self.url is not None

    def unwrap(self) -> str:
        """Return the URL, or raise the recorded error."""
        if self.error is not None:
            raise self.error
        assert self.url is not None
        return self.url

    def markdown(self, alt: str | None = None) -> str:
        """Render the ``![name](url)`` snippet the editor inserts."""
        url = self.unwrap()
        if alt is None:
            alt = self.file.name if self.file is not None else ""
        return f"![{alt}]({url})"
