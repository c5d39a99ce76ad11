"""Hand-built ``multipart/form-data`` bodies.

The upload request carries exactly one file part.  Building the body here
rather than through ``httpx``'s ``files=`` argument keeps the bytes on the
wire fully determined by this module: the boundary, the part headers, and
their order are known to the caller and to the tests.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass

from imagebed.models import SourceFile

_CRLF = b"\r\n"

# Same escaping browsers apply to names inside Content-Disposition.
_HEADER_ESCAPES = str.maketrans({'"': "%22", "\r": "%0D", "\n": "%0A"})


@dataclass(frozen=True)
class MultipartBody:
    """A fully assembled multipart request body.

    Attributes
    ----------
    body:
        The raw request body.
    boundary:
        The boundary token separating the parts.
    """

    body: bytes
    boundary: str

    @property
    def content_type(self) -> str:
        """Value for the request's ``Content-Type`` header."""
        return f"multipart/form-data; boundary={self.boundary}"


def generate_boundary() -> str:
    """Return a random boundary token."""
    return f"----ImageBedBoundary{secrets.token_hex(16)}"


def _escape(value: str) -> str:
    return value.translate(_HEADER_ESCAPES)


def encode_multipart(
    field_name: str,
    file: SourceFile,
    *,
    boundary: str | None = None,
) -> MultipartBody:
    """Encode *file* as a single-part ``multipart/form-data`` body.

    Parameters
    ----------
    field_name:
        Form field name of the part (``"file"`` for uploads).
    file:
        The file whose bytes become the part payload.
    boundary:
        Boundary token.  A random one is generated when omitted.

    Returns
    -------
    MultipartBody
    """
    boundary = boundary or generate_boundary()
    delimiter = f"--{boundary}".encode("ascii")

    headers = (
        f'Content-Disposition: form-data; name="{_escape(field_name)}"; '
        f'filename="{_escape(file.name)}"\r\n'
        f"Content-Type: {file.mime_type}\r\n"
    ).encode("utf-8")

    body = b"".join([
        delimiter, _CRLF,
        headers, _CRLF,
        file.data, _CRLF,
        delimiter, b"--", _CRLF,
    ])
    return MultipartBody(body=body, boundary=boundary)
