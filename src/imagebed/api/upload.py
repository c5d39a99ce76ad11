"""Request parameters and response interpretation for the ``/upload`` endpoint.

The image host accepts ``POST {api_url}/upload?<params>`` with one
multipart field named ``file`` and answers with a JSON array whose first
element carries the stored image's ``src``.
"""

from __future__ import annotations

from typing import Any

from imagebed.config import UploadConfig
from imagebed.errors import BadResponseError

UPLOAD_FIELD_NAME = "file"

UPLOAD_PATH = "/upload"


def _flag(value: bool) -> str:
    return "true" if value else "false"


def build_upload_params(config: UploadConfig) -> dict[str, str]:
    """Build the query parameters of an upload request.

    The auth code travels as a query parameter, so the returned mapping
    must be passed through :func:`~imagebed.utils.redact.redact` before it
    is logged.
    """
    params = {
        "authCode": config.auth_code,
        "uploadChannel": config.upload_channel,
        "uploadNameType": config.upload_name_type,
        "returnFormat": config.return_format,
        "serverCompress": _flag(config.server_compress),
        "autoRetry": _flag(config.auto_retry),
    }
    if config.upload_folder:
        params["uploadFolder"] = config.upload_folder
    return params


def upload_url(config: UploadConfig) -> str:
    """Return the endpoint URL (without query string)."""
    return f"{config.api_url}{UPLOAD_PATH}"


def _truncate(payload: Any, max_len: int = 200) -> str:
    text = repr(payload)
    return text if len(text) <= max_len else text[:max_len] + "..."


def interpret_response(payload: Any, config: UploadConfig) -> str:
    """Turn a parsed upload response into the canonical image URL.

    Parameters
    ----------
    payload:
        The decoded JSON body.
    config:
        The configuration the request was sent with.

    Returns
    -------
    str
        ``src`` itself when ``config.return_format == "full"``, otherwise
        ``config.api_url + src``.  The two are concatenated as-is.

    Raises
    ------
    BadResponseError
        If *payload* is not a non-empty list whose first element has a
        non-empty string ``src``.
    """
    if not isinstance(payload, list) or not payload:
        raise BadResponseError(
            message="Unexpected response format from server",
            context={"reason": "expected_non_empty_list", "body": _truncate(payload)},
        )

    first = payload[0]
    src = first.get("src") if isinstance(first, dict) else None
    if not isinstance(src, str) or not src:
        raise BadResponseError(
            message="Unexpected response format from server",
            context={"reason": "missing_src", "body": _truncate(payload)},
        )

    if config.return_format == "full":
        return src
    return f"{config.api_url}{src}"
