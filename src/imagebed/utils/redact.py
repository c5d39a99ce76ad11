"""Auth-code / payload redaction for safe logging.

Before any request URL, parameter set, or response body is written to logs
the functions here must be applied.  They enforce the following rules:

* The ``authCode`` query parameter is replaced with a masked placeholder
  that shows only the last four characters of the code.
* Keys that look sensitive (``auth``, ``token``, ``secret`` ...) are masked
  wherever they appear in a nested payload.
* **Binary / file byte values** are replaced with ``<binary:N_bytes>``.
* The full auth code is **never present** in the output.
"""

from __future__ import annotations

import copy
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

# Substrings: if any of these appear in a key name (case-insensitive), the
# value is redacted.
_SENSITIVE_KEY_PATTERNS: frozenset[str] = frozenset({
    "auth",
    "token",
    "secret",
    "password",
    "credential",
    "cookie",
    "api_key",
    "api-key",
})


def mask_secret(value: str) -> str:
    """Return a placeholder keeping only the last four characters."""
    if len(value) >= 8:
        return f"<redacted:...{value[-4:]}>"
    return "<redacted>"


def _is_sensitive(key: Any) -> bool:
    key_lower = key.lower() if isinstance(key, str) else ""
    return any(pat in key_lower for pat in _SENSITIVE_KEY_PATTERNS)


def _redact_value(value: Any, secret: str | None) -> Any:
    """Redact a single value (recursive for dicts / lists)."""
    if isinstance(value, dict):
        return _redact_dict(value, secret)
    if isinstance(value, list):
        return [_redact_value(item, secret) for item in value]
    if isinstance(value, str):
        if secret and secret in value:
            value = value.replace(secret, mask_secret(secret))
        return value
    if isinstance(value, (bytes, bytearray)):
        return f"<binary:{len(value)}_bytes>"
    return value


def _redact_dict(d: dict, secret: str | None) -> dict:
    result: dict = {}
    for key, value in d.items():
        if _is_sensitive(key):
            result[key] = mask_secret(value) if isinstance(value, str) else "<redacted>"
        else:
            result[key] = _redact_value(value, secret)
    return result


def redact(payload: dict, secret: str | None = None) -> dict:
    """Return a deep copy of *payload* with sensitive data redacted.

    Parameters
    ----------
    payload:
        The dictionary to sanitize (query parameters, headers, or a parsed
        response body).
    secret:
        The auth code.  If supplied, any occurrence of this exact string
        anywhere in the payload is replaced.

    Returns
    -------
    dict
        A new dictionary.  The original *payload* is never mutated.

    Examples
    --------
    >>> redact({"authCode": "abc"})
    {'authCode': '<redacted>'}
    """
    safe = copy.deepcopy(payload)
    return _redact_dict(safe, secret)


def redact_url(url: str) -> str:
    """Mask sensitive query parameters in *url*.

    >>> redact_url("https://img.example/upload?authCode=s3cr3t-code&returnFormat=full")
    'https://img.example/upload?authCode=%3Credacted%3A...code%3E&returnFormat=full'
    """
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = [
        (key, mask_secret(value) if _is_sensitive(key) else value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit(parts._replace(query=urlencode(query)))
