from .redact import mask_secret, redact, redact_url

__all__ = [
    "mask_secret",
    "redact",
    "redact_url",
]
