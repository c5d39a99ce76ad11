"""Async HTTP transport for the image host.

The transport issues exactly one request per upload.  There is no retry
loop: ``autoRetry`` is a server-side option forwarded as a query
parameter.  The request lifecycle is:

1. ``POST {api_url}/upload?<params>`` with the pre-encoded multipart body.
2. On a request failure (DNS, connection refused, timeout, an undecodable
   body, a redirect loop) raise :class:`UploadNetworkError`.
3. On a non-``2xx`` status raise :class:`UploadHTTPError`.
4. Otherwise return the decoded JSON body, or raise
   :class:`BadResponseError` if it is not JSON.
"""

from __future__ import annotations

import time
from typing import Any

import httpx

from imagebed.config import UploadConfig
from imagebed.errors import BadResponseError, UploadHTTPError, UploadNetworkError
from imagebed.observability import MetricsHook, NoopMetricsHook, get_logger
from imagebed.utils.redact import redact, redact_url

from .multipart import MultipartBody
from .upload import build_upload_params, upload_url

log = get_logger("imagebed.transport")


class AsyncImageBedTransport:
    """Asynchronous HTTP transport for ``/upload`` requests.

    Parameters
    ----------
    client:
        An existing ``httpx.AsyncClient`` to send requests with.  The
        transport does not close a client it did not create.
    metrics:
        Metrics backend.  Defaults to :class:`NoopMetricsHook`.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        metrics: MetricsHook | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient()
        self._metrics = metrics if metrics is not None else NoopMetricsHook()

    # -- public API --------------------------------------------------------

    async def upload(self, config: UploadConfig, body: MultipartBody) -> Any:
        """Send one upload request and return the decoded JSON body.

        Parameters
        ----------
        config:
            Supplies the endpoint, query parameters, and timeout.
        body:
            The encoded multipart body.

        Raises
        ------
        UploadNetworkError
            On transport-level failures.
        UploadHTTPError
            On non-``2xx`` responses.
        BadResponseError
            If the body is not valid JSON.
        """
        url = upload_url(config)
        params = build_upload_params(config)
        request_kwargs: dict[str, Any] = {
            "params": params,
            "content": body.body,
            "headers": {"Content-Type": body.content_type},
        }
        if config.timeout_seconds is not None:
            request_kwargs["timeout"] = httpx.Timeout(config.timeout_seconds)

        log.debug(
            "Sending upload request",
            extra={"extra_fields": {
                "op": "upload_request",
                "url": url,
                "params": redact(params, config.auth_code),
                "body_bytes": len(body.body),
            }},
        )

        t0 = time.monotonic()
        try:
            response = await self._client.post(url, **request_kwargs)
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            self._metrics.increment(
                "imagebed.requests_total", tags={"status": "error"},
            )
            log.warning(
                "Upload request network error",
                extra={"extra_fields": {"op": "upload_request", "url": url, "error": str(exc)}},
            )
            raise UploadNetworkError(
                message=f"Network error while uploading: {exc}",
                context={"url": url},
                cause=exc,
            ) from exc
        elapsed_ms = (time.monotonic() - t0) * 1000

        status = response.status_code
        self._metrics.increment("imagebed.requests_total", tags={"status": str(status)})
        self._metrics.timing(
            "imagebed.request_duration_ms", elapsed_ms, tags={"status": str(status)},
        )
        log.debug(
            "Upload response received",
            extra={"extra_fields": {
                "op": "upload_request",
                "url": redact_url(str(response.url)),
                "status": status,
                "duration_ms": round(elapsed_ms, 1),
            }},
        )

        if not 200 <= status < 300:
            raise UploadHTTPError(
                message=f"Upload failed: {status} {response.reason_phrase}",
                context={
                    "status": status,
                    "status_text": response.reason_phrase,
                    "url": url,
                    "body": response.text[:500],
                },
            )

        try:
            return response.json()
        except ValueError as exc:
            raise BadResponseError(
                message="Server response is not valid JSON",
                context={"reason": "invalid_json", "body": response.text[:200]},
                cause=exc,
            ) from exc

    async def close(self) -> None:
        """Close the underlying HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AsyncImageBedTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
