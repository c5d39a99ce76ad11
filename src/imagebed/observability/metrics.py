"""Metrics hook protocol and no-op default implementation.

imagebed emits counters, timings, and gauges at key points of an upload.
By default a :class:`NoopMetricsHook` is used so there is zero overhead.
Callers can supply their own implementation that satisfies the
:class:`MetricsHook` protocol to route metrics to any backend.

Emitted metric names:

* ``imagebed.upload_success_total``       -- counter
* ``imagebed.upload_failure_total``       -- counter (tag ``code``)
* ``imagebed.processing_warnings_total``  -- counter (tag ``stage``)
* ``imagebed.backup_failure_total``       -- counter
* ``imagebed.requests_total``             -- counter (tag ``status``)
* ``imagebed.request_duration_ms``        -- timing (tag ``status``)
* ``imagebed.bytes_uploaded``             -- gauge
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict whose keys and values are
    strings.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to an absolute value."""
        ...


class NoopMetricsHook:
    """Default metrics implementation that silently discards all data points."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
