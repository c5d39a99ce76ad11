"""Observability: structured logging, metrics, and notification hooks for imagebed."""

from __future__ import annotations

from .logger import StructuredFormatter, get_logger
from .metrics import MetricsHook, NoopMetricsHook
from .notify import NoopNotifier, Notifier

__all__ = [
    "MetricsHook",
    "NoopMetricsHook",
    "NoopNotifier",
    "Notifier",
    "StructuredFormatter",
    "get_logger",
]
