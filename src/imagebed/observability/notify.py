"""User-facing notification hook.

The host application shows short-lived notices ("Uploading image...",
"Upload failed: ...").  The pipeline talks to it through the
:class:`Notifier` protocol so it never touches UI state directly.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Notifier(Protocol):
    """Protocol for the host's transient notice display."""

    def notify(self, message: str, duration: float | None = None) -> None:
        """Show *message* for *duration* seconds (host default when ``None``)."""
        ...


class NoopNotifier:
    """Default notifier that shows nothing."""

    __slots__ = ()

    def notify(self, message: str, duration: float | None = None) -> None:
        pass
