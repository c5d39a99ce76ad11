"""Shared test fixtures for the imagebed test suite."""

from __future__ import annotations

import io
import json
import os
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from PIL import Image

from imagebed.config import UploadConfig
from imagebed.models import SourceFile

API_URL = "https://img.example.com"
AUTH_CODE = "test-auth-code-1234"


def make_image_bytes(
    size: tuple[int, int] = (200, 120),
    fmt: str = "PNG",
    color: tuple[int, int, int] = (20, 40, 60),
    noise: bool = False,
) -> bytes:
    """Encode an in-memory RGB image.

    With *noise* the pixels are random, so the encoded size grows with the
    pixel count instead of collapsing to a few hundred bytes.
    """
    if noise:
        image = Image.frombytes("RGB", size, os.urandom(size[0] * size[1] * 3))
    else:
        image = Image.new("RGB", size, color)
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


def make_config(**overrides: Any) -> UploadConfig:
    """Return an UploadConfig that passes validation."""
    defaults: dict[str, Any] = dict(api_url=API_URL, auth_code=AUTH_CODE)
    defaults.update(overrides)
    return UploadConfig(**defaults)


class RecordingNotifier:
    """Notifier that keeps every notice for assertion."""

    def __init__(self) -> None:
        self.notices: list[tuple[str, float | None]] = []

    def notify(self, message: str, duration: float | None = None) -> None:
        self.notices.append((message, duration))

    @property
    def messages(self) -> list[str]:
        return [message for message, _ in self.notices]


class RecordingMetricsHook:
    """A metrics backend that records all calls for assertion."""

    def __init__(self) -> None:
        self.increments: list[dict[str, Any]] = []
        self.timings: list[dict[str, Any]] = []
        self.gauges: list[dict[str, Any]] = []

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        self.increments.append({"name": name, "value": value, "tags": tags})

    def timing(self, name: str, ms: float, tags: dict[str, str] | None = None) -> None:
        self.timings.append({"name": name, "ms": ms, "tags": tags})

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self.gauges.append({"name": name, "value": value, "tags": tags})

    def names(self) -> list[str]:
        return [m["name"] for m in self.increments]


class RecordingHandler:
    """``httpx.MockTransport`` handler that records requests.

    Every request is answered with *status* and the JSON-encoded *body*
    (or *raw* bytes when given).
    """

    def __init__(
        self,
        status: int = 200,
        body: Any = None,
        raw: bytes | None = None,
    ) -> None:
        self.status = status
        self.body = [{"src": "/file/abc123.png"}] if body is None else body
        self.raw = raw
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        content = self.raw if self.raw is not None else json.dumps(self.body).encode()
        return httpx.Response(
            self.status,
            content=content,
            headers={"Content-Type": "application/json"},
        )


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """Return an AsyncClient whose requests are served by *handler*."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def config() -> UploadConfig:
    """Default test configuration with a dummy auth code."""
    return make_config()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes(fmt="PNG")


@pytest.fixture
def png_file(png_bytes: bytes) -> SourceFile:
    return SourceFile(name="cat.png", mime_type="image/png", data=png_bytes)


@pytest.fixture
def jpeg_file() -> SourceFile:
    return SourceFile(
        name="dog.jpg", mime_type="image/jpeg", data=make_image_bytes(fmt="JPEG"),
    )


@pytest.fixture
def noisy_png_file() -> SourceFile:
    """A 600x400 noise PNG of roughly 0.7 MB."""
    return SourceFile(
        name="noise.png",
        mime_type="image/png",
        data=make_image_bytes(size=(600, 400), noise=True),
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def metrics() -> RecordingMetricsHook:
    return RecordingMetricsHook()
