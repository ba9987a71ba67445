"""Shared pytest fixtures for Kandinsky client tests."""

from __future__ import annotations

import base64
from typing import Any

import httpx
import pytest

from kandinsky.core.config.models import KandinskySettings

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16 + b"kandinsky"
PNG_B64 = base64.b64encode(PNG_BYTES).decode("ascii")

MODELS_PATH = "/key/api/v1/models"
RUN_PATH = "/key/api/v1/text2image/run"
STATUS_PATH = "/key/api/v1/text2image/status/"


class FakeFusionBrain:
    """Scripted stand-in for the FusionBrain API, served through httpx.MockTransport.

    Responses are stored as (status_code, json_body) pairs and rebuilt for every
    request. Status responses are replayed in order; the last one repeats.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.models: tuple[int, Any] = (
            200,
            [{"id": 4, "name": "Kandinsky", "version": 3.0, "type": "TEXT2IMAGE"}],
        )
        self.run: tuple[int, Any] = (201, {"uuid": "task-1", "status": "INITIAL"})
        self.statuses: list[tuple[int, Any]] = [
            (200, {"uuid": "task-1", "status": "DONE", "images": [PNG_B64], "censored": False})
        ]
        self._status_calls = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == MODELS_PATH:
            return self._respond(*self.models)
        if path == RUN_PATH:
            return self._respond(*self.run)
        if path.startswith(STATUS_PATH):
            index = min(self._status_calls, len(self.statuses) - 1)
            self._status_calls += 1
            return self._respond(*self.statuses[index])
        return self._respond(404, {"error": "Not Found", "status": 404, "path": path})

    @staticmethod
    def _respond(status_code: int, body: Any) -> httpx.Response:
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)

    def calls(self, prefix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.startswith(prefix)]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def anyio_backend() -> str:
    """Run anyio-marked tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def fake_api() -> FakeFusionBrain:
    """Scripted FusionBrain API with one model and an immediately DONE task."""
    return FakeFusionBrain()


@pytest.fixture
def settings() -> KandinskySettings:
    """Default settings with test credentials."""
    return KandinskySettings(api_key="test-key", api_secret="test-secret")


@pytest.fixture
def sleeps() -> list[float]:
    """Recorded waits between status checks."""
    return []


@pytest.fixture(autouse=True)
def _clear_credential_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer credentials out of the tests."""
    for name in ("KAND_API_KEY", "KAND_API_SECRET", "KAND_API_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def png_bytes() -> bytes:
    """Raw bytes of the scripted image."""
    return PNG_BYTES


@pytest.fixture
def png_b64() -> str:
    """Base64 payload of the scripted image, as the API returns it."""
    return PNG_B64
