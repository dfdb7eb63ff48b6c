"""
Pytest configuration and fixtures for flaskbase tests.

The Flask API is faked with httpx.MockTransport: routes are registered per
(method, path) and every request is recorded for assertions.
"""

import json
import os
from typing import Any

import httpx
import pytest

# Set test environment before importing flaskbase modules
os.environ["FLASKBASE_ENV"] = "development"

from flaskbase.client import FlaskbaseClient
from flaskbase.config import ClientSettings

BASE_URL = "http://api.example.com"


class FakeApi:
    """
    Scripted stand-in for the Flask API.

    Each route holds a queue of responses; the last one repeats once the
    queue is drained. A response is a (status, body) pair, a dict of
    httpx.Response kwargs, an exception instance to raise, or a callable
    taking the request.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[Any]] = {}

    def add(self, method: str, path: str, *responses: Any) -> "FakeApi":
        self._routes.setdefault((method, path), []).extend(responses)
        return self

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"error": "not found"})

        spec = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(spec, Exception):
            raise spec
        if callable(spec):
            return spec(request)
        if isinstance(spec, dict):
            return httpx.Response(**spec)
        status, body = spec
        return httpx.Response(status, json=body)


def request_json(request: httpx.Request) -> Any:
    """Decode the JSON body of a recorded request."""
    return json.loads(request.content) if request.content else None


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def test_settings() -> ClientSettings:
    # Long poll interval: tests drive ticks with poll_once()
    return ClientSettings(
        flask_api_url=BASE_URL,
        auth_poll_interval_seconds=3600,
        request_timeout_seconds=5,
    )


@pytest.fixture
def make_client(fake_api, test_settings):
    """Factory for clients wired to the fake API."""

    def _make() -> FlaskbaseClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))
        return FlaskbaseClient(BASE_URL, settings=test_settings, http_client=http_client)

    return _make


@pytest.fixture
def sample_user() -> dict:
    return {"id": "u1", "email": "alice@example.com"}


@pytest.fixture
def sample_ocr_rows() -> dict[str, list[dict]]:
    return {
        "bill": [
            {"id": "b2", "filename": "march.pdf", "created_at": "2025-03-02T10:00:00Z", "approved": True, "file_url": "u/b2"},
            {"id": "b1", "filename": None, "created_at": "2025-01-05T09:00:00Z", "approved": None},
        ],
        "bank": [
            {"id": "k1", "filename": "stmt.pdf", "created_at": "2025-02-10T12:30:00Z", "approved": False, "file_url": None},
        ],
    }
