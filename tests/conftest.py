"""Shared fixtures: an app whose upstream is an httpx.MockTransport."""

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config


class RecordingLogger:
    """RequestLogger that keeps every event for assertions."""

    def __init__(self):
        self.requests: list[tuple[str, str, str]] = []
        self.responses: list[tuple[str, int]] = []
        self.errors: list[tuple[str, int, str]] = []
        self.request_ids: list[str | None] = []

    def log_request(self, method: str, target_url: str, *, route: str, request_id: str) -> None:
        self.requests.append((method, target_url, route))
        self.request_ids.append(request_id)

    def log_response(self, route: str, status: int, *, request_id: str | None = None) -> None:
        self.responses.append((route, status))
        self.request_ids.append(request_id)

    def log_error(
        self,
        route: str,
        status: int,
        message: str,
        *,
        request_id: str | None = None,
    ) -> None:
        self.errors.append((route, status, message))
        self.request_ids.append(request_id)


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def make_client(logger):
    """Return a factory building (TestClient, upstream_calls) for a handler."""
    clients = []

    def _make(handler=None, config: Config | None = None, secrets: dict | None = None):
        calls: list[httpx.Request] = []

        def upstream(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if handler is None:
                return httpx.Response(200, json={})
            return handler(request)

        app = create_app(
            config or Config(),
            logger,
            transport=httpx.MockTransport(upstream),
            secret_loader=(secrets or {}).get,
        )
        client = TestClient(app, raise_server_exceptions=False)
        client.__enter__()
        clients.append(client)
        return client, calls

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
