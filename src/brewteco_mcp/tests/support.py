"""A scripted backing API behind httpx.MockTransport."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

from brewteco_mcp.io.backend import BackendClient
from brewteco_mcp.runtime.dispatch import Dispatcher
from brewteco_mcp.runtime.retry import RetryPolicy

API_URL = "http://reports.test/api/v1"

Responder = Callable[[httpx.Request], Any]


class FakeBackend:
    """Records every request and answers with ``responder``."""

    def __init__(self, responder: Responder) -> None:
        self.requests: list[httpx.Request] = []
        self.responder = responder

    def __call__(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        return self.responder(request)

    @property
    def attempts(self) -> int:
        return len(self.requests)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def envelope(data: Any) -> httpx.Response:
    return httpx.Response(200, json={"success": True, "data": data, "timestamp": "2024-12-16T10:00:00Z"})


def failing(status: int, message: str | None = None) -> Responder:
    if message is None:
        return lambda request: httpx.Response(status)
    body = {"success": False, "error": {"message": message}}
    return lambda request: httpx.Response(status, json=body)


def timing_out(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)


def refusing(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("[Errno 111] Connection refused", request=request)


def make_client(
    backend: FakeBackend, *, retries: int = 3, delay: float = 0.0, timeout: float = 5.0,
) -> BackendClient:
    return BackendClient(API_URL, timeout=timeout, policy=RetryPolicy.fixed(retries=retries, delay=delay),
                         transport=backend.transport)


def make_dispatcher(backend: FakeBackend, *, retries: int = 3) -> Dispatcher:
    return Dispatcher(make_client(backend, retries=retries))
