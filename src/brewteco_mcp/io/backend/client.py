"""Resilient client for the reports API.

One logical call becomes at most ``1 + retries`` strictly sequential HTTP
attempts. Each attempt is classified as success, transient failure or
permanent failure; transient failures are retried after a fixed delay while
the call's ``RetryBudget`` lasts. Every outcome leaves as a ``ToolResult``:
``Ok(payload)`` or ``Err(ToolError)``.

Example:
    >>> async with BackendClient("http://localhost:3700/api/v1") as client:
    ...     result = await client.invoke(OPERATIONS["categories"], {})
    ...     result.unwrap()
    ['Chope', 'Cerveja', 'Comida']
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import httpx
import orjson

from brewteco_mcp.foundation.config import DEFAULT_API_URL
from brewteco_mcp.foundation.errors import Err, ErrorCode, JsonValue, Ok, ToolError, ToolResult
from brewteco_mcp.runtime.concurrency import CancelToken, checkpoint, guarded
from brewteco_mcp.runtime.observability import get_logger
from brewteco_mcp.runtime.retry import RetryBudget, RetryPolicy

from .operations import HEALTH, BackendRequest, BackingOperation, build_request

if TYPE_CHECKING:
    from brewteco_mcp.foundation.config import GatewaySettings

DEFAULT_USER_AGENT = "Brewteco-MCP-Server/1.0.0"

TIMEOUT_MESSAGE = "Timeout: request took too long to respond"
REFUSED_MESSAGE = "Connection refused: check that the API is running"

log = get_logger("backend")


class BackendClient:
    """Async client for the backing reports API.

    Holds one ``httpx.AsyncClient`` (connection pool) for its lifetime; safe to
    share between concurrent calls since retry state lives in a per-call budget.

    Args:
        base_url: API root, e.g. ``http://localhost:3700/api/v1``
        timeout: Per-attempt timeout in seconds
        policy: Retry policy (defaults to 3 retries, 1 s apart)
        user_agent: Sent on every request
        transport: Custom httpx transport (tests use ``httpx.MockTransport``)
    """

    __slots__ = ("_base_url", "_timeout", "_policy", "_user_agent", "_transport", "_client")

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        timeout: float = 30.0,
        policy: RetryPolicy | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._policy = policy or RetryPolicy.fixed(retries=3, delay=1.0)
        self._user_agent = user_agent
        self._transport = transport
        self._client: httpx.AsyncClient | None = None  # Lazy httpx client

    @classmethod
    def from_settings(cls, settings: GatewaySettings, *, transport: httpx.AsyncBaseTransport | None = None) -> BackendClient:
        return cls(
            settings.api_url,
            timeout=settings.timeout,
            policy=RetryPolicy.fixed(retries=settings.retries, delay=settings.retry_delay),
            user_agent=settings.user_agent,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    # ─────────────────────────────────────────────────────────────────
    # HTTP Client
    # ─────────────────────────────────────────────────────────────────

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                follow_redirects=True,
                headers={"Content-Type": "application/json", "User-Agent": self._user_agent},
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> BackendClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    # ─────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────

    async def invoke(
        self,
        operation: BackingOperation,
        arguments: Mapping[str, Any],
        *,
        budget: RetryBudget | None = None,
        cancel: CancelToken | None = None,
    ) -> ToolResult:
        """Perform one logical call, retrying transient failures.

        Args:
            operation: Backing operation to call
            arguments: Normalized arguments of the call
            budget: Retry budget for this call; a fresh one is created when omitted
            cancel: Aborts the in-flight attempt or pause when cancelled

        Raises:
            asyncio.CancelledError: The call was cancelled.
        """
        request = build_request(operation, arguments)
        budget = budget or self._policy.new_budget()
        call_log = log.bind(operation=operation.name, method=request.method, path=request.path)
        attempt = 0
        while True:
            attempt += 1
            call_log.info("backend request", attempt=attempt)
            result = await guarded(self._attempt(request), cancel)
            if result.is_ok():
                return result

            error = result.unwrap_err()
            delay = budget.consume(error.code) if operation.idempotent else None
            if delay is None:
                call_log.warning("backend call failed", attempt=attempt, code=str(error.code), status=error.status)
                return Err(error.model_copy(update={"attempts": attempt}))

            call_log.info("retrying", attempt=attempt, code=str(error.code), delay=delay, remaining=budget.remaining)
            await guarded(asyncio.sleep(delay), cancel)
            await checkpoint(cancel)

    async def health(self, *, cancel: CancelToken | None = None) -> ToolResult:
        """Probe the backing API's ``/health`` endpoint."""
        return await self.invoke(HEALTH, {}, cancel=cancel)

    async def _attempt(self, request: BackendRequest) -> ToolResult:
        """Send ``request`` once and classify the outcome."""
        name = request.operation
        try:
            # httpx limits each phase separately; the attempt as a whole is bounded here
            async with asyncio.timeout(self._timeout):
                response = await self._get_client().request(
                    request.method,
                    request.path,
                    params=dict(request.params) or None,
                    content=orjson.dumps(dict(request.json)) if request.json is not None else None,
                )
        except (httpx.TimeoutException, TimeoutError):
            return Err(ToolError.create(name, TIMEOUT_MESSAGE, ErrorCode.UPSTREAM_TIMEOUT))
        except httpx.ConnectError:
            return Err(ToolError.create(name, REFUSED_MESSAGE, ErrorCode.UPSTREAM_UNREACHABLE))
        except httpx.TransportError as e:
            return Err(ToolError.create(name, f"Network error: {e}", ErrorCode.UPSTREAM_UNREACHABLE))
        except Exception as e:
            log.exception("backend request crashed", operation=name)
            return Err(ToolError.create(name, f"Request failed: {e}", ErrorCode.INTERNAL_ERROR))
        return _classify(name, response)


# ─────────────────────────────────────────────────────────────────────────────
# Response classification
# ─────────────────────────────────────────────────────────────────────────────


def _classify(name: str, response: httpx.Response) -> ToolResult:
    status = response.status_code
    body = _decode(response.content)

    if response.is_success:
        if body is _MALFORMED:
            return Err(ToolError.create(
                name, "Malformed JSON in backing API response", ErrorCode.INTERNAL_ERROR, status=status,
            ))
        return _unwrap_envelope(name, body, status)

    message = _error_message(body) or f"HTTP {status}: {response.reason_phrase}"
    if 400 <= status < 500:
        code = ErrorCode.UPSTREAM_CLIENT_ERROR
    elif status >= 500:
        code = ErrorCode.UPSTREAM_SERVER_ERROR
    else:
        code = ErrorCode.INTERNAL_ERROR
    return Err(ToolError.create(name, message, code, status=status))


def _unwrap_envelope(name: str, body: Any, status: int) -> ToolResult:
    """Return ``data`` of a ``{success, data, error}`` envelope; anything else passes through whole."""
    if not (isinstance(body, dict) and "success" in body):
        return Ok(body)
    if body["success"] is False:
        message = _error_message(body) or "Backing API reported failure"
        return Err(ToolError.create(name, message, ErrorCode.UPSTREAM_CLIENT_ERROR, status=status))
    payload: JsonValue = body.get("data")
    return Ok(payload)


_MALFORMED = object()


def _decode(content: bytes) -> Any:
    if not content:
        return None
    try:
        return orjson.loads(content)
    except orjson.JSONDecodeError:
        return _MALFORMED


def _error_message(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        error = error.get("message")
    if isinstance(error, str) and error.strip():
        return error
    return None
