"""Transport adapters for the gateway.

Two server adapters share the same dispatcher:

1. **FastMCP** - MCP protocol over stdio or the SSE push stream
2. **HTTP** - plain endpoints plus a minimal JSON-RPC bridge for web backends

Adapters only translate wire formats. They never retry and hold no logic of
their own; failures are rendered by the binding's presenter.

Example - FastMCP (MCP clients):
    >>> from brewteco_mcp.ext.mcp import serve_mcp
    >>> serve_mcp(get_settings(), transport="sse", port=3710)

Example - HTTP endpoints (web backends):
    >>> from brewteco_mcp.ext.mcp import create_http_app
    >>> app = create_http_app(Dispatcher.from_settings(get_settings()))
"""

from __future__ import annotations

import asyncio
import contextlib
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Literal

import orjson
import uvicorn
from fastmcp import FastMCP
from fastmcp.tools.tool import Tool, ToolResult
from mcp.types import TextContent
from pydantic import PrivateAttr
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from brewteco_mcp.foundation.errors import ErrorCode, ToolError
from brewteco_mcp.runtime.concurrency import CancelToken
from brewteco_mcp.runtime.dispatch import Dispatcher
from brewteco_mcp.runtime.observability import get_logger

from .presenters import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    HttpPresenter,
    JsonRpcPresenter,
    McpPresenter,
    render_payload,
)

if TYPE_CHECKING:
    from brewteco_mcp.foundation.catalog import ToolContract
    from brewteco_mcp.foundation.config import GatewaySettings

Transport = Literal["stdio", "sse"]

PROTOCOL_VERSION = "2024-11-05"
DISCONNECT_POLL_SECONDS = 0.25

log = get_logger("server")


# ═══════════════════════════════════════════════════════════════════════════════
# Abstract Server Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class ToolServer(ABC):
    """Abstract base for server adapters around one dispatcher."""

    __slots__ = ("_name", "_version", "_dispatcher")

    def __init__(self, dispatcher: Dispatcher, *, name: str = "brewteco-mcp-server", version: str = "1.0.0") -> None:
        self._name = name
        self._version = version
        self._dispatcher = dispatcher

    @property
    def name(self) -> str:
        return self._name

    @property
    def version(self) -> str:
        return self._version

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @abstractmethod
    def run(self, **kwargs: Any) -> None:
        """Start the server (blocking)."""
        ...

    def list_tools(self) -> list[dict[str, Any]]:
        return self._dispatcher.list_tools()


# ═══════════════════════════════════════════════════════════════════════════════
# FastMCP Adapter (stdio / SSE)
# ═══════════════════════════════════════════════════════════════════════════════


class CatalogTool(Tool):
    """FastMCP tool backed by a catalog contract.

    The contract's JSON schema is advertised as is; arguments go to the
    dispatcher untouched so validation happens in exactly one place.
    """

    _dispatcher: Any = PrivateAttr(default=None)
    _presenter: Any = PrivateAttr(default_factory=McpPresenter)

    @classmethod
    def from_contract(cls, contract: ToolContract, dispatcher: Dispatcher) -> CatalogTool:
        tool = cls(
            name=contract.name,
            description=contract.description,
            parameters=contract.input_schema(),
            tags={contract.category},
        )
        tool._dispatcher = dispatcher
        return tool

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        result = await self._dispatcher.dispatch(self.name, arguments)
        if result.is_err():
            raise self._presenter.present(result.unwrap_err())
        return ToolResult(content=[TextContent(type="text", text=render_payload(result.unwrap()))])


class MCPServer(ToolServer):
    """FastMCP-backed server for MCP clients.

    Example:
        >>> server = MCPServer(dispatcher)
        >>> server.run(transport="sse", port=3710)
    """

    __slots__ = ("_mcp",)

    def __init__(self, dispatcher: Dispatcher, *, name: str = "brewteco-mcp-server", version: str = "1.0.0") -> None:
        super().__init__(dispatcher, name=name, version=version)
        self._mcp = FastMCP(self._name)
        for contract in dispatcher.contracts():
            self._mcp.add_tool(CatalogTool.from_contract(contract, dispatcher))

    def run(
        self,
        transport: Transport = "stdio",
        *,
        host: str = "127.0.0.1",
        port: int = 3710,
    ) -> None:
        """Start MCP server.

        Args:
            transport: "stdio" (request/response over pipes) or "sse" (push stream)
            host: Host for the SSE transport
            port: Port for the SSE transport
        """
        log.info("starting mcp server", transport=transport, tools=len(self.list_tools()))
        if transport == "stdio":
            self._mcp.run()
        else:
            self._mcp.run(transport=transport, host=host, port=port)

    @property
    def fastmcp(self) -> FastMCP:
        """Access underlying FastMCP instance."""
        return self._mcp


# ═══════════════════════════════════════════════════════════════════════════════
# HTTP Adapter (plain endpoints + JSON-RPC bridge)
# ═══════════════════════════════════════════════════════════════════════════════


class HTTPToolServer(ToolServer):
    """HTTP server for web backend integration.

    - GET  /mcp/health              → liveness and configuration summary
    - GET  /mcp/tools               → catalog with schemas
    - GET  /mcp/tools/{name}/schema → one catalog entry
    - POST /mcp/tools/{name}        → invoke with a JSON object body
    - POST /mcp/message             → JSON-RPC 2.0 (initialize, tools/list, tools/call)

    Example:
        >>> server = HTTPToolServer(dispatcher, api_url=settings.api_url)
        >>> server.run(host="0.0.0.0", port=3710)
    """

    __slots__ = ("_api_url", "_http", "_rpc", "_app")

    def __init__(
        self,
        dispatcher: Dispatcher,
        *,
        name: str = "brewteco-mcp-server",
        version: str = "1.0.0",
        api_url: str | None = None,
    ) -> None:
        super().__init__(dispatcher, name=name, version=version)
        self._api_url = api_url or dispatcher.client.base_url
        self._http = HttpPresenter()
        self._rpc = JsonRpcPresenter()
        self._app = self._create_app()

    def _create_app(self) -> Starlette:
        routes = [
            Route("/mcp/health", self._health, methods=["GET"]),
            Route("/mcp/tools", self._list_tools, methods=["GET"]),
            Route("/mcp/tools/{name}/schema", self._tool_schema, methods=["GET"]),
            Route("/mcp/tools/{name}", self._invoke_tool, methods=["POST"]),
            Route("/mcp/message", self._message, methods=["POST"]),
        ]
        return Starlette(routes=routes, lifespan=self._lifespan)

    @contextlib.asynccontextmanager
    async def _lifespan(self, app: Starlette) -> AsyncIterator[None]:
        yield
        await self._dispatcher.aclose()

    # ─────────────────────────────────────────────────────────────────
    # Plain endpoints
    # ─────────────────────────────────────────────────────────────────

    async def _health(self, request: Request) -> JSONResponse:
        return JSONResponse({
            "status": "OK",
            "name": self._name,
            "version": self._version,
            "apiUrl": self._api_url,
            "timestamp": datetime.now(UTC).isoformat(),
        })

    async def _list_tools(self, request: Request) -> JSONResponse:
        return JSONResponse({"tools": self.list_tools()})

    async def _tool_schema(self, request: Request) -> JSONResponse:
        name = request.path_params["name"]
        contract = self._dispatcher.catalog.get(name)
        if contract is None:
            return self._error(ToolError.create(name, f"Unknown tool: {name}", ErrorCode.UNKNOWN_TOOL))
        return JSONResponse(contract.describe())

    async def _invoke_tool(self, request: Request) -> Response:
        name = request.path_params["name"]
        body = await _read_json(request)
        if body is _INVALID_JSON:
            return self._error(ToolError.create(name, "Request body must be valid JSON", ErrorCode.INVALID_INPUT))

        token = CancelToken()
        try:
            result = await _watch_disconnect(request, token, self._dispatcher.dispatch(name, body, cancel=token))
        except asyncio.CancelledError:
            if not token.cancelled:
                raise
            log.info("client disconnected", tool=name)
            return Response(status_code=499)

        if result.is_err():
            return self._error(result.unwrap_err())
        return JSONResponse({"success": True, "data": result.unwrap()})

    def _error(self, error: ToolError) -> JSONResponse:
        view = self._http.present(error)
        return JSONResponse(view.body, status_code=view.status_code)

    # ─────────────────────────────────────────────────────────────────
    # JSON-RPC bridge
    # ─────────────────────────────────────────────────────────────────

    async def _message(self, request: Request) -> Response:
        message = await _read_json(request)
        if message is _INVALID_JSON:
            return _rpc_error(None, PARSE_ERROR, "Parse error", status_code=400)
        if not isinstance(message, dict) or not isinstance(message.get("method"), str):
            return _rpc_error(None, INVALID_REQUEST, "Invalid request", status_code=400)

        msg_id, method = message.get("id"), message["method"]
        params = message.get("params") or {}
        match method:
            case "initialize":
                return _rpc_result(msg_id, {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {"tools": {}},
                    "serverInfo": {"name": self._name, "version": self._version},
                })
            case "tools/list":
                return _rpc_result(msg_id, {"tools": self.list_tools()})
            case "tools/call":
                return await self._rpc_call(msg_id, params)
            case _ if method.startswith("notifications/"):
                return Response(status_code=202)
            case _:
                return _rpc_error(msg_id, METHOD_NOT_FOUND, f"Unsupported method: {method}", status_code=400)

    async def _rpc_call(self, msg_id: object, params: object) -> JSONResponse:
        if not isinstance(params, dict) or not isinstance(params.get("name"), str):
            return _rpc_error(msg_id, INVALID_PARAMS, "tools/call requires params.name")
        result = await self._dispatcher.dispatch(params["name"], params.get("arguments"))
        if result.is_err():
            return JSONResponse({"jsonrpc": "2.0", "id": msg_id, "error": self._rpc.present(result.unwrap_err())})
        return _rpc_result(msg_id, {
            "content": [{"type": "text", "text": render_payload(result.unwrap())}],
        })

    # ─────────────────────────────────────────────────────────────────

    def run(self, host: str = "127.0.0.1", port: int = 3710) -> None:
        """Start HTTP server."""
        log.info("starting http server", host=host, port=port, api_url=self._api_url)
        uvicorn.run(self._app, host=host, port=port, log_level="warning")

    @property
    def app(self) -> Starlette:
        """Access ASGI app for embedding in larger applications."""
        return self._app


_INVALID_JSON = object()


async def _read_json(request: Request) -> Any:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        return _INVALID_JSON


async def _watch_disconnect(request: Request, token: CancelToken, aw: Any) -> Any:
    """Run ``aw`` under ``token``, cancelling it if the HTTP client goes away."""

    async def watcher() -> None:
        while not await request.is_disconnected():
            await asyncio.sleep(DISCONNECT_POLL_SECONDS)
        token.cancel("client disconnected")

    task = asyncio.create_task(watcher())
    try:
        return await aw
    finally:
        task.cancel()


def _rpc_result(msg_id: object, result: dict[str, Any]) -> JSONResponse:
    return JSONResponse({"jsonrpc": "2.0", "id": msg_id, "result": result})


def _rpc_error(msg_id: object, code: int, message: str, *, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        {"jsonrpc": "2.0", "id": msg_id, "error": {"code": code, "message": message}},
        status_code=status_code,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Factory Functions
# ═══════════════════════════════════════════════════════════════════════════════


def create_mcp_server(dispatcher: Dispatcher, *, name: str = "brewteco-mcp-server", version: str = "1.0.0") -> MCPServer:
    """Create MCP server without starting it."""
    return MCPServer(dispatcher, name=name, version=version)


def create_http_app(dispatcher: Dispatcher, *, name: str = "brewteco-mcp-server", version: str = "1.0.0") -> Starlette:
    """Create the ASGI app without running it (for tests or mounting)."""
    return HTTPToolServer(dispatcher, name=name, version=version).app


def serve_mcp(
    settings: GatewaySettings,
    *,
    transport: Transport = "stdio",
    host: str | None = None,
    port: int | None = None,
) -> None:
    """Expose the catalog over MCP (stdio or SSE)."""
    server = MCPServer(Dispatcher.from_settings(settings), name=settings.server_name, version=settings.server_version)
    server.run(transport=transport, host=host or settings.http.host, port=port or settings.http.port)


def serve_http(settings: GatewaySettings, *, host: str | None = None, port: int | None = None) -> None:
    """Expose the catalog over plain HTTP and the JSON-RPC bridge."""
    server = HTTPToolServer(
        Dispatcher.from_settings(settings),
        name=settings.server_name,
        version=settings.server_version,
        api_url=settings.api_url,
    )
    server.run(host=host or settings.http.host, port=port or settings.http.port)
