"""Error presenters: one per transport binding.

The dispatcher hands every binding the same ``ToolError``; each presenter
turns it into that binding's native failure shape. Nothing upstream of a
presenter ever branches on the binding.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

import orjson
from fastmcp.exceptions import ToolError as McpToolError

from brewteco_mcp.foundation.errors import ErrorCode, JsonValue, ToolError

T_co = TypeVar("T_co", covariant=True)


class ErrorPresenter(Protocol[T_co]):
    def present(self, error: ToolError) -> T_co: ...


def render_payload(payload: JsonValue) -> str:
    """Success payload as indented JSON text (MCP text content block)."""
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS).decode()


# ─────────────────────────────────────────────────────────────────────────────
# MCP (stdio / SSE)
# ─────────────────────────────────────────────────────────────────────────────


class McpPresenter:
    """Maps failures to FastMCP's ToolError, which the SDK returns as an ``isError`` result."""

    def present(self, error: ToolError) -> McpToolError:
        return McpToolError(error.render())


# ─────────────────────────────────────────────────────────────────────────────
# Plain HTTP
# ─────────────────────────────────────────────────────────────────────────────

HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.UNKNOWN_TOOL: 404,
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.UPSTREAM_CLIENT_ERROR: 502,
    ErrorCode.UPSTREAM_SERVER_ERROR: 502,
    ErrorCode.UPSTREAM_UNREACHABLE: 503,
    ErrorCode.UPSTREAM_TIMEOUT: 504,
    ErrorCode.INTERNAL_ERROR: 500,
}


@dataclass(frozen=True, slots=True)
class HttpErrorView:
    status_code: int
    body: dict[str, Any]


class HttpPresenter:
    def present(self, error: ToolError) -> HttpErrorView:
        body: dict[str, Any] = {"error": error.message, "code": str(error.code)}
        if error.field:
            body["field"] = error.field
        return HttpErrorView(HTTP_STATUS.get(error.code, 500), body)


# ─────────────────────────────────────────────────────────────────────────────
# JSON-RPC over HTTP
# ─────────────────────────────────────────────────────────────────────────────

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

_CALLER_FAULTS = frozenset({ErrorCode.INVALID_INPUT, ErrorCode.UNKNOWN_TOOL})


class JsonRpcPresenter:
    """Maps failures to a JSON-RPC 2.0 ``error`` object."""

    def present(self, error: ToolError) -> dict[str, Any]:
        data: dict[str, Any] = {"code": str(error.code), "recoverable": error.recoverable}
        if error.field:
            data["field"] = error.field
        return {
            "code": INVALID_PARAMS if error.code in _CALLER_FAULTS else INTERNAL_ERROR,
            "message": error.message,
            "data": data,
        }
