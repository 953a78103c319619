"""Tests for the per-binding error presenters."""

import pytest
from fastmcp.exceptions import ToolError as McpToolError

from brewteco_mcp.ext.mcp import HttpPresenter, JsonRpcPresenter, McpPresenter, render_payload
from brewteco_mcp.foundation.errors import ErrorCode, ToolError


def _error(code: ErrorCode, **kw: object) -> ToolError:
    return ToolError.create("obter_vendas", "something failed", code, **kw)


@pytest.mark.parametrize("code, status", [
    (ErrorCode.UNKNOWN_TOOL, 404),
    (ErrorCode.INVALID_INPUT, 400),
    (ErrorCode.UPSTREAM_CLIENT_ERROR, 502),
    (ErrorCode.UPSTREAM_SERVER_ERROR, 502),
    (ErrorCode.UPSTREAM_UNREACHABLE, 503),
    (ErrorCode.UPSTREAM_TIMEOUT, 504),
    (ErrorCode.INTERNAL_ERROR, 500),
])
def test_http_status_per_kind(code: ErrorCode, status: int) -> None:
    view = HttpPresenter().present(_error(code))
    assert view.status_code == status
    assert view.body == {"error": "something failed", "code": code.value}


def test_http_body_names_the_field() -> None:
    view = HttpPresenter().present(_error(ErrorCode.INVALID_INPUT, field="data_inicio"))
    assert view.body["field"] == "data_inicio"


@pytest.mark.parametrize("code, rpc_code", [
    (ErrorCode.INVALID_INPUT, -32602),
    (ErrorCode.UNKNOWN_TOOL, -32602),
    (ErrorCode.UPSTREAM_TIMEOUT, -32603),
    (ErrorCode.INTERNAL_ERROR, -32603),
])
def test_json_rpc_error(code: ErrorCode, rpc_code: int) -> None:
    error = JsonRpcPresenter().present(_error(code))
    assert error["code"] == rpc_code
    assert error["message"] == "something failed"
    assert error["data"]["code"] == code.value


def test_mcp_presenter_builds_tool_error() -> None:
    exc = McpPresenter().present(_error(ErrorCode.UPSTREAM_TIMEOUT))
    assert isinstance(exc, McpToolError)
    assert str(exc) == "[UPSTREAM_TIMEOUT] something failed"


def test_payload_rendered_as_indented_json() -> None:
    text = render_payload({"loja": "GÁVEA", "valor_total": 10})
    assert text == '{\n  "loja": "GÁVEA",\n  "valor_total": 10\n}'
