"""Tests for the FastMCP tool adapter."""

import httpx
import pytest
from fastmcp.exceptions import ToolError as McpToolError

from brewteco_mcp.ext.mcp import CatalogTool, create_mcp_server
from brewteco_mcp.foundation.catalog import get_contract
from brewteco_mcp.tests.support import FakeBackend, envelope, make_dispatcher


def test_tool_advertises_contract_schema() -> None:
    dispatcher = make_dispatcher(FakeBackend(lambda r: envelope({})))
    contract = get_contract("obter_produtos")
    tool = CatalogTool.from_contract(contract, dispatcher)
    assert tool.name == "obter_produtos"
    assert tool.description == contract.description
    assert tool.parameters == contract.input_schema()


def test_server_registers_whole_catalog() -> None:
    server = create_mcp_server(make_dispatcher(FakeBackend(lambda r: envelope({}))), name="brewteco-test")
    assert server.name == "brewteco-test"
    assert len(server.list_tools()) == 8


@pytest.mark.asyncio
async def test_success_is_one_text_block() -> None:
    backend = FakeBackend(lambda r: envelope({"valor_total": 5000}))
    dispatcher = make_dispatcher(backend)
    tool = CatalogTool.from_contract(get_contract("obter_vendas"), dispatcher)

    result = await tool.run({"data_inicio": "2024-12-01", "data_fim": "2024-12-15"})
    (block,) = result.content
    assert block.type == "text"
    assert block.text == '{\n  "valor_total": 5000\n}'
    await dispatcher.aclose()


@pytest.mark.asyncio
async def test_failure_raises_mcp_tool_error() -> None:
    backend = FakeBackend(lambda r: httpx.Response(500))
    dispatcher = make_dispatcher(backend, retries=0)
    tool = CatalogTool.from_contract(get_contract("obter_categorias"), dispatcher)

    with pytest.raises(McpToolError, match=r"\[UPSTREAM_SERVER_ERROR\]"):
        await tool.run({})
    await dispatcher.aclose()


@pytest.mark.asyncio
async def test_invalid_arguments_raise_before_network() -> None:
    backend = FakeBackend(lambda r: envelope({}))
    tool = CatalogTool.from_contract(get_contract("obter_perfil_cliente"), make_dispatcher(backend))

    with pytest.raises(McpToolError, match=r"\[INVALID_INPUT\] identificador"):
        await tool.run({"identificador": ""})
    assert backend.attempts == 0
