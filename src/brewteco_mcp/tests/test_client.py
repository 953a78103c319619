"""Tests for the resilient backend client."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from brewteco_mcp.foundation.errors import ErrorCode
from brewteco_mcp.io.backend import OPERATIONS, REFUSED_MESSAGE, TIMEOUT_MESSAGE, BackingOperation, Placement
from brewteco_mcp.runtime.retry import RetryPolicy

from brewteco_mcp.tests.support import FakeBackend, envelope, failing, make_client, refusing, timing_out

SALES = {"data_inicio": "2024-12-01", "data_fim": "2024-12-15"}


# ─────────────────────────────────────────────────────────────────────────────
# Success
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_envelope_data_is_the_payload() -> None:
    backend = FakeBackend(lambda r: envelope({"valor_total": 5000}))
    async with make_client(backend) as client:
        result = await client.invoke(OPERATIONS["general-sales"], {**SALES, "loja": "BOTAFOGO"})

    assert result.unwrap() == {"valor_total": 5000}
    (request,) = backend.requests
    assert request.method == "GET"
    assert request.url.path == "/api/v1/relatorio/vendas"
    assert dict(request.url.params) == {**SALES, "loja": "BOTAFOGO"}
    assert request.headers["user-agent"] == "Brewteco-MCP-Server/1.0.0"
    assert request.headers["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_non_envelope_body_passes_through() -> None:
    backend = FakeBackend(lambda r: httpx.Response(200, json=["Chope", "Cerveja"]))
    async with make_client(backend) as client:
        result = await client.invoke(OPERATIONS["categories"], {})
    assert result.unwrap() == ["Chope", "Cerveja"]


@pytest.mark.asyncio
async def test_post_sends_json_body() -> None:
    backend = FakeBackend(lambda r: envelope([]))
    async with make_client(backend) as client:
        await client.invoke(OPERATIONS["customer-filter"], {"categorias_consumidas": ("IPA",), "gasto_total_min": 1000})

    (request,) = backend.requests
    assert request.method == "POST"
    assert request.url.path == "/api/v1/clientes/filtro"
    assert json.loads(request.content) == {"categorias_consumidas": ["IPA"], "gasto_total_min": 1000}


@pytest.mark.asyncio
async def test_path_parameter_reaches_backend_decoded() -> None:
    backend = FakeBackend(lambda r: envelope({}))
    async with make_client(backend) as client:
        await client.invoke(OPERATIONS["staff-detail"], {"nome": "João Silva", **SALES})
    assert backend.requests[0].url.path == "/api/v1/relatorio/staff/João Silva/detalhe"


@pytest.mark.asyncio
async def test_recovers_after_transient_failure() -> None:
    responses = iter([httpx.Response(503), httpx.Response(500), envelope({"ok": 1})])
    backend = FakeBackend(lambda r: next(responses))
    async with make_client(backend) as client:
        result = await client.invoke(OPERATIONS["categories"], {})
    assert result.unwrap() == {"ok": 1}
    assert backend.attempts == 3


@pytest.mark.asyncio
async def test_health() -> None:
    backend = FakeBackend(lambda r: envelope({"status": "ok"}))
    async with make_client(backend) as client:
        assert (await client.health()).unwrap() == {"status": "ok"}
    assert backend.requests[0].url.path == "/api/v1/health"


# ─────────────────────────────────────────────────────────────────────────────
# Failure classification
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_server_error_exhausts_budget() -> None:
    backend = FakeBackend(failing(500, "Erro interno no banco"))
    async with make_client(backend, retries=3) as client:
        result = await client.invoke(OPERATIONS["products"], {"periodo": "hoje"})

    error = result.unwrap_err()
    assert backend.attempts == 4
    assert error.code is ErrorCode.UPSTREAM_SERVER_ERROR
    assert error.message == "Erro interno no banco"
    assert error.status == 500
    assert error.attempts == 4
    assert error.recoverable


@pytest.mark.asyncio
async def test_client_error_is_not_retried() -> None:
    backend = FakeBackend(failing(404, "Cliente não encontrado"))
    async with make_client(backend) as client:
        result = await client.invoke(OPERATIONS["customer-profile"], {"identificador": "x@y.z"})

    error = result.unwrap_err()
    assert backend.attempts == 1
    assert error.code is ErrorCode.UPSTREAM_CLIENT_ERROR
    assert error.message == "Cliente não encontrado"
    assert not error.recoverable


@pytest.mark.asyncio
async def test_status_line_when_body_has_no_message() -> None:
    backend = FakeBackend(failing(404))
    async with make_client(backend) as client:
        result = await client.invoke(OPERATIONS["categories"], {})
    assert result.unwrap_err().message == "HTTP 404: Not Found"


@pytest.mark.asyncio
async def test_timeout_on_every_attempt() -> None:
    backend = FakeBackend(timing_out)
    async with make_client(backend, retries=2) as client:
        result = await client.invoke(OPERATIONS["categories"], {})

    error = result.unwrap_err()
    assert backend.attempts == 3
    assert error.code is ErrorCode.UPSTREAM_TIMEOUT
    assert error.message == TIMEOUT_MESSAGE


@pytest.mark.asyncio
async def test_refused_connection_is_not_retried() -> None:
    backend = FakeBackend(refusing)
    async with make_client(backend) as client:
        result = await client.invoke(OPERATIONS["categories"], {})

    error = result.unwrap_err()
    assert backend.attempts == 1
    assert error.code is ErrorCode.UPSTREAM_UNREACHABLE
    assert error.message == REFUSED_MESSAGE


@pytest.mark.asyncio
async def test_malformed_json_is_internal_error() -> None:
    backend = FakeBackend(lambda r: httpx.Response(200, content=b"<html>oops</html>"))
    async with make_client(backend) as client:
        result = await client.invoke(OPERATIONS["categories"], {})

    assert backend.attempts == 1
    assert result.unwrap_err().code is ErrorCode.INTERNAL_ERROR


@pytest.mark.asyncio
async def test_unsuccessful_envelope_on_2xx() -> None:
    backend = FakeBackend(lambda r: httpx.Response(200, json={"success": False, "error": {"message": "Período inválido"}}))
    async with make_client(backend) as client:
        result = await client.invoke(OPERATIONS["products"], {"periodo": "hoje"})

    error = result.unwrap_err()
    assert error.code is ErrorCode.UPSTREAM_CLIENT_ERROR
    assert error.message == "Período inválido"


@pytest.mark.asyncio
async def test_blank_error_message_falls_back_to_status_line() -> None:
    backend = FakeBackend(failing(503, "   "))
    async with make_client(backend, retries=3) as client:
        result = await client.invoke(OPERATIONS["categories"], {})

    error = result.unwrap_err()
    assert backend.attempts == 4
    assert error.code is ErrorCode.UPSTREAM_SERVER_ERROR
    assert error.message == "HTTP 503: Service Unavailable"


@pytest.mark.asyncio
async def test_upstream_message_is_kept_verbatim() -> None:
    backend = FakeBackend(failing(400, " loja inválida\n"))
    async with make_client(backend) as client:
        result = await client.invoke(OPERATIONS["general-sales"], SALES)

    error = result.unwrap_err()
    assert error.code is ErrorCode.UPSTREAM_CLIENT_ERROR
    assert error.message == " loja inválida\n"


@pytest.mark.asyncio
async def test_redirects_are_followed() -> None:
    moved = "http://reports.test/api/v1/relatorio/categorias"

    def responder(request: httpx.Request) -> httpx.Response:
        if str(request.url) == moved:
            return envelope(["Chope", "Cerveja"])
        return httpx.Response(301, headers={"Location": moved})

    backend = FakeBackend(responder)
    async with make_client(backend) as client:
        result = await client.invoke(OPERATIONS["categories"], {})

    assert result.unwrap() == ["Chope", "Cerveja"]
    assert [r.url.path for r in backend.requests] == [
        "/api/v1/relatorio/produtos/categorias",
        "/api/v1/relatorio/categorias",
    ]


@pytest.mark.asyncio
async def test_unexpected_status_is_internal_error() -> None:
    backend = FakeBackend(lambda r: httpx.Response(304))
    async with make_client(backend) as client:
        result = await client.invoke(OPERATIONS["categories"], {})

    error = result.unwrap_err()
    assert backend.attempts == 1
    assert error.code is ErrorCode.INTERNAL_ERROR
    assert error.message == "HTTP 304: Not Modified"
    assert error.status == 304


@pytest.mark.asyncio
async def test_timeout_bounds_the_whole_attempt() -> None:
    async def trickle():
        for _ in range(100):
            await asyncio.sleep(0.01)
            yield b" "

    backend = FakeBackend(lambda r: httpx.Response(200, content=trickle()))
    async with make_client(backend, retries=1, timeout=0.05) as client:
        result = await asyncio.wait_for(client.invoke(OPERATIONS["categories"], {}), timeout=0.9)

    error = result.unwrap_err()
    assert backend.attempts == 2
    assert error.code is ErrorCode.UPSTREAM_TIMEOUT
    assert error.message == TIMEOUT_MESSAGE


# ─────────────────────────────────────────────────────────────────────────────
# Retry budget
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_non_idempotent_operation_is_not_retried() -> None:
    op = BackingOperation("create-note", "POST", "/notas", placement=Placement.BODY, idempotent=False)
    backend = FakeBackend(failing(500))
    async with make_client(backend) as client:
        result = await client.invoke(op, {"texto": "x"})
    assert backend.attempts == 1
    assert result.unwrap_err().code is ErrorCode.UPSTREAM_SERVER_ERROR


@pytest.mark.asyncio
async def test_explicit_budget_is_used() -> None:
    backend = FakeBackend(timing_out)
    budget = RetryPolicy.fixed(retries=1, delay=0.0).new_budget()
    async with make_client(backend, retries=5) as client:
        await client.invoke(OPERATIONS["categories"], {}, budget=budget)
    assert backend.attempts == 2
    assert budget.remaining == 0


@pytest.mark.asyncio
async def test_each_call_gets_a_fresh_budget() -> None:
    backend = FakeBackend(failing(502))
    async with make_client(backend, retries=2) as client:
        first, second = await asyncio.gather(
            client.invoke(OPERATIONS["categories"], {}),
            client.invoke(OPERATIONS["categories"], {}),
        )
    assert backend.attempts == 6
    assert first.unwrap_err().attempts == second.unwrap_err().attempts == 3


@pytest.mark.asyncio
async def test_waits_the_configured_delay(monkeypatch: pytest.MonkeyPatch) -> None:
    delays: list[float] = []
    real_sleep = asyncio.sleep

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)
        await real_sleep(0)

    monkeypatch.setattr("brewteco_mcp.io.backend.client.asyncio.sleep", fake_sleep)
    backend = FakeBackend(failing(500))
    async with make_client(backend, retries=3, delay=1.0) as client:
        await client.invoke(OPERATIONS["categories"], {})
    assert [d for d in delays if d] == [1.0, 1.0, 1.0]


@pytest.mark.asyncio
async def test_every_attempt_is_logged(captured_logs) -> None:
    backend = FakeBackend(timing_out)
    async with make_client(backend) as client:
        await client.invoke(OPERATIONS["customer-profile"], {"identificador": "joao@example.com"})

    entries = captured_logs.events("backend request")
    assert [e.context["attempt"] for e in entries] == [1, 2, 3, 4]
    assert {e.context["method"] for e in entries} == {"GET"}
    assert {e.context["path"] for e in entries} == {"/clientes/joao%40example.com/perfil"}


@pytest.mark.asyncio
async def test_retry_decisions_are_logged(captured_logs) -> None:
    backend = FakeBackend(failing(500))
    async with make_client(backend, retries=2) as client:
        await client.invoke(OPERATIONS["categories"], {})

    entries = captured_logs.events("retrying")
    assert [(e.context["attempt"], e.context["remaining"]) for e in entries] == [(1, 1), (2, 0)]
    assert {e.context["code"] for e in entries} == {"UPSTREAM_SERVER_ERROR"}
    assert len(captured_logs.events("backend call failed")) == 1
