"""Single entry point for every transport: validate, route, execute.

``dispatch`` never raises for a failed call. Validation problems, backing API
failures and unexpected crashes all come back as ``Err(ToolError)``; only
cancellation propagates as ``asyncio.CancelledError``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from brewteco_mcp.foundation.catalog import CATALOG, Catalog, ToolContract
from brewteco_mcp.foundation.errors import Err, ErrorCode, ToolError, ToolResult
from brewteco_mcp.foundation.validation import ArgumentValidator
from brewteco_mcp.io.backend import OPERATIONS, BackendClient, BackingOperation
from brewteco_mcp.runtime.observability import get_logger, log_context

if TYPE_CHECKING:
    import httpx

    from brewteco_mcp.foundation.config import GatewaySettings
    from brewteco_mcp.runtime.concurrency import CancelToken
    from brewteco_mcp.runtime.retry import RetryBudget

log = get_logger("dispatch")

# One backing operation per tool; obter_categorias is the parameterless products variant
TOOL_OPERATIONS: Mapping[str, BackingOperation] = MappingProxyType({
    "obter_vendas": OPERATIONS["general-sales"],
    "comparar_vendas_lojas": OPERATIONS["sales-comparison"],
    "obter_produtos": OPERATIONS["products"],
    "obter_categorias": OPERATIONS["categories"],
    "obter_performance_equipe": OPERATIONS["staff"],
    "obter_detalhe_funcionario": OPERATIONS["staff-detail"],
    "filtrar_clientes": OPERATIONS["customer-filter"],
    "obter_perfil_cliente": OPERATIONS["customer-profile"],
})


class Dispatcher:
    """Routes validated tool calls to the backing API.

    Stateless apart from immutable tables and the shared client, so one
    instance serves every concurrent call.

    Example:
        >>> dispatcher = Dispatcher(BackendClient("http://localhost:3700/api/v1"))
        >>> result = await dispatcher.dispatch("obter_vendas", {
        ...     "data_inicio": "2024-12-01", "data_fim": "2024-12-15", "loja": "BOTAFOGO",
        ... })
        >>> result.unwrap()["ticket_medio"]
        125
    """

    __slots__ = ("_client", "_catalog", "_validator", "_routes")

    def __init__(
        self,
        client: BackendClient,
        *,
        catalog: Catalog = CATALOG,
        routes: Mapping[str, BackingOperation] = TOOL_OPERATIONS,
    ) -> None:
        missing = [c.name for c in catalog if c.name not in routes]
        if missing:
            raise ValueError(f"No backing operation for tools: {missing}")
        self._client = client
        self._catalog = catalog
        self._validator = ArgumentValidator(catalog)
        self._routes = routes

    @classmethod
    def from_settings(
        cls,
        settings: GatewaySettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Dispatcher:
        """Build client and dispatcher from configuration."""
        return cls(BackendClient.from_settings(settings, transport=transport))

    @property
    def client(self) -> BackendClient:
        return self._client

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    def list_tools(self) -> list[dict[str, Any]]:
        """Catalog entries (name, description, inputSchema) in listing order."""
        return self._catalog.describe()

    def contracts(self) -> tuple[ToolContract, ...]:
        return self._catalog.list_tools()

    async def dispatch(
        self,
        tool_name: str,
        raw_args: object = None,
        *,
        budget: RetryBudget | None = None,
        cancel: CancelToken | None = None,
    ) -> ToolResult:
        """Run one tool call end to end.

        Invalid calls fail with zero network requests. The client's result is
        returned as is, attributed to ``tool_name``.

        Raises:
            asyncio.CancelledError: The call was cancelled.
        """
        with log_context(tool=tool_name):
            validated = self._validator.validate(tool_name, raw_args)
            if validated.is_err():
                failure = validated.unwrap_err()
                log.info("call rejected", kind=str(failure.kind), field=failure.field)
                return Err(failure.to_error())

            operation = self._routes[tool_name]
            try:
                result = await self._client.invoke(operation, validated.unwrap(), budget=budget, cancel=cancel)
            except asyncio.CancelledError:
                log.info("call cancelled", operation=operation.name)
                raise
            except Exception as e:
                log.exception("dispatch crashed", operation=operation.name)
                return Err(ToolError.create(tool_name, f"Internal error: {e}", ErrorCode.INTERNAL_ERROR))
            return result.map_err(lambda err: err.for_tool(tool_name))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Dispatcher:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
