"""Remote operations of the reports API and how arguments map onto requests.

Each operation is bound to an HTTP method, a path template with at most one
path parameter, and a placement for the remaining arguments: query string for
GET, JSON body for POST.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Literal
from urllib.parse import quote

HttpMethod = Literal["GET", "POST"]


class Placement(StrEnum):
    NONE = "none"
    QUERY = "query"
    BODY = "body"


@dataclass(frozen=True, slots=True)
class BackingOperation:
    """One endpoint of the backing API.

    Attributes:
        name: Stable operation id (general-sales, staff-detail, ...)
        method: HTTP method
        path: Path template relative to the base URL, e.g. ``/clientes/{identificador}/perfil``
        path_param: Argument substituted (percent-encoded) into ``path``
        placement: Where every other argument goes
        idempotent: Whether a failed attempt may be re-issued
    """

    name: str
    method: HttpMethod
    path: str
    path_param: str | None = None
    placement: Placement = Placement.QUERY
    idempotent: bool = True

    def __post_init__(self) -> None:
        if self.path_param is not None and f"{{{self.path_param}}}" not in self.path:
            raise ValueError(f"Path '{self.path}' has no '{{{self.path_param}}}' slot")

    def render_path(self, arguments: Mapping[str, Any]) -> str:
        if self.path_param is None:
            return self.path
        value = str(arguments[self.path_param])
        return self.path.replace(f"{{{self.path_param}}}", quote(value, safe=""))


@dataclass(frozen=True, slots=True)
class BackendRequest:
    """Fully-built request, re-issued unchanged on every attempt."""

    operation: str
    method: HttpMethod
    path: str
    params: Mapping[str, Any] = field(default_factory=dict)
    json: Mapping[str, Any] | None = None

    def describe(self) -> str:
        return f"{self.method} {self.path}"


def build_request(operation: BackingOperation, arguments: Mapping[str, Any]) -> BackendRequest:
    """Place normalized arguments into path, query string or body."""
    rest = {k: _plain(v) for k, v in arguments.items() if k != operation.path_param}
    path = operation.render_path(arguments)
    match operation.placement:
        case Placement.BODY:
            return BackendRequest(operation.name, operation.method, path, json=rest)
        case Placement.QUERY:
            return BackendRequest(operation.name, operation.method, path, params=rest)
        case _:
            return BackendRequest(operation.name, operation.method, path)


def _plain(value: Any) -> Any:
    return list(value) if isinstance(value, tuple) else value


# ─────────────────────────────────────────────────────────────────────────────
# Operation table
# ─────────────────────────────────────────────────────────────────────────────

GENERAL_SALES = BackingOperation("general-sales", "GET", "/relatorio/vendas")
SALES_COMPARISON = BackingOperation("sales-comparison", "GET", "/relatorio/vendas/comparacao")
PRODUCTS = BackingOperation("products", "GET", "/relatorio/produtos")
CATEGORIES = BackingOperation("categories", "GET", "/relatorio/produtos/categorias", placement=Placement.NONE)
STAFF = BackingOperation("staff", "GET", "/relatorio/staff")
STAFF_DETAIL = BackingOperation("staff-detail", "GET", "/relatorio/staff/{nome}/detalhe", path_param="nome")
# Read-only search sent as POST only because the filter set is large
CUSTOMER_FILTER = BackingOperation("customer-filter", "POST", "/clientes/filtro", placement=Placement.BODY)
CUSTOMER_PROFILE = BackingOperation(
    "customer-profile", "GET", "/clientes/{identificador}/perfil",
    path_param="identificador", placement=Placement.NONE,
)
HEALTH = BackingOperation("health", "GET", "/health", placement=Placement.NONE)

OPERATIONS: Mapping[str, BackingOperation] = MappingProxyType({
    op.name: op for op in (
        GENERAL_SALES, SALES_COMPARISON, PRODUCTS, CATEGORIES, STAFF,
        STAFF_DETAIL, CUSTOMER_FILTER, CUSTOMER_PROFILE, HEALTH,
    )
})
