"""Brewteco MCP - tool gateway in front of the Brewteco reports API.

Exposes a fixed catalog of reporting tools (sales, products, staff,
customers) over MCP stdio, the MCP SSE push stream and plain HTTP. Every call
is validated against its contract, routed to one backing API operation and
executed with bounded retries; failures come back in one stable taxonomy.

Quick Start:
    >>> from brewteco_mcp import Dispatcher, get_settings
    >>>
    >>> dispatcher = Dispatcher.from_settings(get_settings())
    >>> result = await dispatcher.dispatch("obter_vendas", {
    ...     "data_inicio": "2024-12-01",
    ...     "data_fim": "2024-12-15",
    ...     "loja": "BOTAFOGO",
    ... })
    >>> result.match(ok=lambda data: data, err=lambda e: e.render())

Serving:
    >>> from brewteco_mcp.ext.mcp import serve_mcp
    >>> serve_mcp(get_settings(), transport="stdio")

    $ brewteco-mcp sse --port 3710
"""

__version__ = "1.0.0"

# Errors
from .foundation.errors import Err, ErrorCode, Ok, Result, ToolError, ToolException, ToolResult

# Config
from .foundation.config import GatewaySettings, clear_settings_cache, get_settings

# Catalog & validation
from .foundation.catalog import CATALOG, STORES, ToolContract, get_contract, list_tools
from .foundation.validation import NormalizedArguments, ValidationFailure, validate

# Runtime
from .runtime.concurrency import CancelToken
from .runtime.dispatch import Dispatcher
from .runtime.retry import RetryBudget, RetryPolicy

# Backend
from .io.backend import OPERATIONS, BackendClient, BackingOperation

__all__ = [
    # Version
    "__version__",
    # Errors
    "ErrorCode", "ToolError", "ToolException", "Result", "Ok", "Err", "ToolResult",
    # Config
    "GatewaySettings", "get_settings", "clear_settings_cache",
    # Catalog & validation
    "CATALOG", "STORES", "ToolContract", "list_tools", "get_contract",
    "NormalizedArguments", "ValidationFailure", "validate",
    # Runtime
    "Dispatcher", "CancelToken", "RetryPolicy", "RetryBudget",
    # Backend
    "BackendClient", "BackingOperation", "OPERATIONS",
]
