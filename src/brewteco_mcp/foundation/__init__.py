"""Foundation - building blocks for the gateway.

Contains: error handling, configuration, tool catalog, argument validation.
"""

from __future__ import annotations

__all__ = [
    # Errors
    "ErrorCode", "ToolError", "ToolException", "Result", "Ok", "Err", "ToolResult",
    # Config
    "GatewaySettings", "get_settings", "clear_settings_cache",
    # Catalog
    "CATALOG", "Catalog", "ToolContract", "list_tools", "get_contract",
    # Validation
    "ArgumentValidator", "NormalizedArguments", "ValidationFailure", "validate",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in ("ErrorCode", "ToolError", "ToolException", "Result", "Ok", "Err", "ToolResult"):
        from . import errors
        return getattr(errors, name)

    if name in ("GatewaySettings", "get_settings", "clear_settings_cache"):
        from . import config
        return getattr(config, name)

    if name in ("CATALOG", "Catalog", "ToolContract", "list_tools", "get_contract"):
        from . import catalog
        return getattr(catalog, name)

    if name in ("ArgumentValidator", "NormalizedArguments", "ValidationFailure", "validate"):
        from . import validation
        return getattr(validation, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
