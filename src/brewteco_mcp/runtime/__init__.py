"""Runtime - execution flow, control, and monitoring.

Contains: dispatch, retry, concurrency, observability.
"""

from __future__ import annotations

__all__ = [
    # Dispatch
    "Dispatcher", "TOOL_OPERATIONS",
    # Retry
    "RetryPolicy", "RetryBudget", "ConstantBackoff",
    # Concurrency
    "CancelToken", "checkpoint",
    # Observability
    "configure_logging", "get_logger", "log_context",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in ("Dispatcher", "TOOL_OPERATIONS"):
        from . import dispatch
        return getattr(dispatch, name)

    if name in ("RetryPolicy", "RetryBudget", "ConstantBackoff"):
        from . import retry
        return getattr(retry, name)

    if name in ("CancelToken", "checkpoint"):
        from . import concurrency
        return getattr(concurrency, name)

    if name in ("configure_logging", "get_logger", "log_context"):
        from . import observability
        return getattr(observability, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
