"""Retry policy for backing-API calls.

Example:
    >>> from brewteco_mcp.runtime.retry import RetryPolicy
    >>> budget = RetryPolicy.fixed(retries=3, delay=1.0).new_budget()
    >>> budget.remaining
    3
"""

from .backoff import Backoff, ConstantBackoff
from .policy import DEFAULT_RETRYABLE, NO_RETRY, RetryBudget, RetryPolicy

__all__ = [
    "Backoff",
    "ConstantBackoff",
    "RetryPolicy",
    "RetryBudget",
    "DEFAULT_RETRYABLE",
    "NO_RETRY",
]
