"""Backoff strategies for retry policies.

The backing API expects a fixed pause between attempts, so ``ConstantBackoff``
is the default. Anything with a ``delay(attempt)`` method can stand in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class Backoff(Protocol):
    """Protocol for backoff delay calculation.

    Attempt numbers are 0-indexed (first retry = attempt 0).
    """

    def delay(self, attempt: int) -> float:
        """Delay in seconds before the given retry attempt."""
        ...


@dataclass(frozen=True, slots=True)
class ConstantBackoff:
    """Fixed delay between retries.

    Attributes:
        delay_seconds: Fixed delay in seconds (default: 1.0)
    """

    delay_seconds: float = 1.0

    def delay(self, attempt: int) -> float:
        return self.delay_seconds
