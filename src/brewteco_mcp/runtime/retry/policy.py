"""Retry policy and per-call retry budget.

``RetryPolicy`` is shared configuration: how many retries, how long to wait,
which failure kinds are transient. ``RetryBudget`` is the mutable counter one
logical call consumes; it is created fresh for every call and never
replenished, so concurrent calls never share attempts.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_serializer,
    field_validator,
)

from brewteco_mcp.foundation.errors import ErrorCode

from .backoff import Backoff, ConstantBackoff

# Transient kinds: the backing API failed on its side or did not answer in time.
# Refused connections are not retried.
DEFAULT_RETRYABLE: frozenset[ErrorCode] = frozenset({
    ErrorCode.UPSTREAM_SERVER_ERROR,
    ErrorCode.UPSTREAM_TIMEOUT,
})


class RetryPolicy(BaseModel):
    """Configurable retry policy for backing-API calls.

    Attributes:
        max_retries: Maximum retry attempts after the first (0 = no retries)
        backoff: Backoff strategy for delay calculation
        retryable_codes: Failure kinds that trigger a retry

    Example:
        >>> policy = RetryPolicy(max_retries=3, backoff=ConstantBackoff(1.0))
        >>> policy.should_retry(ErrorCode.UPSTREAM_TIMEOUT, attempt=0)
        True
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,  # For Backoff protocol
        validate_default=True,
        extra="forbid",
        revalidate_instances="never",
    )

    max_retries: Annotated[int, Field(ge=0, le=10)] = 3
    backoff: Backoff = Field(default_factory=ConstantBackoff, repr=False)
    retryable_codes: frozenset[ErrorCode] = DEFAULT_RETRYABLE

    @field_validator("retryable_codes", mode="before")
    @classmethod
    def _normalize_codes(cls, v: frozenset[ErrorCode] | set[str] | list[str] | tuple[str, ...]) -> frozenset[ErrorCode]:
        """Accept strings and convert to ErrorCode enum."""
        return frozenset(ErrorCode(c) for c in v)

    @field_serializer("retryable_codes")
    def _serialize_codes(self, v: frozenset[ErrorCode]) -> list[str]:
        return sorted(c.value for c in v)

    @computed_field
    @property
    def is_disabled(self) -> bool:
        """Whether retries are effectively disabled."""
        return self.max_retries == 0 or not self.retryable_codes

    @classmethod
    def fixed(cls, retries: int, delay: float) -> RetryPolicy:
        """Policy with ``retries`` retries spaced by a constant ``delay``."""
        return cls(max_retries=retries, backoff=ConstantBackoff(delay))

    def is_retryable(self, code: ErrorCode | str) -> bool:
        return ErrorCode(code) in self.retryable_codes

    def should_retry(self, code: ErrorCode | str, attempt: int) -> bool:
        """Determine if a retry should be attempted.

        Args:
            code: Failure kind of the last attempt
            attempt: Retries already made (0 after the first failure)
        """
        return attempt < self.max_retries and self.is_retryable(code)

    def get_delay(self, attempt: int) -> float:
        return self.backoff.delay(attempt)

    def new_budget(self) -> RetryBudget:
        """Fresh budget for one logical call."""
        return RetryBudget(self)

    def __hash__(self) -> int:
        return hash((self.max_retries, tuple(sorted(c.value for c in self.retryable_codes))))


NO_RETRY = RetryPolicy(max_retries=0, retryable_codes=frozenset())


class RetryBudget:
    """Remaining retries for one in-flight call.

    Owned by a single invocation and discarded when it resolves.
    """

    __slots__ = ("_policy", "_used")

    def __init__(self, policy: RetryPolicy) -> None:
        self._policy = policy
        self._used = 0

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    @property
    def remaining(self) -> int:
        return self._policy.max_retries - self._used

    @property
    def used(self) -> int:
        return self._used

    def consume(self, code: ErrorCode) -> float | None:
        """Spend one retry for a failure of kind ``code``.

        Returns:
            Seconds to wait before re-issuing the request, or None when the
            failure is not transient or the budget is exhausted.
        """
        if not self._policy.should_retry(code, self._used):
            return None
        delay = self._policy.get_delay(self._used)
        self._used += 1
        return delay

    def __repr__(self) -> str:
        return f"RetryBudget(remaining={self.remaining}, max_retries={self._policy.max_retries})"
