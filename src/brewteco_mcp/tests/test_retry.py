"""Tests for the retry policy and per-call budget."""

import pytest
from pydantic import ValidationError

from brewteco_mcp.foundation.errors import ErrorCode
from brewteco_mcp.runtime.retry import NO_RETRY, ConstantBackoff, RetryBudget, RetryPolicy


def test_defaults() -> None:
    policy = RetryPolicy()
    assert policy.max_retries == 3
    assert policy.get_delay(0) == policy.get_delay(2) == 1.0
    assert policy.retryable_codes == {ErrorCode.UPSTREAM_SERVER_ERROR, ErrorCode.UPSTREAM_TIMEOUT}


@pytest.mark.parametrize("code, retryable", [
    (ErrorCode.UPSTREAM_SERVER_ERROR, True),
    (ErrorCode.UPSTREAM_TIMEOUT, True),
    (ErrorCode.UPSTREAM_UNREACHABLE, False),
    (ErrorCode.UPSTREAM_CLIENT_ERROR, False),
    (ErrorCode.INVALID_INPUT, False),
    (ErrorCode.INTERNAL_ERROR, False),
])
def test_only_transient_kinds_retry(code: ErrorCode, retryable: bool) -> None:
    assert RetryPolicy().should_retry(code, attempt=0) is retryable


def test_codes_accept_strings() -> None:
    policy = RetryPolicy(retryable_codes=["UPSTREAM_TIMEOUT"])
    assert policy.retryable_codes == frozenset({ErrorCode.UPSTREAM_TIMEOUT})
    assert policy.model_dump()["retryable_codes"] == ["UPSTREAM_TIMEOUT"]


def test_bounds() -> None:
    with pytest.raises(ValidationError):
        RetryPolicy(max_retries=11)
    assert NO_RETRY.is_disabled
    assert not RetryPolicy().is_disabled


def test_budget_is_never_replenished() -> None:
    budget = RetryPolicy.fixed(retries=2, delay=0.5).new_budget()
    assert budget.consume(ErrorCode.UPSTREAM_TIMEOUT) == 0.5
    assert budget.consume(ErrorCode.UPSTREAM_SERVER_ERROR) == 0.5
    assert budget.remaining == 0
    assert budget.consume(ErrorCode.UPSTREAM_TIMEOUT) is None
    assert budget.used == 2


def test_permanent_failure_does_not_spend_budget() -> None:
    budget = RetryPolicy().new_budget()
    assert budget.consume(ErrorCode.UPSTREAM_CLIENT_ERROR) is None
    assert budget.remaining == 3


def test_budgets_are_independent() -> None:
    policy = RetryPolicy.fixed(retries=1, delay=0.0)
    first, second = policy.new_budget(), policy.new_budget()
    first.consume(ErrorCode.UPSTREAM_TIMEOUT)
    assert first.remaining == 0
    assert second.remaining == 1


def test_constant_backoff() -> None:
    backoff = ConstantBackoff(2.5)
    assert [backoff.delay(n) for n in range(3)] == [2.5, 2.5, 2.5]
    assert RetryBudget(RetryPolicy(backoff=backoff)).consume(ErrorCode.UPSTREAM_TIMEOUT) == 2.5
