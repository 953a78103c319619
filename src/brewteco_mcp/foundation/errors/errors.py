"""Error taxonomy for dispatched tool calls.

Every failure that leaves the gateway is a ``ToolError`` carrying one of the
``ErrorCode`` kinds below, whichever transport invoked the call.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class ErrorCode(StrEnum):
    """Stable, machine-readable failure kinds."""
    UNKNOWN_TOOL = "UNKNOWN_TOOL"
    INVALID_INPUT = "INVALID_INPUT"
    UPSTREAM_CLIENT_ERROR = "UPSTREAM_CLIENT_ERROR"
    UPSTREAM_SERVER_ERROR = "UPSTREAM_SERVER_ERROR"
    UPSTREAM_UNREACHABLE = "UPSTREAM_UNREACHABLE"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Kinds where the same call might succeed later (not retried at the transport layer)
_RECOVERABLE_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.UPSTREAM_SERVER_ERROR,
    ErrorCode.UPSTREAM_UNREACHABLE,
    ErrorCode.UPSTREAM_TIMEOUT,
})

_UPSTREAM_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.UPSTREAM_CLIENT_ERROR,
    *_RECOVERABLE_CODES,
})


class ToolError(BaseModel):
    """Structured failure of one logical call.

    Attributes:
        tool_name: Tool (or backing operation) that failed
        message: Human-readable message, verbatim from the backing API when it sent one
        code: Failure kind
        recoverable: Whether an identical call later might succeed
        field: Offending argument for INVALID_INPUT failures
        status: Upstream HTTP status, when a response was received
        attempts: Network attempts performed (0 when the call never left the gateway)
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "title": "Tool Error",
            "examples": [{
                "tool_name": "obter_vendas",
                "message": "data_inicio: expected date formatted as YYYY-MM-DD",
                "code": "INVALID_INPUT",
                "field": "data_inicio",
            }],
        },
    )

    tool_name: str = ""
    message: Annotated[str, Field(min_length=1)]
    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    recoverable: bool = False
    field: str | None = None
    status: int | None = None
    attempts: Annotated[int, Field(ge=0)] = 0

    @field_validator("message", mode="before")
    @classmethod
    def _ensure_message(cls, v: str | Exception) -> str:
        """Accept Exception objects and extract message."""
        return (str(v) or type(v).__name__) if isinstance(v, Exception) else v

    @computed_field
    @property
    def is_upstream(self) -> bool:
        """Whether the failure originated at the backing API."""
        return self.code in _UPSTREAM_CODES

    @classmethod
    def create(
        cls,
        tool_name: str,
        message: str,
        code: ErrorCode,
        *,
        field: str | None = None,
        status: int | None = None,
        attempts: int = 0,
    ) -> Self:
        """Factory deriving ``recoverable`` from the code."""
        return cls(
            tool_name=tool_name, message=message, code=code,
            recoverable=code in _RECOVERABLE_CODES,
            field=field, status=status, attempts=attempts,
        )

    def for_tool(self, tool_name: str) -> Self:
        """Return a copy attributed to ``tool_name``."""
        return self.model_copy(update={"tool_name": tool_name})

    def render(self) -> str:
        """One-line form used in logs and text-only transports."""
        return f"[{self.code}] {self.message}"

    __str__ = render


class ToolException(Exception):
    """Exception wrapping a ToolError for raise-style call sites."""

    __slots__ = ("error",)

    def __init__(self, error: ToolError) -> None:
        self.error = error
        super().__init__(error.message)

    @classmethod
    def create(cls, tool_name: str, message: str, code: ErrorCode) -> Self:
        return cls(ToolError.create(tool_name, message, code))
