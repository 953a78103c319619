"""Validation and normalization of caller-supplied arguments."""

from .validator import (
    ArgumentValidator,
    FieldIssue,
    IssueKind,
    NormalizedArguments,
    ValidationFailure,
    compile_contract,
    get_validator,
    validate,
)

__all__ = [
    "ArgumentValidator",
    "NormalizedArguments",
    "ValidationFailure",
    "FieldIssue",
    "IssueKind",
    "compile_contract",
    "get_validator",
    "validate",
]
