"""Argument validation against tool contracts.

Each contract is compiled once into a strict pydantic model. Raw caller input
is validated against that model, pydantic's errors are translated into
``MissingField``/``InvalidField`` issues, and cross-field rules declared on
the contract are enforced afterwards. Validation is pure: no I/O, and the
same input always yields an equal result.

Example:
    >>> result = validate("obter_vendas", {"data_inicio": "2024-12-01", "data_fim": "2024-12-15"})
    >>> result.unwrap()["data_inicio"]
    '2024-12-01'
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from brewteco_mcp.foundation.catalog import CATALOG, Catalog, ToolContract
from brewteco_mcp.foundation.errors import Err, ErrorCode, Ok, Result, ToolError


class IssueKind(StrEnum):
    UNKNOWN_TOOL = "unknown_tool"
    INVALID_INPUT = "invalid_input"
    MISSING_FIELD = "missing_field"
    INVALID_FIELD = "invalid_field"


class FieldIssue(BaseModel):
    """One problem found in the caller's arguments."""

    model_config = ConfigDict(frozen=True)

    kind: IssueKind
    field: str | None = None
    reason: str

    def render(self) -> str:
        return f"{self.field}: {self.reason}" if self.field else self.reason


class ValidationFailure(BaseModel):
    """Structured rejection of a call, reported on the first failing field.

    Attributes:
        tool_name: Tool the arguments were meant for
        issues: Every problem found, in contract order; ``issues[0]`` is reported
    """

    model_config = ConfigDict(frozen=True)

    tool_name: str
    issues: tuple[FieldIssue, ...] = Field(min_length=1)

    @property
    def first(self) -> FieldIssue:
        return self.issues[0]

    @property
    def kind(self) -> IssueKind:
        return self.first.kind

    @property
    def field(self) -> str | None:
        return self.first.field

    @property
    def message(self) -> str:
        return self.first.render()

    def to_error(self) -> ToolError:
        """Map onto the gateway taxonomy (UNKNOWN_TOOL or INVALID_INPUT)."""
        code = ErrorCode.UNKNOWN_TOOL if self.kind is IssueKind.UNKNOWN_TOOL else ErrorCode.INVALID_INPUT
        return ToolError.create(self.tool_name, self.message, code, field=self.field)


class NormalizedArguments(Mapping[str, Any]):
    """Read-only, contract-satisfying arguments of one call.

    Only keys the caller supplied and the contract declares are present.
    """

    __slots__ = ("_tool_name", "_data")

    def __init__(self, tool_name: str, data: Mapping[str, Any]) -> None:
        self._tool_name = tool_name
        self._data = MappingProxyType({k: _freeze(v) for k, v in data.items()})

    @property
    def tool_name(self) -> str:
        return self._tool_name

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, NormalizedArguments):
            return self._tool_name == other._tool_name and dict(self._data) == dict(other._data)
        if isinstance(other, Mapping):
            return dict(self._data) == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON-ready copy (tuples become lists)."""
        return {k: list(v) if isinstance(v, tuple) else v for k, v in self._data.items()}

    def __repr__(self) -> str:
        return f"NormalizedArguments({self._tool_name!r}, {dict(self._data)!r})"


def _freeze(value: Any) -> Any:
    return tuple(value) if isinstance(value, list) else value


# ─────────────────────────────────────────────────────────────────────────────
# Validator
# ─────────────────────────────────────────────────────────────────────────────

_STRICT = ConfigDict(strict=True, extra="ignore", frozen=True)


def compile_contract(contract: ToolContract) -> type[BaseModel]:
    """Build the strict pydantic model that checks one contract's parameters.

    Optional parameters keep their plain type with a ``None`` default, so an
    explicit ``null`` from the caller is rejected rather than treated as absent.
    """
    fields: dict[str, Any] = {
        p.name: (p.annotation(), Field(...) if p.required else None)
        for p in contract.params
    }
    return create_model(f"{_camel(contract.name)}Args", __config__=_STRICT, **fields)


def _camel(name: str) -> str:
    return "".join(part.capitalize() for part in name.split("_"))


class ArgumentValidator:
    """Validates raw arguments against the contracts of a catalog.

    Compiled models are built eagerly at construction; the validator holds no
    other state and is safe to share between concurrent calls.
    """

    __slots__ = ("_catalog", "_models")

    def __init__(self, catalog: Catalog = CATALOG) -> None:
        self._catalog = catalog
        self._models: dict[str, type[BaseModel]] = {c.name: compile_contract(c) for c in catalog}

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    def validate(self, tool_name: str, raw_args: object) -> Result[NormalizedArguments, ValidationFailure]:
        contract = self._catalog.get(tool_name)
        if contract is None:
            return Err(_failure(tool_name, IssueKind.UNKNOWN_TOOL, None, f"Unknown tool: {tool_name}"))

        if raw_args is None:
            raw_args = {}
        if not isinstance(raw_args, Mapping):
            reason = f"arguments must be an object, got {type(raw_args).__name__}"
            return Err(_failure(tool_name, IssueKind.INVALID_INPUT, None, reason))

        try:
            parsed = self._models[tool_name].model_validate(dict(raw_args))
        except ValidationError as e:
            return Err(ValidationFailure(tool_name=tool_name, issues=_translate(contract, e)))

        values = parsed.model_dump(exclude_unset=True)
        issues = [
            FieldIssue(kind=IssueKind.MISSING_FIELD, field=name, reason=rule.describe())
            for rule in contract.requires if rule.applies(values)
            for name in rule.then_required if name not in values
        ]
        if issues:
            return Err(ValidationFailure(tool_name=tool_name, issues=tuple(issues)))
        return Ok(NormalizedArguments(tool_name, values))


def _failure(tool_name: str, kind: IssueKind, field: str | None, reason: str) -> ValidationFailure:
    return ValidationFailure(tool_name=tool_name, issues=(FieldIssue(kind=kind, field=field, reason=reason),))


def _translate(contract: ToolContract, error: ValidationError) -> tuple[FieldIssue, ...]:
    """Collapse pydantic errors to one issue per parameter, in contract order."""
    by_field: dict[str, FieldIssue] = {}
    for err in error.errors(include_url=False):
        loc = err.get("loc") or ()
        name = str(loc[0]) if loc else ""
        if name in by_field:
            continue
        param = contract.param(name)
        if err["type"] == "missing":
            by_field[name] = FieldIssue(kind=IssueKind.MISSING_FIELD, field=name, reason="required field is missing")
        else:
            expected = param.expectation() if param is not None else err["msg"]
            by_field[name] = FieldIssue(kind=IssueKind.INVALID_FIELD, field=name, reason=f"expected {expected}")
    order = {name: i for i, name in enumerate(contract.param_names)}
    return tuple(sorted(by_field.values(), key=lambda issue: order.get(issue.field or "", len(order))))


_default: ArgumentValidator | None = None


def get_validator() -> ArgumentValidator:
    """Validator over the built-in catalog (created lazily, shared)."""
    global _default
    if _default is None:
        _default = ArgumentValidator()
    return _default


def validate(tool_name: str, raw_args: object) -> Result[NormalizedArguments, ValidationFailure]:
    """Validate ``raw_args`` for ``tool_name`` against the built-in catalog."""
    return get_validator().validate(tool_name, raw_args)
