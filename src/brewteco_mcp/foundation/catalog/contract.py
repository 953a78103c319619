"""Tool contracts: identifier, documentation and typed parameters."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .params import Param


class ConditionalRequirement(BaseModel):
    """Cross-field rule: when ``field`` equals ``equals``, ``then_required`` must be present.

    Example:
        >>> ConditionalRequirement(field="periodo", equals="custom",
        ...                        then_required=("data_inicio", "data_fim"))
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    field: str
    equals: str
    then_required: Annotated[tuple[str, ...], Field(min_length=1)]

    def applies(self, values: dict[str, Any]) -> bool:
        return values.get(self.field) == self.equals

    def describe(self) -> str:
        return f"required when {self.field}={self.equals}"


class ToolContract(BaseModel):
    """Immutable description of one tool offered to callers.

    Attributes:
        name: Unique tool identifier (snake_case)
        description: Documentation shown to callers and LLMs
        category: Grouping for listings (vendas, produtos, equipe, clientes)
        params: Ordered parameter specifications
        requires: Cross-field rules the per-parameter flags cannot express
    """

    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")

    name: Annotated[str, Field(pattern=r"^[a-z][a-z0-9_]*$")]
    description: Annotated[str, Field(min_length=10)]
    category: str = "general"
    params: tuple[Param, ...] = ()
    requires: tuple[ConditionalRequirement, ...] = ()

    @model_validator(mode="after")
    def _check_params(self) -> ToolContract:
        names = [p.name for p in self.params]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate parameter names in '{self.name}'")
        known = set(names)
        for rule in self.requires:
            unknown = ({rule.field} | set(rule.then_required)) - known
            if unknown:
                raise ValueError(f"Rule on '{self.name}' references unknown params: {sorted(unknown)}")
        return self

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.params)

    @property
    def required_names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.params if p.required)

    def param(self, name: str) -> Param | None:
        return next((p for p in self.params if p.name == name), None)

    def input_schema(self) -> dict[str, Any]:
        """JSON Schema object describing the arguments (MCP ``inputSchema``)."""
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.json_schema() for p in self.params},
        }
        if self.required_names:
            schema["required"] = list(self.required_names)
        return schema

    def describe(self) -> dict[str, Any]:
        """Catalog entry as served by ``tools/list``."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }
