"""Parameter specifications for tool contracts.

Each parameter is plain data tagged by ``type``. The validator compiles a
contract's parameters into a strict pydantic model; transports render them as
JSON Schema. Adding a parameter kind means adding one class here, never a
per-tool check.
"""

from __future__ import annotations

import math
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

# Four-digit year, two-digit month, two-digit day joined by hyphens
DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"


class _ParamBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")

    name: Annotated[str, Field(pattern=r"^[a-z][a-z0-9_]*$")]
    description: str = ""
    required: bool = False

    def annotation(self) -> Any:
        """Type used when compiling the contract into a pydantic model."""
        raise NotImplementedError

    def expectation(self) -> str:
        """Short phrase describing an acceptable value, used in error reasons."""
        raise NotImplementedError

    def _schema(self) -> dict[str, Any]:
        raise NotImplementedError

    def json_schema(self) -> dict[str, Any]:
        """JSON Schema fragment for the MCP ``inputSchema`` properties."""
        schema = self._schema()
        if self.description:
            schema["description"] = self.description
        return schema


class StringParam(_ParamBase):
    type: Literal["string"] = "string"
    min_length: Annotated[int, Field(ge=0)] | None = None

    def annotation(self) -> Any:
        if self.min_length:
            return Annotated[str, StringConstraints(min_length=self.min_length)]
        return str

    def expectation(self) -> str:
        return "non-empty string" if self.min_length else "string"

    def _schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "string"}
        if self.min_length:
            schema["minLength"] = self.min_length
        return schema


class DateParam(_ParamBase):
    type: Literal["date"] = "date"

    def annotation(self) -> Any:
        return Annotated[str, StringConstraints(pattern=DATE_PATTERN)]

    def expectation(self) -> str:
        return "date formatted as YYYY-MM-DD"

    def _schema(self) -> dict[str, Any]:
        return {"type": "string", "pattern": DATE_PATTERN}


class NumberParam(_ParamBase):
    type: Literal["number"] = "number"
    minimum: int | float | None = None
    maximum: int | float | None = None

    @model_validator(mode="after")
    def _check_bounds(self) -> NumberParam:
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise ValueError(f"minimum {self.minimum} exceeds maximum {self.maximum}")
        return self

    def annotation(self) -> Any:
        bounds = Field(ge=self.minimum, le=self.maximum)
        # ints stay ints so query strings read "limite=10", not "limite=10.0"
        return Union[
            Annotated[int, bounds],
            Annotated[float, bounds, Field(allow_inf_nan=False)],
        ]

    def expectation(self) -> str:
        lo, hi = _fmt(self.minimum), _fmt(self.maximum)
        if lo is not None and hi is not None:
            return f"number between {lo} and {hi}"
        if lo is not None:
            return f"number >= {lo}"
        if hi is not None:
            return f"number <= {hi}"
        return "number"

    def _schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "number"}
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        return schema


class EnumParam(_ParamBase):
    type: Literal["enum"] = "enum"
    values: Annotated[tuple[str, ...], Field(min_length=1)]

    def annotation(self) -> Any:
        return Literal[self.values]  # type: ignore[valid-type]

    def expectation(self) -> str:
        return f"one of: {', '.join(self.values)}"

    def _schema(self) -> dict[str, Any]:
        return {"type": "string", "enum": list(self.values)}


class StringArrayParam(_ParamBase):
    type: Literal["string_array"] = "string_array"

    def annotation(self) -> Any:
        return list[str]

    def expectation(self) -> str:
        return "array of strings"

    def _schema(self) -> dict[str, Any]:
        return {"type": "array", "items": {"type": "string"}}


Param = Annotated[
    Union[StringParam, DateParam, NumberParam, EnumParam, StringArrayParam],
    Field(discriminator="type"),
]


def _fmt(v: float | None) -> str | None:
    if v is None:
        return None
    return str(int(v)) if math.isfinite(v) and v == int(v) else str(v)
