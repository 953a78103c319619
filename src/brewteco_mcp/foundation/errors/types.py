"""Type aliases shared by the envelope, the catalog and the backend client."""

from __future__ import annotations

from typing import Any, TypeAlias, Union

from .errors import ToolError
from .result import Result

# JSON type aliases - Any in the recursive slots keeps pydantic from resolving them
JsonPrimitive = Union[str, int, float, bool, None]
JsonValue = Union[JsonPrimitive, list[Any], dict[str, Any]]
JsonDict = dict[str, Any]

# Envelope of one logical call: Ok(payload) or Err(ToolError)
ToolResult: TypeAlias = Result[JsonValue, ToolError]
