"""Error handling for the gateway.

- ErrorCode: stable failure kinds
- ToolError/ToolException: structured failure and its raisable wrapper
- Result/Ok/Err: envelope returned by every dispatched call
- ToolResult: Result[JsonValue, ToolError]
"""

from .errors import ErrorCode, ToolError, ToolException
from .result import Err, Ok, Result
from .types import JsonDict, JsonPrimitive, JsonValue, ToolResult

__all__ = [
    "ErrorCode", "ToolError", "ToolException",
    "Result", "Ok", "Err",
    "JsonDict", "JsonPrimitive", "JsonValue", "ToolResult",
]
