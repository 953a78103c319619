"""Dispatcher: the transport-independent entry point for tool calls."""

from .dispatcher import TOOL_OPERATIONS, Dispatcher

__all__ = ["Dispatcher", "TOOL_OPERATIONS"]
