"""Backing reports API: operation table and resilient client."""

from .client import REFUSED_MESSAGE, TIMEOUT_MESSAGE, BackendClient
from .operations import OPERATIONS, BackendRequest, BackingOperation, Placement, build_request

__all__ = [
    "BackendClient",
    "BackingOperation",
    "BackendRequest",
    "Placement",
    "OPERATIONS",
    "build_request",
    "TIMEOUT_MESSAGE",
    "REFUSED_MESSAGE",
]
