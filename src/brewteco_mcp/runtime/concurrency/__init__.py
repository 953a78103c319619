"""Cancellation primitives shared by the dispatcher and the client."""

from .cancel import CancelToken, checkpoint, guarded

__all__ = ["CancelToken", "checkpoint", "guarded"]
