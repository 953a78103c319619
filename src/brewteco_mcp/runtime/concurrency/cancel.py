"""Cooperative cancellation for in-flight calls.

A ``CancelToken`` travels from the transport adapter through the dispatcher
into the client. Cancelling it aborts whatever the call is awaiting (an HTTP
attempt or the pause between attempts) and raises ``asyncio.CancelledError``
in the calling coroutine.

Example:
    >>> token = CancelToken()
    >>> task = asyncio.create_task(dispatcher.dispatch("obter_categorias", {}, cancel=token))
    >>> token.cancel()   # task raises CancelledError
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class CancelToken:
    """One-shot cancellation signal shared by a caller and a callee."""

    __slots__ = ("_event", "_reason")

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason = ""

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "cancelled by caller") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise asyncio.CancelledError(self._reason)

    async def wait(self) -> None:
        await self._event.wait()

    async def run(self, aw: Awaitable[T]) -> T:
        """Await ``aw`` unless the token fires first.

        Raises:
            asyncio.CancelledError: The token was cancelled before ``aw`` finished;
                ``aw`` itself is cancelled.
        """
        self.raise_if_cancelled()
        work: asyncio.Future[T] = asyncio.ensure_future(aw)
        watcher = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            watcher.cancel()
        if work.done():
            return work.result()
        work.cancel()
        try:
            await work
        except asyncio.CancelledError:
            pass
        raise asyncio.CancelledError(self._reason)

    async def sleep(self, delay: float) -> None:
        """Sleep for ``delay`` seconds, waking early (and raising) on cancellation."""
        await self.run(asyncio.sleep(delay))

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.cancelled})"


async def checkpoint(token: CancelToken | None = None) -> None:
    """Cooperative cancellation checkpoint.

    Yields control to the event loop so pending task cancellations are
    processed, then honours ``token`` if one is given.
    """
    await asyncio.sleep(0)
    if token is not None:
        token.raise_if_cancelled()


async def guarded(aw: Awaitable[T], token: CancelToken | None) -> T:
    """Await ``aw`` under ``token`` when there is one."""
    if token is None:
        return await aw
    return await token.run(aw)
