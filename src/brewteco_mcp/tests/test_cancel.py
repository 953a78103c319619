"""Tests for cancellation tokens."""

import asyncio

import pytest

from brewteco_mcp.runtime.concurrency import CancelToken, checkpoint, guarded


@pytest.mark.asyncio
async def test_run_returns_result_when_not_cancelled() -> None:
    token = CancelToken()
    assert await token.run(asyncio.sleep(0, result="done")) == "done"
    assert not token.cancelled


@pytest.mark.asyncio
async def test_cancel_aborts_pending_work() -> None:
    token = CancelToken()
    started = asyncio.Event()
    finished = False

    async def work() -> None:
        nonlocal finished
        started.set()
        await asyncio.sleep(30)
        finished = True

    task = asyncio.create_task(token.run(work()))
    await started.wait()
    token.cancel("client went away")

    with pytest.raises(asyncio.CancelledError):
        await task
    assert not finished
    assert token.reason == "client went away"


@pytest.mark.asyncio
async def test_already_cancelled_token_never_starts_work() -> None:
    token = CancelToken()
    token.cancel()
    coro = asyncio.sleep(0)
    with pytest.raises(asyncio.CancelledError):
        await token.run(coro)
    coro.close()


@pytest.mark.asyncio
async def test_first_reason_wins() -> None:
    token = CancelToken()
    token.cancel("first")
    token.cancel("second")
    assert token.reason == "first"


@pytest.mark.asyncio
async def test_sleep_wakes_on_cancel() -> None:
    token = CancelToken()
    loop = asyncio.get_running_loop()
    loop.call_later(0.01, token.cancel)
    with pytest.raises(asyncio.CancelledError):
        await asyncio.wait_for(token.sleep(30), timeout=5)


@pytest.mark.asyncio
async def test_checkpoint_and_guarded_without_token() -> None:
    await checkpoint()
    assert await guarded(asyncio.sleep(0, result=3), None) == 3

    token = CancelToken()
    token.cancel()
    with pytest.raises(asyncio.CancelledError):
        await checkpoint(token)
