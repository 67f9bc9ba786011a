"""Cancellation token support for retrieve calls."""
import asyncio
import contextlib
import logging
from typing import Any, Awaitable, Coroutine, TypeVar

from .errors import RetrievalCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_cancellable(coro: Coroutine[object, object, T], cancel_event: asyncio.Event) -> T:
    """Run coro until it finishes or cancel_event is set.

    Args:
        coro: Work to run.
        cancel_event: Caller's cancellation signal.

    Returns:
        Result of coro.

    Raises:
        RetrievalCancelled: cancel_event was set before coro finished.
    """
    if cancel_event.is_set():
        coro.close()
        raise RetrievalCancelled("Cancelled before start")

    work = asyncio.ensure_future(coro)
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        raise
    finally:
        waiter.cancel()

    if work.done():
        return work.result()

    work.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await work
    logger.info("Retrieval cancelled by caller")
    raise RetrievalCancelled("Cancelled by caller")


async def gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """Like asyncio.gather, but the first failure cancels the other branches.

    Cancelled siblings are awaited before the failure propagates, so no
    external call outlives the caller.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
