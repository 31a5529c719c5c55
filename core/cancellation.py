from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable
from typing import TypeVar


T = TypeVar("T")


class ChatCancelled(Exception):
    """Raised inside the pipeline when the caller's cancel signal fires."""


async def run_cancellable(awaitable: Awaitable[T], cancel_event: asyncio.Event | None) -> T:
    """
    Await `awaitable`, abandoning it as soon as `cancel_event` is set.

    The pending work is cancelled and ChatCancelled raised in its place, so a
    blocked network read or tool call stops immediately.
    """
    if cancel_event is None:
        return await awaitable
    if cancel_event.is_set():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise ChatCancelled()

    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not work.done():
            work.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await work

    if work.cancelled():
        raise ChatCancelled()
    return work.result()
