"""HTTP utilities tying outbound work to the lifetime of the inbound request."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class ClientDisconnectedError(Exception):
    """Raised when the user agent goes away before the work finished."""


async def run_until_disconnected(
    awaitable: Awaitable[T],
    is_disconnected: Callable[[], Awaitable[bool]],
    *,
    poll_interval: float = 0.25,
) -> T:
    """
    Await ``awaitable`` while watching the inbound connection.

    The work is cancelled as soon as ``is_disconnected`` reports true.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await is_disconnected():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                raise ClientDisconnectedError("Client disconnected before the response was ready")
    finally:
        if not task.done():
            task.cancel()


__all__ = ["ClientDisconnectedError", "run_until_disconnected"]
