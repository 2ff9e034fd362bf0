"""
Message Poller

Server-Sent Events feed for an open conversation. Every tick re-fetches the
whole message list (no cursor, no backoff) until the client goes away.
"""

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, List, Optional

from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


def format_sse(event: str, data: Any) -> bytes:
    return f"event: {event}\ndata: {json.dumps(data, default=str)}\n\n".encode("utf-8")


async def poll_messages(
    load: Callable[[], List[dict]],
    is_disconnected: Callable[[], Awaitable[bool]],
    interval: float,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    max_ticks: Optional[int] = None,
) -> AsyncIterator[bytes]:
    """
    Yield a `messages` event with the full list every `interval` seconds.

    `load` is blocking (it hits the database) and runs in the threadpool.
    A failed load yields an `error` event; the next tick tries again.
    """
    ticks = 0
    while max_ticks is None or ticks < max_ticks:
        if await is_disconnected():
            logger.debug("Message stream client disconnected")
            return
        try:
            snapshot = await run_in_threadpool(load)
        except Exception as e:
            logger.warning(f"Message poll failed: {e}")
            yield format_sse("error", {"detail": "Could not load messages"})
        else:
            yield format_sse("messages", snapshot)
        ticks += 1
        await sleep(interval)
