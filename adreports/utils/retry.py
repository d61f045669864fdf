"""Retry helpers without external dependencies."""

from __future__ import annotations

import asyncio
import functools
import random
from collections.abc import Awaitable, Callable

RETRY_EXCEPTIONS = (OSError, asyncio.TimeoutError)


def retry_async(
    func: Callable[..., Awaitable],
    *,
    attempts: int = 3,
    delay: float = 1.0,
    exceptions: tuple[type[BaseException], ...] = RETRY_EXCEPTIONS,
):
    """Retry ``func`` with jittered exponential backoff.

    An exception carrying a ``retry_after`` attribute sets the wait instead.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        wait = delay
        for attempt in range(attempts):
            try:
                return await func(*args, **kwargs)
            except exceptions as exc:
                if attempt == attempts - 1:
                    raise
                retry_after = getattr(exc, "retry_after", None)
                await asyncio.sleep(retry_after if retry_after is not None else wait + random.random() * wait)
                wait *= 2
    return wrapper
