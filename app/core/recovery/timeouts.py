import asyncio
from typing import Awaitable, Optional, TypeVar

from .errors import RequestTimeoutError

T = TypeVar("T")


async def run_with_timeout(
    awaitable: Awaitable[T],
    timeout_seconds: float,
    operation: Optional[str] = None,
) -> T:
    """Await ``awaitable`` for at most ``timeout_seconds``.

    On timeout the pending work is cancelled and ``RequestTimeoutError`` is
    raised in its place.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError as exc:
        raise RequestTimeoutError(timeout_seconds, operation) from exc
