# hrm_core/utils/timeouts.py
import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from ..errors import RequestTimeoutError
from ..settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_bounded(awaitable: Awaitable[T], operation: str, timeout: Optional[float] = None) -> T:
    """
    Await ``awaitable`` for at most ``timeout`` seconds (default: request_timeout_seconds).

    The bound is best-effort. Cancellation can only land where the operation
    yields to the event loop: while it waits for the unit-of-work lock or for
    a password hash in the threadpool. SQLite calls are synchronous, so a
    store call that has started always runs to completion, and a unit of work
    is either committed or rolled back as a whole, never half-applied. On
    expiry RequestTimeoutError is raised.
    """
    limit = timeout if timeout is not None else settings.request_timeout_seconds
    try:
        return await asyncio.wait_for(awaitable, timeout=limit)
    except asyncio.TimeoutError:
        logger.warning(f"Operation '{operation}' exceeded {limit}s and was cancelled.")
        raise RequestTimeoutError()
