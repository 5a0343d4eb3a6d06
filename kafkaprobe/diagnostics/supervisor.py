"""Deadline supervision for connection attempts."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from kafkaprobe.core.logging import logger

T = TypeVar("T")


class ConnectionTimeoutError(TimeoutError):
    """Raised when a supervised action misses its deadline."""

    def __init__(self, timeout_s: float) -> None:
        super().__init__(f"Connection timeout after {timeout_s:g}s")
        self.timeout_s = timeout_s


def _discard_late_outcome(task: asyncio.Future) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Discarding late failure from timed-out action: %s", exc)


async def attempt_with_timeout(action: Callable[[], Awaitable[T]], timeout_s: float) -> T:
    """Race ``action`` against a timer and return the first settled outcome.

    The action's result is returned and its exception propagates unchanged.
    When the timer wins the action task is cancelled and any late outcome is
    discarded.

    Args:
        action: No-argument callable returning an awaitable.
        timeout_s: Deadline in seconds.

    Returns:
        Whatever the action returned.

    Raises:
        ConnectionTimeoutError: If the deadline passes first.
    """

    if timeout_s <= 0:
        raise ValueError("timeout_s must be positive")

    task = asyncio.ensure_future(action())
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout_s)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    task.cancel()
    task.add_done_callback(_discard_late_outcome)
    raise ConnectionTimeoutError(timeout_s)
