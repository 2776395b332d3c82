"""Periodic task runner for the generation and tracking schedules."""

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

TickFunction = Callable[[], Awaitable[object]]


async def run_periodic(
    name: str,
    interval: float,
    tick: TickFunction,
    initial_delay: float = 0.0,
) -> None:
    """
    Run `tick` every `interval` seconds until cancelled.

    Ticks never overlap: if a tick runs longer than the interval the next
    one starts right after it. An exception in one tick is logged and the
    schedule continues.

    Args:
        name: Schedule name for logging
        interval: Seconds between tick starts
        tick: Coroutine function to run
        initial_delay: Seconds to wait before the first tick
    """
    loop = asyncio.get_running_loop()
    try:
        await asyncio.sleep(initial_delay)
        while True:
            started = loop.time()
            try:
                await tick()
            except Exception as e:
                logger.error(f"{name} tick failed: {e}", exc_info=True)
            elapsed = loop.time() - started
            await asyncio.sleep(max(0.0, interval - elapsed))
    except asyncio.CancelledError:
        logger.info(f"{name} schedule stopped")
        raise
