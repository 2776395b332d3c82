"""Lifecycle tick: poll prices for open signals and advance their status."""

import asyncio
import logging
from typing import Awaitable, Callable

from radar_app.clients import BinanceRestClient
from radar_app.storage import JsonStateStore
from radar_core.lifecycle import LifecycleTracker, Transition
from radar_core.state import SignalBook

logger = logging.getLogger(__name__)

# Type alias for status change callback
TransitionCallback = Callable[[Transition], Awaitable[None]]


class SignalTracker:
    """
    Track open signals against current prices.

    This service:
    1. Collects the symbols of all non-terminal signals
    2. Fetches their current prices (bounded by a timeout)
    3. Records prices and applies the lifecycle state machine under the lock
    4. Saves state and notifies callbacks for every status change
    """

    def __init__(
        self,
        client: BinanceRestClient,
        book: SignalBook,
        store: JsonStateStore,
        lifecycle: LifecycleTracker | None = None,
        request_timeout: float = 15.0,
    ):
        self.client = client
        self.book = book
        self.store = store
        self.lifecycle = lifecycle or LifecycleTracker()
        self.request_timeout = request_timeout

        self._callbacks: list[TransitionCallback] = []

    def on_transition(self, callback: TransitionCallback) -> None:
        """Register callback for status changes.

        Note: Duplicate callbacks are ignored.
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def off_transition(self, callback: TransitionCallback) -> None:
        """Unregister callback for status changes."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    async def run_once(self) -> list[Transition]:
        """
        Run one tracking tick.

        Returns:
            Status changes applied on this tick
        """
        async with self.book.lock:
            symbols = sorted({s.symbol for s in self.book.open_signals()})

        if not symbols:
            return []

        try:
            prices = await asyncio.wait_for(
                self.client.get_current_prices(symbols),
                timeout=self.request_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Timed out fetching prices for {len(symbols)} symbols")
            return []
        except Exception as e:
            logger.warning(f"Failed to fetch prices: {e}")
            return []

        async with self.book.lock:
            self.book.update_prices(prices)
            transitions = self.lifecycle.apply_prices(self.book, prices)
            snapshot = self.book.snapshot() if transitions else None

        if snapshot is not None:
            await self.store.save(snapshot)

        # Notify callbacks OUTSIDE lock (network I/O)
        for transition in transitions:
            for callback in self._callbacks:
                try:
                    await callback(transition)
                except Exception as e:
                    logger.error(f"Transition callback error: {e}")

        return transitions
