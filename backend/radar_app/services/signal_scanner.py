"""Generation tick: scan liquid instruments and emit new signals.

Bar fetching and indicator work run concurrently per instrument (bounded
by a semaphore and a per-call timeout). Adding signals to the book runs
under the book lock; saving and callbacks run after it is released.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from radar_app.clients import BinanceRestClient
from radar_app.storage import JsonStateStore
from radar_core.models import Instrument, Signal
from radar_core.signal_generator import SignalGenerator, StrategyMatch
from radar_core.state import SignalBook

logger = logging.getLogger(__name__)

# Type alias for new signal callback
SignalCallback = Callable[[Signal], Awaitable[None]]


class SignalScanner:
    """Run the signal generator over the ranked candidate list."""

    def __init__(
        self,
        client: BinanceRestClient,
        book: SignalBook,
        store: JsonStateStore,
        generator: SignalGenerator | None = None,
        interval: str = "1h",
        bar_limit: int = 24,
        request_timeout: float = 15.0,
        max_concurrent: int = 10,
    ):
        self.client = client
        self.book = book
        self.store = store
        self.generator = generator or SignalGenerator()
        self.interval = interval
        self.bar_limit = bar_limit
        self.request_timeout = request_timeout
        self.max_concurrent = max_concurrent

        self._callbacks: list[SignalCallback] = []

    def on_signal(self, callback: SignalCallback) -> None:
        """Register callback for new signals.

        Note: Duplicate callbacks are ignored.
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def off_signal(self, callback: SignalCallback) -> None:
        """Unregister callback for new signals."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    async def _analyze(
        self, instrument: Instrument, semaphore: asyncio.Semaphore
    ) -> StrategyMatch | None:
        """Fetch bars and apply the rules for one instrument.

        Any failure skips the instrument for this tick.
        """
        async with semaphore:
            try:
                bars = await asyncio.wait_for(
                    self.client.get_recent_bars(
                        instrument.symbol, self.interval, self.bar_limit
                    ),
                    timeout=self.request_timeout,
                )
                return self.generator.analyze(instrument, bars)
            except asyncio.TimeoutError:
                logger.warning(f"Timed out fetching bars for {instrument.symbol}")
                return None
            except Exception as e:
                logger.warning(f"Error analyzing {instrument.symbol}: {e}")
                return None

    async def run_once(self) -> list[Signal]:
        """
        Run one generation tick.

        Returns:
            Signals emitted on this tick
        """
        try:
            instruments = await asyncio.wait_for(
                self.client.list_liquid_instruments(),
                timeout=self.request_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Timed out fetching instrument list")
            return []
        except Exception as e:
            logger.warning(f"Failed to fetch instrument list: {e}")
            return []

        semaphore = asyncio.Semaphore(self.max_concurrent)
        matches = await asyncio.gather(
            *[self._analyze(instrument, semaphore) for instrument in instruments]
        )

        emitted: list[Signal] = []
        async with self.book.lock:
            for match in matches:
                if match is None:
                    continue
                signal = self.generator.emit(self.book, match)
                if signal is not None:
                    emitted.append(signal)
            snapshot = self.book.snapshot() if emitted else None

        logger.info(
            f"Scanned {len(instruments)} instruments: "
            f"{sum(m is not None for m in matches)} matches, {len(emitted)} new signals"
        )

        if snapshot is not None:
            await self.store.save(snapshot)

        # Notify callbacks OUTSIDE lock (network I/O)
        for signal in emitted:
            for callback in self._callbacks:
                try:
                    await callback(signal)
                except Exception as e:
                    logger.error(f"Signal callback error: {e}")

        return emitted
