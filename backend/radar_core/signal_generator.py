"""Signal generator applying ordered technical rules per instrument.

This module is pure business logic with no I/O dependencies. The service
layer fetches bars, calls analyze() for each instrument (safe to run
concurrently) and then calls emit() while holding the SignalBook lock.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Sequence

from radar_core.indicators import IndicatorCalculator, IndicatorSnapshot
from radar_core.models import (
    Bar,
    Direction,
    Instrument,
    Signal,
    StrategyConfig,
    TradingPair,
    make_signal_id,
    quantize_price,
)
from radar_core.state import SignalBook

logger = logging.getLogger(__name__)

RSI_OVERSOLD = "RSI Oversold"
VOLUME_BREAKOUT = "Volume Breakout"
MOMENTUM_SURGE = "Momentum Surge"


@dataclass(frozen=True)
class StrategyMatch:
    """A rule that fired for an instrument on this tick."""

    instrument: Instrument
    strategy_name: str
    direction: Direction
    entry_price: Decimal
    rationale: str
    indicators: IndicatorSnapshot


class SignalGenerator:
    """
    Generate buy signals from RSI, volume and momentum readings.

    Rules, evaluated in priority order (first match wins):
    1. RSI < 35 → RSI Oversold
    2. Volume spike + RSI < 65 + price change > 2% → Volume Breakout
    3. Price change > 4% + volume > 2x average → Momentum Surge

    Levels from entry E: SL = E×0.985, T1 = E×1.012, T2 = E×1.02, T3 = E×1.035

    Deduplication:
    - No new signal while the base asset has an open signal
    - No new signal within the cooldown of the base asset's last signal
    """

    def __init__(self, config: StrategyConfig | None = None):
        self.config = config or StrategyConfig()
        self.indicator_calc = IndicatorCalculator(
            rsi_period=self.config.rsi_period,
            volume_spike_mult=self.config.volume_spike_mult,
        )

    def match_strategy(
        self, indicators: IndicatorSnapshot
    ) -> tuple[str, Direction, str] | None:
        """
        Apply the rules to indicator readings.

        Returns:
            Tuple of (strategy_name, direction, rationale), or None
        """
        cfg = self.config
        rsi = indicators.rsi
        change = indicators.price_change_pct

        if rsi < cfg.rsi_oversold:
            return (
                RSI_OVERSOLD,
                Direction.BUY,
                f"RSI reached {rsi:.2f}, a strongly oversold reading "
                "with a potential rebound.",
            )

        if (
            indicators.volume_spike
            and rsi < cfg.breakout_rsi_ceiling
            and change > cfg.breakout_min_change_pct
        ):
            return (
                VOLUME_BREAKOUT,
                Direction.BUY,
                f"Trading volume jumped above {cfg.volume_spike_mult:g}x its average "
                f"with a {change:.2f}% rise.",
            )

        if (
            change > cfg.momentum_min_change_pct
            and indicators.current_volume
            > indicators.average_volume * cfg.momentum_volume_mult
        ):
            return (
                MOMENTUM_SURGE,
                Direction.BUY,
                f"Strong upward momentum: price rose {change:.2f}% on high liquidity.",
            )

        return None

    def analyze(
        self, instrument: Instrument, bars: Sequence[Bar]
    ) -> StrategyMatch | None:
        """
        Compute indicators for an instrument and apply the rules.

        Args:
            instrument: Candidate instrument
            bars: Recent bars, oldest first

        Returns:
            StrategyMatch if a rule fired, None otherwise
        """
        indicators = self.indicator_calc.calculate_latest(
            [b.close for b in bars], [b.volume for b in bars]
        )
        if indicators is None:
            return None

        matched = self.match_strategy(indicators)
        if matched is None:
            return None

        strategy_name, direction, rationale = matched
        logger.debug(
            f"{instrument.symbol} matched {strategy_name}: "
            f"RSI={indicators.rsi:.2f} change={indicators.price_change_pct:.2f}%"
        )
        return StrategyMatch(
            instrument=instrument,
            strategy_name=strategy_name,
            direction=direction,
            entry_price=indicators.close,
            rationale=rationale,
            indicators=indicators,
        )

    def calculate_levels(
        self, entry_price: Decimal
    ) -> tuple[Decimal, Decimal, Decimal, Decimal]:
        """
        Calculate stop loss and the three targets for a buy entry.

        Returns:
            Tuple of (stop_loss, target1, target2, target3), quantized
        """
        cfg = self.config
        return (
            quantize_price(entry_price * cfg.stop_loss_mult),
            quantize_price(entry_price * cfg.target1_mult),
            quantize_price(entry_price * cfg.target2_mult),
            quantize_price(entry_price * cfg.target3_mult),
        )

    def can_emit(self, book: SignalBook, base: str, now_ms: int) -> bool:
        """Check the dedup gate for a base asset."""
        if book.has_open_signal(base):
            return False
        if book.in_cooldown(base, now_ms, self.config.cooldown_ms):
            return False
        return True

    def emit(
        self,
        book: SignalBook,
        match: StrategyMatch,
        now: datetime | None = None,
    ) -> Signal | None:
        """
        Turn a match into a Signal and add it to the book.

        Caller must hold book.lock.

        Returns:
            The new Signal, or None if the dedup gate blocked it
        """
        now = now or datetime.now().astimezone()
        now_ms = int(now.timestamp() * 1000)
        instrument = match.instrument

        if not self.can_emit(book, instrument.base, now_ms):
            logger.debug(f"{instrument.symbol} {match.strategy_name} skipped by dedup gate")
            return None

        stop_loss, target1, target2, target3 = self.calculate_levels(match.entry_price)
        stats = book.stats.get(match.strategy_name)

        signal = Signal(
            id=make_signal_id(instrument.symbol, now_ms),
            strategy_name=match.strategy_name,
            success_rate=stats.success_rate_label,
            created_at=now.astimezone().strftime("%H:%M:%S"),
            pair=TradingPair(base=instrument.base, quote=instrument.quote),
            direction=match.direction,
            entry_price=quantize_price(match.entry_price),
            stop_loss=stop_loss,
            target1=target1,
            target2=target2,
            target3=target3,
            rationale=match.rationale,
        )
        book.add_signal(signal)

        logger.info(
            f"{match.direction.value.upper()} signal: {signal.symbol} @ {signal.entry_price} "
            f"({signal.strategy_name}) SL={stop_loss} T1={target1} T2={target2} T3={target3}"
        )
        return signal
