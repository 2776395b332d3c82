"""Technical indicators for signal generation.

All functions are pure: they take closes/volumes ordered oldest to newest
and return plain floats, so they can run concurrently for different
instruments without shared state.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

import numpy as np

# Returned when there is not enough history to smooth
NEUTRAL_RSI = 50.0


def _to_array(values: Sequence[Decimal | float]) -> np.ndarray:
    return np.array([float(v) for v in values], dtype=np.float64)


def rsi(closes: Sequence[Decimal | float], period: int = 14) -> float:
    """Relative Strength Index with Wilder's smoothing.

    Averages are seeded from the first `period` price changes and then
    smoothed over the remaining ones. Returns 50 when there are no more
    closes than the period, and 100 when the smoothed loss is zero.
    """
    if len(closes) <= period:
        return NEUTRAL_RSI

    deltas = np.diff(_to_array(closes))
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = gains[:period].sum() / period
    avg_loss = losses[:period].sum() / period

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return float(100.0 - 100.0 / (1.0 + rs))


def average_volume(volumes: Sequence[Decimal | float]) -> float:
    """Mean volume of all bars except the most recent one."""
    if len(volumes) < 2:
        return 0.0
    return float(np.mean(_to_array(volumes[:-1])))


def is_volume_spike(
    volumes: Sequence[Decimal | float], multiplier: float = 2.0
) -> bool:
    """Check whether the latest volume exceeds `multiplier` x the average."""
    if len(volumes) < 2:
        return False
    return float(volumes[-1]) > average_volume(volumes) * multiplier


def price_change_percent(closes: Sequence[Decimal | float]) -> float:
    """Percent change between the two most recent closes."""
    if len(closes) < 2:
        return 0.0
    latest = float(closes[-1])
    previous = float(closes[-2])
    if previous == 0:
        return 0.0
    return (latest - previous) / previous * 100


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Indicator readings for the latest bar of a series."""

    close: Decimal
    rsi: float
    price_change_pct: float
    current_volume: float
    average_volume: float
    volume_spike: bool


class IndicatorCalculator:
    """Compute the indicator set used by the strategy rules."""

    def __init__(self, rsi_period: int = 14, volume_spike_mult: float = 2.0):
        self.rsi_period = rsi_period
        self.volume_spike_mult = volume_spike_mult

    def calculate_latest(
        self,
        closes: Sequence[Decimal],
        volumes: Sequence[Decimal],
    ) -> IndicatorSnapshot | None:
        """
        Calculate indicator values for the latest bar.

        Args:
            closes: Close prices, oldest first
            volumes: Volumes matching closes

        Returns:
            IndicatorSnapshot, or None if fewer than 2 bars are given
        """
        if len(closes) < 2 or len(closes) != len(volumes):
            return None

        return IndicatorSnapshot(
            close=Decimal(str(closes[-1])),
            rsi=rsi(closes, self.rsi_period),
            price_change_pct=price_change_percent(closes),
            current_volume=float(volumes[-1]),
            average_volume=average_volume(volumes),
            volume_spike=is_volume_spike(volumes, self.volume_spike_mult),
        )
