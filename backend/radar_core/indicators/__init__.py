"""Technical indicators (pure math, no I/O)."""

from radar_core.indicators.indicators import (
    NEUTRAL_RSI,
    IndicatorCalculator,
    IndicatorSnapshot,
    average_volume,
    is_volume_spike,
    price_change_percent,
    rsi,
)

__all__ = [
    "NEUTRAL_RSI",
    "IndicatorCalculator",
    "IndicatorSnapshot",
    "average_volume",
    "is_volume_spike",
    "price_change_percent",
    "rsi",
]
