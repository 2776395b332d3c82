"""Data models."""

from radar_core.models.bar import Bar, Instrument
from radar_core.models.config import StrategyConfig
from radar_core.models.signal import (
    OPEN_STATUSES,
    TERMINAL_STATUSES,
    Direction,
    Signal,
    SignalStatus,
    TradingPair,
    format_price,
    make_signal_id,
    quantize_price,
    signal_timestamp_ms,
)
from radar_core.models.stats import GlobalStats, StatsBook, StrategyStats

__all__ = [
    "Bar",
    "Instrument",
    "StrategyConfig",
    "OPEN_STATUSES",
    "TERMINAL_STATUSES",
    "Direction",
    "Signal",
    "SignalStatus",
    "TradingPair",
    "format_price",
    "make_signal_id",
    "quantize_price",
    "signal_timestamp_ms",
    "GlobalStats",
    "StatsBook",
    "StrategyStats",
]
