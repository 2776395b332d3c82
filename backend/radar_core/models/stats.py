"""Per-strategy win/loss statistics."""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping

from pydantic import BaseModel, Field, model_validator


def _percent(wins: int, total: int) -> int:
    """Rounded win percentage, halves rounded up."""
    if total == 0:
        return 0
    return math.floor(wins / total * 100 + 0.5)


class StrategyStats(BaseModel):
    """Win/loss counters for one strategy."""

    wins: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_wins(self):
        if self.wins > self.total:
            raise ValueError(f"wins ({self.wins}) cannot exceed total ({self.total})")
        return self

    @property
    def success_rate(self) -> int:
        """Win rate as a rounded percentage (0 when nothing resolved yet)."""
        return _percent(self.wins, self.total)

    @property
    def success_rate_label(self) -> str:
        return f"{self.success_rate}%"


class GlobalStats(BaseModel):
    """Totals across all strategies. Derived, never persisted."""

    wins: int = 0
    total: int = 0

    @property
    def success_rate(self) -> int:
        return _percent(self.wins, self.total)


class StatsBook:
    """Mapping of strategy name to StrategyStats.

    Missing strategies read as zero counters and are created on first read.
    Counters only grow through record_outcome().
    """

    def __init__(self, stats: Mapping[str, StrategyStats] | None = None):
        self._stats: dict[str, StrategyStats] = dict(stats or {})

    def get(self, strategy_name: str) -> StrategyStats:
        if strategy_name not in self._stats:
            self._stats[strategy_name] = StrategyStats()
        return self._stats[strategy_name]

    def record_outcome(self, strategy_name: str, win: bool) -> StrategyStats:
        """Count one resolved signal for a strategy."""
        current = self.get(strategy_name)
        updated = StrategyStats(
            wins=current.wins + (1 if win else 0),
            total=current.total + 1,
        )
        self._stats[strategy_name] = updated
        return updated

    def global_stats(self) -> GlobalStats:
        return GlobalStats(
            wins=sum(s.wins for s in self._stats.values()),
            total=sum(s.total for s in self._stats.values()),
        )

    def to_dict(self) -> dict[str, StrategyStats]:
        return dict(self._stats)

    def __contains__(self, strategy_name: object) -> bool:
        return strategy_name in self._stats

    def __iter__(self) -> Iterator[str]:
        return iter(self._stats)

    def __len__(self) -> int:
        return len(self._stats)
