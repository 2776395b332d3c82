"""Shared in-memory state for the generation and tracking schedules.

A single SignalBook holds the signal history, the status of every signal,
per-strategy stats and the latest observed prices. Both schedules run on
one event loop; every read-modify-write of the book must happen inside
``async with book.lock``.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal

from pydantic import BaseModel, Field

from radar_core.models import Signal, SignalStatus, StatsBook, StrategyStats


class PersistedState(BaseModel):
    """Durable snapshot of the book (prices are not persisted)."""

    signals: list[Signal] = Field(default_factory=list)
    statuses: dict[str, SignalStatus] = Field(default_factory=dict)
    stats: dict[str, StrategyStats] = Field(default_factory=dict)
    # Increases with every snapshot; lets the store drop out-of-order saves
    revision: int = 0


class SignalBook:
    """Signal history, statuses, stats and prices behind one lock."""

    def __init__(self, state: PersistedState | None = None):
        state = state or PersistedState()
        self.signals: list[Signal] = list(state.signals)  # Most recent first
        self.statuses: dict[str, SignalStatus] = dict(state.statuses)
        self.stats = StatsBook(state.stats)
        self.prices: dict[str, Decimal] = {}
        self.revision = state.revision
        self.lock = asyncio.Lock()

    def status_of(self, signal_id: str) -> SignalStatus:
        return self.statuses.get(signal_id, SignalStatus.ACTIVE)

    def add_signal(self, signal: Signal) -> None:
        """Prepend a new signal to the history with status active."""
        self.signals.insert(0, signal)
        self.statuses[signal.id] = SignalStatus.ACTIVE

    def set_status(self, signal_id: str, status: SignalStatus) -> None:
        self.statuses[signal_id] = status

    def open_signals(self) -> list[Signal]:
        """Signals that have not reached a terminal status."""
        return [s for s in self.signals if not self.status_of(s.id).is_terminal]

    def signals_for(self, base: str) -> list[Signal]:
        return [s for s in self.signals if s.pair.base == base]

    def has_open_signal(self, base: str) -> bool:
        """Check for an active or partially resolved signal on a base asset."""
        return any(self.status_of(s.id).is_open for s in self.signals_for(base))

    def in_cooldown(self, base: str, now_ms: int, cooldown_ms: int) -> bool:
        """Check if any signal for the base asset was created within the window."""
        for signal in self.signals_for(base):
            created_ms = signal.created_ms
            if created_ms is not None and now_ms - created_ms < cooldown_ms:
                return True
        return False

    def update_prices(self, prices: dict[str, Decimal]) -> None:
        self.prices.update(prices)

    def snapshot(self) -> PersistedState:
        """Copy of the durable part of the book, tagged with a new revision."""
        self.revision += 1
        return PersistedState(
            signals=list(self.signals),
            statuses=dict(self.statuses),
            stats=self.stats.to_dict(),
            revision=self.revision,
        )
