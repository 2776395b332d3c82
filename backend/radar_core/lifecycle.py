"""Signal lifecycle state machine.

Buy signals advance through target/stop statuses as prices arrive:

    price <= stop_loss                        -> stopHit     (terminal)
    price >= target3                          -> target3Hit  (terminal)
    price >= target2, status != target2Hit    -> target2Hit
    price >= target1, status == active        -> target1Hit

Checks run in that order, so a stop always wins over a target on the same
tick. Stats are counted on the target1Hit (win) and stopHit (loss) edges
only; a signal that jumps straight to target2Hit or target3Hit is not
counted.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping

from radar_core.models import Direction, Signal, SignalStatus
from radar_core.state import SignalBook

logger = logging.getLogger(__name__)

# Status edges that update strategy stats, mapped to "is a win"
_STATS_EDGES = {
    SignalStatus.TARGET1_HIT: True,
    SignalStatus.STOP_HIT: False,
}


@dataclass(frozen=True)
class Transition:
    """A status change observed on one tick."""

    signal: Signal
    previous: SignalStatus
    current: SignalStatus
    price: Decimal

    @property
    def counts_as_win(self) -> bool | None:
        """True/False for stats-relevant edges, None otherwise."""
        return _STATS_EDGES.get(self.current)


def next_status(
    signal: Signal, status: SignalStatus, price: Decimal
) -> SignalStatus | None:
    """
    Evaluate the state machine for one price observation.

    Returns:
        The new status, or None if the status does not change
    """
    if status.is_terminal:
        return None

    # Sell-side signals have no resolution rules
    if signal.direction != Direction.BUY:
        return None

    if price <= signal.stop_loss:
        return SignalStatus.STOP_HIT
    if price >= signal.target3:
        return SignalStatus.TARGET3_HIT
    if price >= signal.target2 and status != SignalStatus.TARGET2_HIT:
        return SignalStatus.TARGET2_HIT
    if price >= signal.target1 and status == SignalStatus.ACTIVE:
        return SignalStatus.TARGET1_HIT
    return None


class LifecycleTracker:
    """Advance open signals in a SignalBook against current prices."""

    def apply_prices(
        self, book: SignalBook, prices: Mapping[str, Decimal]
    ) -> list[Transition]:
        """
        Update statuses and stats for every open signal with a known price.

        Caller must hold book.lock. Signals without a positive price are
        skipped.

        Args:
            book: Shared state to update
            prices: Latest prices by symbol

        Returns:
            Transitions applied on this tick
        """
        transitions: list[Transition] = []

        for signal in book.open_signals():
            price = prices.get(signal.symbol)
            # Missing or zero quotes (e.g. halted symbols) are not prices
            if price is None or price <= 0:
                continue

            status = book.status_of(signal.id)
            new_status = next_status(signal, status, price)
            if new_status is None:
                continue

            book.set_status(signal.id, new_status)
            transition = Transition(
                signal=signal, previous=status, current=new_status, price=price
            )

            win = transition.counts_as_win
            if win is not None:
                stats = book.stats.record_outcome(signal.strategy_name, win)
                logger.debug(
                    f"Stats for {signal.strategy_name}: {stats.wins}/{stats.total}"
                )

            logger.info(
                f"Signal {signal.id} {status.value} -> {new_status.value} @ {price}"
            )
            transitions.append(transition)

        return transitions
