"""Strategy configuration models."""

from __future__ import annotations

from decimal import Decimal
from pydantic import BaseModel


class StrategyConfig(BaseModel):
    """Signal generation parameters."""

    # Indicators
    rsi_period: int = 14
    volume_spike_mult: float = 2.0

    # Rule thresholds
    rsi_oversold: float = 35.0
    breakout_rsi_ceiling: float = 65.0
    breakout_min_change_pct: float = 2.0
    momentum_min_change_pct: float = 4.0
    momentum_volume_mult: float = 2.0

    # Price levels as multiples of the entry price
    stop_loss_mult: Decimal = Decimal("0.985")  # 1.5% stop loss
    target1_mult: Decimal = Decimal("1.012")  # 1.2% target
    target2_mult: Decimal = Decimal("1.02")  # 2% target
    target3_mult: Decimal = Decimal("1.035")  # 3.5% target

    # No new signal for a base asset within this window of its last signal
    cooldown_minutes: int = 60

    @property
    def cooldown_ms(self) -> int:
        return self.cooldown_minutes * 60 * 1000
