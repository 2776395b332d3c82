"""Signal data models."""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Direction(str, Enum):
    """Trade direction."""

    BUY = "buy"
    SELL = "sell"


class SignalStatus(str, Enum):
    """Signal lifecycle status."""

    ACTIVE = "active"
    TARGET1_HIT = "target1Hit"
    TARGET2_HIT = "target2Hit"
    TARGET3_HIT = "target3Hit"
    STOP_HIT = "stopHit"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_open(self) -> bool:
        return self in OPEN_STATUSES


TERMINAL_STATUSES = frozenset({SignalStatus.TARGET3_HIT, SignalStatus.STOP_HIT})
OPEN_STATUSES = frozenset(
    {SignalStatus.ACTIVE, SignalStatus.TARGET1_HIT, SignalStatus.TARGET2_HIT}
)


def quantize_price(price: Decimal) -> Decimal:
    """Round a price to a precision chosen by its magnitude.

    - below 0.01: 6 decimal places
    - below 1: 4 decimal places
    - otherwise: 2 decimal places
    """
    if price < Decimal("0.01"):
        exp = Decimal("0.000001")
    elif price < Decimal("1"):
        exp = Decimal("0.0001")
    else:
        exp = Decimal("0.01")
    return price.quantize(exp, rounding=ROUND_HALF_UP)


def format_price(price: Decimal | float | str) -> str:
    """Format a price for display, e.g. 0.456 -> "0.4560", 123.4 -> "123.40"."""
    return format(quantize_price(Decimal(str(price))), "f")


def make_signal_id(symbol: str, timestamp_ms: int) -> str:
    """Build a signal ID embedding the symbol and creation time."""
    return f"{symbol}-{timestamp_ms}"


def signal_timestamp_ms(signal_id: str) -> int | None:
    """Extract the creation timestamp (epoch millis) from a signal ID.

    Returns None when the ID does not carry a parseable timestamp.
    """
    _, sep, tail = signal_id.rpartition("-")
    if not sep or not tail.isdigit():
        return None
    return int(tail)


class TradingPair(BaseModel):
    """Base/quote instrument identifiers."""

    model_config = ConfigDict(frozen=True)

    base: str
    quote: str

    @property
    def symbol(self) -> str:
        return f"{self.base}{self.quote}"


class Signal(BaseModel):
    """A generated trade idea. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str
    strategy_name: str
    success_rate: str
    created_at: str  # Local time for display; logic uses the timestamp in id
    pair: TradingPair
    direction: Direction
    entry_price: Decimal
    stop_loss: Decimal
    target1: Decimal
    target2: Decimal
    target3: Decimal
    rationale: str

    @property
    def symbol(self) -> str:
        return self.pair.symbol

    @property
    def created_ms(self) -> int | None:
        return signal_timestamp_ms(self.id)
