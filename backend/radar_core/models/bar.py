"""Market data models."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class Bar(BaseModel):
    """Price/volume bar (candlestick)."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    timestamp: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal


class Instrument(BaseModel):
    """A tradable instrument from the ranked liquidity list."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    base: str
    quote: str
    quote_volume: Decimal
    last_price: Decimal
