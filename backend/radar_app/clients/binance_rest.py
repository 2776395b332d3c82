"""Binance REST API client for market data."""

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Sequence

import httpx
import orjson

from radar_core.models import Bar, Instrument

logger = logging.getLogger(__name__)

# Symbols per /ticker/price request (keeps the query string short)
PRICE_BATCH_SIZE = 100


class RateLimiter:
    """Simple rate limiter for API calls."""

    def __init__(self, calls_per_minute: int = 1200):
        self.calls_per_minute = calls_per_minute
        self.interval = 60.0 / calls_per_minute
        self.last_call = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait if necessary to respect rate limit."""
        async with self._lock:
            now = asyncio.get_running_loop().time()
            wait_time = self.last_call + self.interval - now
            if wait_time > 0:
                await asyncio.sleep(wait_time)
            self.last_call = asyncio.get_running_loop().time()


class BinanceRestClient:
    """Binance spot REST API client (public market data)."""

    BASE_URL = "https://api.binance.com"

    def __init__(
        self,
        base_url: str | None = None,
        quote_asset: str = "USDT",
        min_quote_volume: float = 2_000_000,
        max_candidates: int = 150,
        excluded_bases: Sequence[str] = (),
        excluded_tokens: Sequence[str] = (),
        timeout: float = 15.0,
    ):
        self.base_url = base_url or self.BASE_URL
        self.quote_asset = quote_asset
        self.min_quote_volume = Decimal(str(min_quote_volume))
        self.max_candidates = max_candidates
        self.excluded_bases = set(excluded_bases)
        self.excluded_tokens = tuple(excluded_tokens)
        self.timeout = timeout
        self.rate_limiter = RateLimiter()
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self, method: str, endpoint: str, params: dict[str, Any] | None = None
    ) -> Any:
        """Make an API request with rate limiting."""
        await self.rate_limiter.acquire()
        client = await self._get_client()
        response = await client.request(method, endpoint, params=params)
        response.raise_for_status()
        return response.json()

    def _is_candidate(self, ticker: dict[str, Any]) -> bool:
        """Filter to liquid quote pairs, skipping leveraged tokens and stable pairs."""
        symbol = ticker["symbol"]
        if not symbol.endswith(self.quote_asset):
            return False
        base = symbol[: -len(self.quote_asset)]
        if base in self.excluded_bases:
            return False
        if any(token in symbol for token in self.excluded_tokens):
            return False
        return (
            Decimal(ticker["lastPrice"]) > 0
            and Decimal(ticker["quoteVolume"]) > self.min_quote_volume
        )

    async def list_liquid_instruments(self) -> list[Instrument]:
        """
        Fetch 24h tickers and rank liquid instruments by quote volume.

        Returns:
            Up to max_candidates instruments, highest quote volume first
        """
        data = await self._request("GET", "/api/v3/ticker/24hr")

        instruments = []
        for ticker in data:
            try:
                if not self._is_candidate(ticker):
                    continue
                symbol = ticker["symbol"]
                instruments.append(
                    Instrument(
                        symbol=symbol,
                        base=symbol[: -len(self.quote_asset)],
                        quote=self.quote_asset,
                        quote_volume=Decimal(ticker["quoteVolume"]),
                        last_price=Decimal(ticker["lastPrice"]),
                    )
                )
            except (KeyError, ArithmeticError) as e:
                logger.debug(f"Skipping malformed ticker {ticker!r}: {e}")

        instruments.sort(key=lambda i: i.quote_volume, reverse=True)
        return instruments[: self.max_candidates]

    async def get_recent_bars(
        self, symbol: str, interval: str = "1h", limit: int = 24
    ) -> list[Bar]:
        """
        Fetch the most recent K-lines for a symbol.

        Args:
            symbol: Trading pair (e.g., "BTCUSDT")
            interval: K-line interval (e.g., "1h")
            limit: Number of bars (max 1000)

        Returns:
            List of Bar objects, oldest first
        """
        params = {"symbol": symbol, "interval": interval, "limit": min(limit, 1000)}
        data = await self._request("GET", "/api/v3/klines", params)

        return [
            Bar(
                symbol=symbol,
                timestamp=datetime.fromtimestamp(item[0] / 1000, tz=timezone.utc),
                open=Decimal(str(item[1])),
                high=Decimal(str(item[2])),
                low=Decimal(str(item[3])),
                close=Decimal(str(item[4])),
                volume=Decimal(str(item[5])),
            )
            for item in data
        ]

    async def get_current_prices(self, symbols: Sequence[str]) -> dict[str, Decimal]:
        """
        Fetch latest prices for symbols.

        Symbols are requested in batches; a failed batch is logged and
        skipped so the remaining batches still return prices.

        Returns:
            Mapping of symbol to price (missing symbols are absent)
        """
        unique = sorted(set(symbols))
        prices: dict[str, Decimal] = {}

        for start in range(0, len(unique), PRICE_BATCH_SIZE):
            batch = unique[start : start + PRICE_BATCH_SIZE]
            params = {"symbols": orjson.dumps(batch).decode()}
            try:
                data = await self._request("GET", "/api/v3/ticker/price", params)
                for item in data:
                    prices[item["symbol"]] = Decimal(str(item["price"]))
            except (
                httpx.HTTPError, KeyError, TypeError, ValueError, ArithmeticError
            ) as e:
                logger.warning(f"Price fetch failed for {len(batch)} symbols: {e}")

        return prices
