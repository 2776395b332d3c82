"""Tests for the tracking tick."""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from radar_app.services import SignalTracker
from radar_core.models import Direction, Signal, SignalStatus, TradingPair
from radar_core.state import SignalBook

STRATEGY = "Volume Breakout"


def make_signal(base="BTC", ts_ms=1_700_000_000_000):
    return Signal(
        id=f"{base}USDT-{ts_ms}",
        strategy_name=STRATEGY,
        success_rate="0%",
        created_at="12:00:00",
        pair=TradingPair(base=base, quote="USDT"),
        direction=Direction.BUY,
        entry_price=Decimal("100.00"),
        stop_loss=Decimal("98.50"),
        target1=Decimal("101.20"),
        target2=Decimal("102.00"),
        target3=Decimal("103.50"),
        rationale="test",
    )


class TestSignalTracker:
    """Tests for SignalTracker."""

    @pytest.fixture
    def book(self):
        return SignalBook()

    @pytest.fixture
    def signal(self, book):
        signal = make_signal()
        book.add_signal(signal)
        return signal

    @pytest.fixture
    def mock_store(self):
        store = MagicMock()
        store.save = AsyncMock(return_value=True)
        return store

    @pytest.fixture
    def mock_client(self):
        client = MagicMock()
        client.get_current_prices = AsyncMock(return_value={})
        return client

    @pytest.fixture
    def tracker(self, mock_client, book, mock_store):
        return SignalTracker(
            client=mock_client, book=book, store=mock_store, request_timeout=1.0
        )

    @pytest.mark.asyncio
    async def test_transition_saved_and_notified(
        self, tracker, mock_client, mock_store, book, signal
    ):
        """Test a target hit updates state, saves and fires callbacks."""
        mock_client.get_current_prices.return_value = {"BTCUSDT": Decimal("101.5")}
        callback = AsyncMock()
        tracker.on_transition(callback)

        transitions = await tracker.run_once()

        assert len(transitions) == 1
        assert transitions[0].current == SignalStatus.TARGET1_HIT
        assert book.status_of(signal.id) == SignalStatus.TARGET1_HIT
        assert book.prices == {"BTCUSDT": Decimal("101.5")}
        assert book.stats.get(STRATEGY).wins == 1
        mock_client.get_current_prices.assert_awaited_once_with(["BTCUSDT"])
        mock_store.save.assert_awaited_once()
        saved = mock_store.save.call_args.args[0]
        assert saved.statuses[signal.id] == SignalStatus.TARGET1_HIT
        callback.assert_awaited_once_with(transitions[0])

    @pytest.mark.asyncio
    async def test_no_open_signals(self, tracker, mock_client, book):
        """Test the client is not called without open signals."""
        signal = make_signal()
        book.add_signal(signal)
        book.set_status(signal.id, SignalStatus.STOP_HIT)

        assert await tracker.run_once() == []
        mock_client.get_current_prices.assert_not_called()

    @pytest.mark.asyncio
    async def test_prices_recorded_without_transition(
        self, tracker, mock_client, mock_store, book, signal
    ):
        """Test prices are stored even when nothing changes."""
        mock_client.get_current_prices.return_value = {"BTCUSDT": Decimal("100.3")}

        assert await tracker.run_once() == []
        assert book.prices["BTCUSDT"] == Decimal("100.3")
        assert book.status_of(signal.id) == SignalStatus.ACTIVE
        mock_store.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_price(self, tracker, mock_client, book, signal):
        """Test a signal without a returned price is left alone."""
        mock_client.get_current_prices.return_value = {}

        assert await tracker.run_once() == []
        assert book.status_of(signal.id) == SignalStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_fetch_failure(self, tracker, mock_client, mock_store, book, signal):
        """Test a failed price fetch ends the tick without changes."""
        mock_client.get_current_prices.side_effect = ConnectionError("down")

        assert await tracker.run_once() == []
        assert book.status_of(signal.id) == SignalStatus.ACTIVE
        mock_store.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_callback_error_keeps_state(
        self, tracker, mock_client, mock_store, book, signal
    ):
        """Test a failing callback does not roll back the transition."""
        mock_client.get_current_prices.return_value = {"BTCUSDT": Decimal("98")}
        tracker.on_transition(AsyncMock(side_effect=RuntimeError("boom")))

        transitions = await tracker.run_once()

        assert transitions[0].current == SignalStatus.STOP_HIT
        assert book.status_of(signal.id) == SignalStatus.STOP_HIT
        assert book.stats.get(STRATEGY).total == 1
        mock_store.save.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_symbols_deduplicated(self, tracker, mock_client, book, signal):
        """Test each open symbol is requested once."""
        book.add_signal(make_signal(base="ETH"))
        older = make_signal(base="BTC", ts_ms=1_600_000_000_000)
        book.signals.append(older)

        await tracker.run_once()

        mock_client.get_current_prices.assert_awaited_once_with(["BTCUSDT", "ETHUSDT"])

    @pytest.mark.asyncio
    async def test_off_transition(self, tracker, mock_client, signal):
        """Test unregistered callbacks are not called."""
        mock_client.get_current_prices.return_value = {"BTCUSDT": Decimal("101.5")}
        callback = AsyncMock()
        tracker.on_transition(callback)
        tracker.off_transition(callback)

        await tracker.run_once()

        callback.assert_not_called()
