"""Tests for the REST API and application lifespan."""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import orjson
from fastapi import FastAPI
from fastapi.testclient import TestClient

from radar_app.api import router
from radar_app.config import Settings
from radar_app.main import create_app
from radar_app.notifier import NotificationError, TelegramNotifier
from radar_app.storage import NotifierSettings
from radar_core.models import Direction, Signal, SignalStatus, StrategyStats, TradingPair
from radar_core.state import PersistedState, SignalBook


def make_signal(base="BTC", ts_ms=1_700_000_000_000):
    return Signal(
        id=f"{base}USDT-{ts_ms}",
        strategy_name="RSI Oversold",
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


class TestRoutes:
    """Tests for API routes against hand-built app state."""

    @pytest.fixture
    def book(self):
        signal = make_signal()
        book = SignalBook(PersistedState(
            signals=[signal],
            statuses={signal.id: SignalStatus.TARGET1_HIT},
            stats={
                "RSI Oversold": StrategyStats(wins=2, total=3),
                "Volume Breakout": StrategyStats(wins=0, total=1),
            },
        ))
        book.update_prices({"BTCUSDT": Decimal("101.5")})
        return book

    @pytest.fixture
    def notifier(self):
        return TelegramNotifier()

    @pytest.fixture
    def settings_store(self):
        store = MagicMock()
        store.save = AsyncMock(return_value=True)
        return store

    @pytest.fixture
    def client(self, book, notifier, settings_store):
        app = FastAPI()
        app.include_router(router, prefix="/api")
        app.state.book = book
        app.state.notifier = notifier
        app.state.settings_store = settings_store
        return TestClient(app)

    def test_state(self, client, book):
        """Test the state snapshot."""
        response = client.get("/api/state")

        assert response.status_code == 200
        data = response.json()
        signal_id = book.signals[0].id
        assert [s["id"] for s in data["signals"]] == [signal_id]
        assert data["statuses"] == {signal_id: "target1Hit"}
        assert Decimal(str(data["prices"]["BTCUSDT"])) == Decimal("101.5")
        assert data["stats"]["total_wins"] == 2
        assert data["stats"]["total_signals"] == 4
        assert data["notifier_configured"] is False

    def test_stats(self, client):
        """Test per-strategy and global rates."""
        response = client.get("/api/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["strategies"]["RSI Oversold"] == {"wins": 2, "total": 3}
        assert data["total_wins"] == 2
        assert data["total_signals"] == 4
        assert data["success_rate"] == 50

    def test_liveness(self, client):
        """Test the test route."""
        response = client.get("/api/test")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_update_settings(self, client, notifier, settings_store):
        """Test credentials are applied and persisted."""
        response = client.post("/api/settings", json={"token": "123:abc", "chat_id": "42"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "persisted": True}
        assert notifier.is_configured
        settings_store.save.assert_awaited_once_with(
            NotifierSettings(token="123:abc", chat_id="42")
        )

    def test_update_settings_partial(self, client, notifier):
        """Test omitted fields keep their values."""
        notifier.configure(token="old", chat_id="1")

        client.post("/api/settings", json={"chat_id": "2"})

        assert notifier.token == "old"
        assert notifier.chat_id == "2"

    def test_telegram_without_credentials(self, client):
        """Test 400 when no credentials are available."""
        response = client.post("/api/telegram", json={"message": "hi"})

        assert response.status_code == 400

    def test_telegram_send(self, client, notifier):
        """Test a successful manual send."""
        notifier.configure(token="123:abc", chat_id="42")
        notifier.send_message = AsyncMock(return_value={"ok": True})

        response = client.post("/api/telegram", json={"message": "hi"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"ok": True}}
        notifier.send_message.assert_awaited_once_with("hi", token="123:abc", chat_id="42")

    def test_telegram_request_credentials(self, client, notifier):
        """Test credentials in the request body are used."""
        notifier.send_message = AsyncMock(return_value={"ok": True})

        response = client.post(
            "/api/telegram", json={"message": "hi", "token": "t", "chat_id": "c"}
        )

        assert response.status_code == 200
        notifier.send_message.assert_awaited_once_with("hi", token="t", chat_id="c")

    def test_telegram_failure(self, client, notifier):
        """Test 500 when delivery fails."""
        notifier.configure(token="123:abc", chat_id="42")
        notifier.send_message = AsyncMock(side_effect=NotificationError("chat not found"))

        response = client.post("/api/telegram", json={"message": "hi"})

        assert response.status_code == 500
        assert "chat not found" in response.json()["detail"]


class TestAppLifespan:
    """Tests for create_app startup and shutdown."""

    @pytest.fixture
    def settings(self, tmp_path):
        return Settings(
            state_file=str(tmp_path / "bot-state.json"),
            settings_file=str(tmp_path / "telegram-settings.json"),
            telegram_bot_token="",
            telegram_chat_id="",
        )

    def test_health_and_empty_state(self, settings):
        """Test app starts with empty state when no file exists."""
        app = create_app(settings, start_schedules=False)

        with TestClient(app) as client:
            assert client.get("/health").json() == {"status": "healthy"}
            data = client.get("/api/state").json()

        assert data["signals"] == []
        assert data["stats"]["success_rate"] == 0

    def test_restores_and_saves_state(self, settings, tmp_path):
        """Test state is loaded at startup and written at shutdown."""
        signal = make_signal()
        (tmp_path / "bot-state.json").write_bytes(orjson.dumps(PersistedState(
            signals=[signal],
            statuses={signal.id: SignalStatus.TARGET2_HIT},
        ).model_dump(mode="json")))

        app = create_app(settings, start_schedules=False)
        with TestClient(app) as client:
            data = client.get("/api/state").json()
            assert data["statuses"] == {signal.id: "target2Hit"}
            client.post("/api/settings", json={"token": "123:abc", "chat_id": "42"})

        saved = orjson.loads((tmp_path / "bot-state.json").read_bytes())
        assert saved["statuses"] == {signal.id: "target2Hit"}
        creds = orjson.loads((tmp_path / "telegram-settings.json").read_bytes())
        assert creds == {"token": "123:abc", "chat_id": "42"}

    def test_saved_credentials_used(self, settings, tmp_path):
        """Test credentials from the settings file configure the notifier."""
        (tmp_path / "telegram-settings.json").write_bytes(
            orjson.dumps({"token": "123:abc", "chat_id": "42"})
        )

        app = create_app(settings, start_schedules=False)
        with TestClient(app) as client:
            assert client.get("/api/state").json()["notifier_configured"] is True
