"""REST API routes."""

import logging
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from radar_app.notifier import NotificationError, TelegramNotifier
from radar_app.storage import NotifierSettings, SettingsStore
from radar_core.models import GlobalStats, Signal, SignalStatus, StrategyStats
from radar_core.state import SignalBook

logger = logging.getLogger(__name__)

router = APIRouter()


# Response models
class StatsResponse(BaseModel):
    """Per-strategy and global statistics."""

    strategies: dict[str, StrategyStats]
    total_wins: int
    total_signals: int
    success_rate: int


class StateResponse(BaseModel):
    """Full shared state snapshot."""

    signals: list[Signal]
    statuses: dict[str, SignalStatus]
    prices: dict[str, Decimal]
    stats: StatsResponse
    notifier_configured: bool


# Request models
class SettingsRequest(BaseModel):
    """Notifier credential update."""

    token: Optional[str] = None
    chat_id: Optional[str] = None


class TelegramRequest(BaseModel):
    """Manual message send."""

    message: str
    token: Optional[str] = None
    chat_id: Optional[str] = None


def _stats_response(strategies: dict[str, StrategyStats], totals: GlobalStats) -> StatsResponse:
    return StatsResponse(
        strategies=strategies,
        total_wins=totals.wins,
        total_signals=totals.total,
        success_rate=totals.success_rate,
    )


@router.get("/state", response_model=StateResponse)
async def get_state(request: Request):
    """Get signals, statuses, prices and stats."""
    book: SignalBook = request.app.state.book
    notifier: TelegramNotifier = request.app.state.notifier

    async with book.lock:
        snapshot = book.snapshot()
        prices = dict(book.prices)
        totals = book.stats.global_stats()

    return StateResponse(
        signals=snapshot.signals,
        statuses=snapshot.statuses,
        prices=prices,
        stats=_stats_response(snapshot.stats, totals),
        notifier_configured=notifier.is_configured,
    )


@router.get("/stats", response_model=StatsResponse)
async def get_stats(request: Request):
    """Get per-strategy and global win rates."""
    book: SignalBook = request.app.state.book
    async with book.lock:
        return _stats_response(book.stats.to_dict(), book.stats.global_stats())


@router.get("/test")
async def test():
    """Liveness check."""
    return {"status": "ok", "message": "Server is running"}


@router.post("/settings")
async def update_settings(body: SettingsRequest, request: Request):
    """Update and persist notifier credentials."""
    notifier: TelegramNotifier = request.app.state.notifier
    settings_store: SettingsStore = request.app.state.settings_store

    notifier.configure(token=body.token, chat_id=body.chat_id)
    saved = await settings_store.save(
        NotifierSettings(token=notifier.token, chat_id=notifier.chat_id)
    )
    return {"success": True, "persisted": saved}


@router.post("/telegram")
async def send_telegram(body: TelegramRequest, request: Request):
    """Send a message through the notifier, optionally with other credentials."""
    notifier: TelegramNotifier = request.app.state.notifier

    token = body.token or notifier.token
    chat_id = body.chat_id or notifier.chat_id
    if not token or not chat_id:
        raise HTTPException(status_code=400, detail="Telegram credentials not configured.")

    try:
        data = await notifier.send_message(body.message, token=token, chat_id=chat_id)
    except NotificationError as e:
        logger.error(f"Manual Telegram send failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return {"success": True, "data": data}
