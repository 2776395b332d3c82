"""Main application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

# Configure logging FIRST, before any other imports
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)

# Reduce noise from third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.WARNING)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from radar_app.api import router
from radar_app.clients import BinanceRestClient
from radar_app.config import Settings, get_settings
from radar_app.notifier import TelegramNotifier, format_new_signal, format_transition
from radar_app.services import SignalScanner, SignalTracker, run_periodic
from radar_app.storage import JsonStateStore, SettingsStore
from radar_core.lifecycle import Transition
from radar_core.models import Signal, StrategyConfig
from radar_core.signal_generator import SignalGenerator
from radar_core.state import SignalBook

logger = logging.getLogger(__name__)


async def _cancel(tasks: list[asyncio.Task]) -> None:
    for task in tasks:
        task.cancel()
    for task in tasks:
        try:
            await task
        except asyncio.CancelledError:
            pass


def create_app(settings: Settings | None = None, start_schedules: bool = True) -> FastAPI:
    """Build the FastAPI app with its shared state and background schedules."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting signal radar...")

        store = JsonStateStore(settings.state_file)
        settings_store = SettingsStore(settings.settings_file)
        book = SignalBook(await store.load())

        # Environment credentials take precedence over the settings file
        saved = settings_store.load()
        notifier = TelegramNotifier(
            token=settings.telegram_bot_token or saved.token,
            chat_id=settings.telegram_chat_id or saved.chat_id,
        )
        if not notifier.is_configured:
            logger.info("Telegram credentials not set, alerts will be skipped")

        client = BinanceRestClient(
            base_url=settings.binance_base_url,
            quote_asset=settings.quote_asset,
            min_quote_volume=settings.min_quote_volume,
            max_candidates=settings.max_candidates,
            excluded_bases=settings.excluded_bases,
            excluded_tokens=settings.excluded_tokens,
            timeout=settings.request_timeout,
        )
        generator = SignalGenerator(
            StrategyConfig(cooldown_minutes=settings.cooldown_minutes)
        )
        scanner = SignalScanner(
            client=client,
            book=book,
            store=store,
            generator=generator,
            interval=settings.kline_interval,
            bar_limit=settings.kline_limit,
            request_timeout=settings.request_timeout,
            max_concurrent=settings.max_concurrent_requests,
        )
        tracker = SignalTracker(
            client=client,
            book=book,
            store=store,
            request_timeout=settings.request_timeout,
        )

        async def on_new_signal(signal: Signal) -> None:
            await notifier.notify(format_new_signal(signal))

        async def on_transition(transition: Transition) -> None:
            await notifier.notify(format_transition(transition))

        scanner.on_signal(on_new_signal)
        tracker.on_transition(on_transition)

        app.state.book = book
        app.state.notifier = notifier
        app.state.settings_store = settings_store

        tasks: list[asyncio.Task] = []
        if start_schedules:
            tasks.append(asyncio.create_task(run_periodic(
                "generation",
                settings.generation_interval,
                scanner.run_once,
                initial_delay=settings.generation_initial_delay,
            )))
            tasks.append(asyncio.create_task(run_periodic(
                "tracking",
                settings.tracking_interval,
                tracker.run_once,
            )))
            logger.info(
                f"Schedules started: generation every {settings.generation_interval}s, "
                f"tracking every {settings.tracking_interval}s"
            )

        yield

        # Shutdown
        logger.info("Shutting down...")
        await _cancel(tasks)

        async with book.lock:
            snapshot = book.snapshot()
        await store.save(snapshot)

        await client.close()
        await notifier.close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="Signal Radar",
        description="Technical trade signals with target/stop lifecycle tracking",
        version="0.1.0",
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


def main():
    """Run the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "radar_app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
