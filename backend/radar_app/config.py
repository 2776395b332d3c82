"""Application configuration."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Binance API (spot, public endpoints only)
    binance_base_url: str = "https://api.binance.com"
    quote_asset: str = "USDT"
    min_quote_volume: float = 2_000_000
    max_candidates: int = 150
    excluded_bases: list[str] = [
        "USDC", "BUSD", "FDUSD", "TUSD", "USDP", "EUR", "USDE",
        "AEUR", "DAI", "USDD", "PYUSD", "SHIB", "PEPE",
    ]
    excluded_tokens: list[str] = ["UP", "DOWN", "BULL", "BEAR"]
    kline_interval: str = "1h"
    kline_limit: int = 24

    # Schedules (seconds)
    generation_interval: float = 60.0
    generation_initial_delay: float = 2.0
    tracking_interval: float = 10.0
    request_timeout: float = 15.0
    max_concurrent_requests: int = 10

    # Signal rules
    cooldown_minutes: int = 60

    # Persistence
    state_file: str = "bot-state.json"
    settings_file: str = "telegram-settings.json"

    # Telegram
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
