"""Data storage layer."""

from radar_app.storage.state_store import (
    JsonStateStore,
    NotifierSettings,
    SettingsStore,
)

__all__ = [
    "JsonStateStore",
    "NotifierSettings",
    "SettingsStore",
]
