"""Alert delivery."""

from radar_app.notifier.messages import format_new_signal, format_transition
from radar_app.notifier.telegram import NotificationError, TelegramNotifier

__all__ = [
    "NotificationError",
    "TelegramNotifier",
    "format_new_signal",
    "format_transition",
]
