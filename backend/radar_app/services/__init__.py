"""Business services."""

from radar_app.services.scheduler import run_periodic
from radar_app.services.signal_scanner import SignalScanner
from radar_app.services.signal_tracker import SignalTracker

__all__ = [
    "run_periodic",
    "SignalScanner",
    "SignalTracker",
]
