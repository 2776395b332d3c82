"""API layer."""

from radar_app.api.routes import router

__all__ = ["router"]
