"""Route modules public API."""

from scandrink_bridge.api.routes.health import router as health_router
from scandrink_bridge.api.routes.notifications import router as notifications_router
from scandrink_bridge.api.routes.transactions import router as transactions_router

__all__ = ["health_router", "notifications_router", "transactions_router"]
