"""Top-level API router composition."""

from fastapi import APIRouter

from scandrink_bridge.api.routes import (
    health_router,
    notifications_router,
    transactions_router,
)

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(transactions_router)
api_router.include_router(notifications_router)

__all__ = ["api_router"]
