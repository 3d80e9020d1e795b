"""Dependency providers for FastAPI routes."""

from functools import lru_cache

from scandrink_bridge.application.services import PaymentBridgeService
from scandrink_bridge.bootstrap import build_payment_bridge_service
from scandrink_bridge.config import Settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return singleton settings."""

    return Settings()


@lru_cache(maxsize=1)
def get_payment_bridge_service() -> PaymentBridgeService:
    """Return singleton service graph."""

    return build_payment_bridge_service(get_settings())


__all__ = ["get_payment_bridge_service", "get_settings"]
