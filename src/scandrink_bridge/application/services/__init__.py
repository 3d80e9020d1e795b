"""Application services public API."""

from scandrink_bridge.application.services.payment_bridge_service import (
    NotificationResult,
    PaymentBridgeService,
)

__all__ = ["NotificationResult", "PaymentBridgeService"]
