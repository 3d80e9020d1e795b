"""Payment gateway adapters."""

from scandrink_bridge.infrastructure.payments.midtrans_snap_client import (
    PRODUCTION_BASE_URL,
    SANDBOX_BASE_URL,
    MidtransSnapClient,
)

__all__ = ["MidtransSnapClient", "PRODUCTION_BASE_URL", "SANDBOX_BASE_URL"]
