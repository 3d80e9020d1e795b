"""Pydantic models for HTTP payloads and Midtrans messages."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PaymentModel(BaseModel):
    """Base model for bridge payloads."""

    model_config = ConfigDict(populate_by_name=True)


class CreateTransactionRequest(PaymentModel):
    """Client request for a new Snap transaction.

    Fields are loosely typed so that missing or malformed values reach the
    service and are reported as a 400 rather than a schema error.
    """

    item_name: Any = None
    quantity: Any = None
    customer_details: Any = None


class CreateTransactionResponse(PaymentModel):
    """Snap token handed back to the storefront."""

    token: str
    order_id: str


class MidtransNotification(PaymentModel):
    """Payment notification posted by Midtrans.

    Only the fields the bridge reads are declared; everything else is kept.
    """

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    order_id: str | None = None
    status_code: str | None = None
    gross_amount: str | None = None
    signature_key: str | None = None
    transaction_status: str | None = None
    fraud_status: str | None = None

    def signed_fields(self) -> dict[str, Any]:
        """Return the raw fields used for signature verification."""

        return self.model_dump(
            include={"order_id", "status_code", "gross_amount", "signature_key"}
        )


class TransactionRecordResponse(PaymentModel):
    """Serialized transaction row for the admin listing."""

    order_id: str
    item_name: str
    price: int
    status: str
    created_at: datetime | None = None


class HealthResponse(PaymentModel):
    """Liveness probe payload."""

    status: str = "ok"
    broker: str
    pending_commands: int = Field(serialization_alias="pendingCommands")


__all__ = [
    "CreateTransactionRequest",
    "CreateTransactionResponse",
    "HealthResponse",
    "MidtransNotification",
    "PaymentModel",
    "TransactionRecordResponse",
]
