"""Transaction creation and admin listing routes."""

from __future__ import annotations

from typing import NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from scandrink_bridge.api.dependencies import get_payment_bridge_service
from scandrink_bridge.application.services import PaymentBridgeService
from scandrink_bridge.domain.errors import (
    PaymentGatewayError,
    TransactionPersistenceError,
    TransactionValidationError,
    UnauthorizedError,
)
from scandrink_bridge.domain.payment_models import (
    CreateTransactionRequest,
    CreateTransactionResponse,
    TransactionRecordResponse,
)

router = APIRouter(tags=["transactions"])


def _raise_http_exception(exc: Exception) -> NoReturn:
    if isinstance(exc, TransactionValidationError):
        raise HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, UnauthorizedError):
        raise HTTPException(status_code=401, detail="Unauthorized")
    if isinstance(exc, PaymentGatewayError):
        raise HTTPException(status_code=500, detail=f"Failed to create transaction: {exc}")
    if isinstance(exc, TransactionPersistenceError):
        raise HTTPException(status_code=500, detail="Failed to load transactions")
    raise HTTPException(status_code=500, detail="Unexpected transaction error")


@router.post(
    "/create-transaction",
    response_model=CreateTransactionResponse,
    responses={400: {"description": "Bad request"}, 500: {"description": "Gateway failure"}},
)
async def create_transaction(
    request: CreateTransactionRequest | None = Body(default=None),
    service: PaymentBridgeService = Depends(get_payment_bridge_service),
) -> CreateTransactionResponse:
    """Create a Snap payment for one catalog item."""

    try:
        return await service.create_transaction(request or CreateTransactionRequest())
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)


@router.get(
    "/transactions",
    response_model=list[TransactionRecordResponse],
    responses={401: {"description": "Unauthorized"}},
)
async def list_transactions(
    admin_token: str | None = Query(default=None),
    service: PaymentBridgeService = Depends(get_payment_bridge_service),
) -> list[TransactionRecordResponse]:
    """List stored transactions, newest first."""

    try:
        records = await service.list_transactions(admin_token)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)

    return [
        TransactionRecordResponse(
            order_id=record.order_id,
            item_name=record.item_name,
            price=record.price,
            status=record.status,
            created_at=record.created_at,
        )
        for record in records
    ]


__all__ = ["router"]
