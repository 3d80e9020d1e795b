"""Midtrans payment notification route."""

from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from scandrink_bridge.api.dependencies import get_payment_bridge_service
from scandrink_bridge.application.services import PaymentBridgeService
from scandrink_bridge.domain.errors import NotificationSignatureError
from scandrink_bridge.domain.payment_models import MidtransNotification

router = APIRouter(tags=["notifications"])

logger = logging.getLogger(__name__)


def _raise_http_exception(exc: Exception) -> NoReturn:
    if isinstance(exc, NotificationSignatureError):
        raise HTTPException(status_code=400, detail="Invalid signature")
    logger.error("Failed to handle notification: %s", exc)
    raise HTTPException(status_code=500, detail="Failed to handle notification")


@router.post(
    "/midtrans-notification",
    response_class=PlainTextResponse,
    responses={400: {"description": "Invalid signature"}},
)
async def midtrans_notification(
    notification: MidtransNotification,
    service: PaymentBridgeService = Depends(get_payment_bridge_service),
) -> PlainTextResponse:
    """Accept a gateway notification once its signature checks out.

    Relay delivery happens asynchronously; the response never reflects it.
    """

    try:
        await service.handle_notification(notification)
    except Exception as exc:  # noqa: BLE001
        _raise_http_exception(exc)

    return PlainTextResponse("OK", status_code=200)


__all__ = ["router"]
