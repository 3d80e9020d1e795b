"""Health check routes."""

from fastapi import APIRouter, Depends

from scandrink_bridge.api.dependencies import get_payment_bridge_service
from scandrink_bridge.application.services import PaymentBridgeService
from scandrink_bridge.domain.payment_models import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=HealthResponse)
async def healthz(
    service: PaymentBridgeService = Depends(get_payment_bridge_service),
) -> HealthResponse:
    """Liveness probe with broker state and undelivered command count."""

    return service.health()


__all__ = ["router"]
