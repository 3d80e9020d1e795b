"""FastAPI application entrypoint."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scandrink_bridge import __version__
from scandrink_bridge.api import api_router
from scandrink_bridge.api.dependencies import get_payment_bridge_service, get_settings
from scandrink_bridge.logging_config import configure_logging


async def _request_validation_error_handler(
    _: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Report malformed request bodies as 400 instead of FastAPI's default 422."""

    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def create_app() -> FastAPI:
    """Build FastAPI application."""

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        """Start the broker connection and command dispatcher for the app lifetime."""

        service = get_payment_bridge_service()
        await service.start()
        try:
            yield
        finally:
            await service.stop()

    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _request_validation_error_handler)
    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()


def run() -> None:
    """Run the bridge server."""

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "scandrink_bridge.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )


__all__ = ["app", "create_app", "run"]
