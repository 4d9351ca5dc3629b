"""FastAPI application factory for the token scan dashboard API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware

from tokenscan import __version__
from tokenscan.api.limiter import limiter
from tokenscan.api.middleware import SecurityHeadersMiddleware
from tokenscan.config.settings import Settings, settings
from tokenscan.parsers.exceptions import ScanCancelledError, UpstreamError, ValidationError
from tokenscan.parsers.services import ScanServices, build_services

UPSTREAM_UNAVAILABLE = "Upstream data source unavailable, please try again later"


async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def _upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    # raw upstream text stays in the logs
    logger.warning(f"[API] {request.url.path} upstream failure: {exc!r}")
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": UPSTREAM_UNAVAILABLE})


async def _cancelled_handler(request: Request, exc: ScanCancelledError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": "Scan cancelled"})


def create_app(
    app_settings: Settings | None = None,
    services: ScanServices | None = None,
) -> FastAPI:
    """Build the FastAPI app. ``services`` may be injected (tests); otherwise built on startup."""
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = services is None
        app.state.services = services or build_services(app_settings)
        logger.info(f"[API] scan services ready (rpc={app_settings.rpc_url})")
        try:
            yield
        finally:
            if owned:
                await app.state.services.close()

    app = FastAPI(
        title="Token Scan API",
        version=__version__,
        docs_url="/api/docs" if app_settings.dashboard_debug else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if app_settings.dashboard_debug else None,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(UpstreamError, _upstream_error_handler)
    app.add_exception_handler(ScanCancelledError, _cancelled_handler)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    from tokenscan.api.routers.health import router as health_router
    from tokenscan.api.routers.scans import router as scans_router

    app.include_router(health_router)
    app.include_router(scans_router)
    return app
