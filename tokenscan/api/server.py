"""Serve the scan API with uvicorn on the caller's event loop."""

from __future__ import annotations

import uvicorn
from loguru import logger

from tokenscan.config.settings import Settings, settings


async def run_dashboard_server(app_settings: Settings | None = None) -> None:
    from tokenscan.api.app import create_app

    app_settings = app_settings or settings
    server = uvicorn.Server(
        uvicorn.Config(
            app=create_app(app_settings),
            host=app_settings.dashboard_host,
            port=app_settings.dashboard_port,
            log_level="debug" if app_settings.dashboard_debug else "warning",
            loop="none",
        )
    )
    logger.info(f"[API] listening on http://{app_settings.dashboard_host}:{app_settings.dashboard_port}")
    await server.serve()
