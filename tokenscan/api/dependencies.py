"""FastAPI dependency injection: scan services and per-request cancellation."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from fastapi import Request
from loguru import logger

from tokenscan.parsers.scan_types import CancelToken
from tokenscan.parsers.services import ScanServices

DISCONNECT_POLL_SEC = 0.5


def get_services(request: Request) -> ScanServices:
    """Return the services attached to the running app."""
    return request.app.state.services


async def _watch_request(request: Request, token: CancelToken, deadline_sec: float) -> None:
    loop = asyncio.get_running_loop()
    expires = loop.time() + deadline_sec if deadline_sec > 0 else None
    while not token.cancelled:
        if await request.is_disconnected():
            logger.info(f"[API] client left {request.url.path}, cancelling scan")
            token.cancel()
            return
        if expires is not None and loop.time() >= expires:
            logger.warning(f"[API] {request.url.path} exceeded {deadline_sec}s, cancelling scan")
            token.cancel()
            return
        delay = DISCONNECT_POLL_SEC
        if expires is not None:
            delay = min(delay, max(expires - loop.time(), 0.0))
        await asyncio.sleep(delay)


async def scan_cancel_token(request: Request) -> AsyncIterator[CancelToken]:
    """CancelToken fired when the client disconnects or the scan deadline passes."""
    token = CancelToken()
    deadline_sec = request.app.state.settings.dashboard_scan_deadline_sec
    watcher = asyncio.create_task(_watch_request(request, token, deadline_sec))
    try:
        yield token
    finally:
        watcher.cancel()
