"""Tests for per-request scan cancellation."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from tokenscan.api.dependencies import _watch_request, scan_cancel_token
from tokenscan.parsers.scan_types import CancelToken


def _request(*, disconnected: list[bool], deadline_sec: float = 0.0) -> SimpleNamespace:
    app = SimpleNamespace(state=SimpleNamespace(settings=SimpleNamespace(dashboard_scan_deadline_sec=deadline_sec)))
    return SimpleNamespace(
        app=app,
        url=SimpleNamespace(path="/api/v1/holders/0xabc"),
        is_disconnected=AsyncMock(side_effect=disconnected + [True] * 100),
    )


class TestWatchRequest:
    @pytest.mark.asyncio
    async def test_disconnect_cancels_token(self, monkeypatch) -> None:
        monkeypatch.setattr("tokenscan.api.dependencies.DISCONNECT_POLL_SEC", 0.01)
        request = _request(disconnected=[False, False])
        token = CancelToken()

        await asyncio.wait_for(_watch_request(request, token, 0), timeout=2)

        assert token.cancelled
        assert request.is_disconnected.await_count == 3

    @pytest.mark.asyncio
    async def test_deadline_cancels_token(self) -> None:
        request = _request(disconnected=[False] * 1000)
        token = CancelToken()

        await asyncio.wait_for(_watch_request(request, token, 0.05), timeout=2)

        assert token.cancelled

    @pytest.mark.asyncio
    async def test_watcher_stops_when_scan_finishes(self) -> None:
        request = _request(disconnected=[False] * 1000, deadline_sec=30)
        dependency = scan_cancel_token(request)

        token = await dependency.__anext__()
        with pytest.raises(StopAsyncIteration):
            await dependency.__anext__()
        await asyncio.sleep(0)

        assert not token.cancelled
