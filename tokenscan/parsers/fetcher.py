"""Deadline + bounded-retry wrapper shared by every upstream client."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx
from loguru import logger

from tokenscan.parsers.exceptions import FetchError, ScanCancelledError, UpstreamError
from tokenscan.parsers.rate_limiter import RateLimiter
from tokenscan.parsers.scan_types import CancelToken

T = TypeVar("T")

# Failures worth another attempt. pydantic.ValidationError and JSON decode
# errors are ValueError subclasses, so malformed payloads are retried too.
RETRYABLE_ERRORS: tuple[type[BaseException], ...] = (
    TimeoutError,
    httpx.HTTPError,
    ValueError,
    UpstreamError,
)


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = 3
    delay_sec: float = 1.0  # constant, not exponential
    timeout_sec: float = 30.0


class RetryableFetcher:
    """Runs one upstream call with a deadline, retrying on failure.

    No caching: every ``get_json``/``run`` goes to the network.
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.policy = policy or RetryPolicy()
        self._client = client or httpx.AsyncClient(
            timeout=self.policy.timeout_sec,
            headers={"Accept": "application/json"},
            follow_redirects=True,
        )
        self._rate_limiter = rate_limiter

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def close(self) -> None:
        await self._client.aclose()

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        label: str,
        cancel: CancelToken | None = None,
    ) -> T:
        """Await ``operation()`` under the deadline, up to ``policy.attempts`` times.

        ``operation`` is called afresh for every attempt. After the last
        failure a FetchError is raised, chained to the last underlying error.
        """
        cancel = cancel or CancelToken()
        attempts = self.policy.attempts
        last_error: BaseException | None = None

        for attempt in range(1, attempts + 1):
            cancel.raise_if_cancelled()
            if self._rate_limiter is not None:
                await self._rate_limiter.acquire()
            try:
                return await self._with_deadline(operation(), cancel)
            except RETRYABLE_ERRORS as e:
                last_error = e
                logger.debug(
                    f"[FETCH] {label} attempt {attempt}/{attempts} failed: "
                    f"{type(e).__name__}: {e}"
                )
            if attempt < attempts:
                await cancel.sleep(self.policy.delay_sec)

        logger.warning(f"[FETCH] {label} failed after {attempts} attempts: {last_error!r}")
        raise FetchError(
            f"{label} failed after {attempts} attempts",
            attempts=attempts,
            last_error=last_error,
        ) from last_error

    async def get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        cancel: CancelToken | None = None,
    ) -> Any:
        """GET ``url`` and decode JSON; non-2xx and bad JSON count as failures."""

        async def _once() -> Any:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            return response.json()

        return await self.run(_once, label=f"GET {url}", cancel=cancel)

    async def post_json(
        self,
        url: str,
        payload: Any,
        *,
        decode: Callable[[Any], T],
        label: str | None = None,
        cancel: CancelToken | None = None,
    ) -> T:
        """POST JSON and pass the decoded body through ``decode`` inside the retry loop."""

        async def _once() -> T:
            response = await self._client.post(url, json=payload)
            response.raise_for_status()
            return decode(response.json())

        return await self.run(_once, label=label or f"POST {url}", cancel=cancel)

    async def _with_deadline(self, awaitable: Awaitable[T], cancel: CancelToken) -> T:
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=self.policy.timeout_sec,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()

        if task in done:
            return task.result()

        await asyncio.wait({task})
        if not task.cancelled():
            # finished while being cancelled; the result is discarded
            task.exception()
        if cancel.cancelled:
            raise ScanCancelledError("Scan cancelled")
        raise TimeoutError(f"Query timeout after {self.policy.timeout_sec}s")
