"""Value types shared by the aggregators.

Every scan builds these fresh and hands them back to the caller; nothing
here is cached or shared between scans.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

from eth_utils import is_address, to_checksum_address
from loguru import logger

from tokenscan.parsers.exceptions import ScanCancelledError, ValidationError

ProgressCallback = Callable[[int, int], None]


class CancelToken:
    """Cooperative cancellation signal threaded through every suspension point."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ScanCancelledError("Scan cancelled")

    async def wait(self) -> None:
        await self._event.wait()

    async def sleep(self, delay: float) -> None:
        """Sleep for ``delay`` seconds, waking early (and raising) on cancel."""
        self.raise_if_cancelled()
        if delay <= 0:
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay)
        except TimeoutError:
            return
        raise ScanCancelledError("Scan cancelled")


@dataclass(frozen=True)
class PartialDataWarning:
    """A record or field that was skipped/defaulted instead of failing the scan."""

    source: str
    reason: str
    detail: str = ""


def warn(warnings: list[PartialDataWarning], source: str, reason: str, detail: str = "") -> None:
    warnings.append(PartialDataWarning(source=source, reason=reason, detail=detail))
    logger.warning(f"[{source.upper()}] {reason}" + (f": {detail}" if detail else ""))


@dataclass(frozen=True)
class TokenIdentity:
    name: str
    symbol: str
    decimals: int
    total_supply: int  # raw integer units
    unavailable: tuple[str, ...] = field(default=())  # fields that fell back to a default

    @property
    def is_complete(self) -> bool:
        return not self.unavailable


def normalize_address(address: str | None, field_name: str = "address") -> str:
    """Checksum an address or raise ValidationError."""
    candidate = (address or "").strip()
    if not candidate:
        raise ValidationError(f"{field_name} required")
    if not is_address(candidate):
        raise ValidationError(f"{field_name} is not a valid address: {candidate!r}")
    return to_checksum_address(candidate)
