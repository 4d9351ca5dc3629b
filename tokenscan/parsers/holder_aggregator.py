"""Holder distribution: paginated holder listing reduced to percentages.

Pages are fetched strictly one after another (the cursor for page N+1 comes
from page N) until the listing ends or ``target`` holders were collected.
Balances are reduced with integer division by 10**decimals before any float
math, so large supplies keep their precision.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from tokenscan.parsers.blockscout.client import BlockscoutClient
from tokenscan.parsers.blockscout.models import BlockscoutHolderItem
from tokenscan.parsers.exceptions import UpstreamError
from tokenscan.parsers.rpc.client import EvmRpcClient
from tokenscan.parsers.scan_types import (
    CancelToken,
    PartialDataWarning,
    ProgressCallback,
    normalize_address,
    warn,
)
from tokenscan.parsers.units import clamp_percentage, to_whole_units

DEFAULT_TARGET_HOLDERS = 200
TOP_N = 10


@dataclass
class Holder:
    address: str
    balance: str  # whole human-scale units
    percentage: float  # 0-100, 2 decimals
    raw_balance: int = 0


@dataclass
class HolderResult:
    holders: list[Holder]
    total_holders: int
    total_supply: str  # whole human-scale units
    top10_percentage: float
    warnings: list[PartialDataWarning] = field(default_factory=list)


def top_n_percentage(holders: list[Holder], n: int = TOP_N) -> float:
    """Sum of the first ``n`` holders' percentages, clamped to [0, 100]."""
    return round(clamp_percentage(sum(h.percentage for h in holders[:n])), 2)


class HolderAggregator:
    def __init__(
        self,
        rpc: EvmRpcClient,
        explorer: BlockscoutClient,
        *,
        target: int = DEFAULT_TARGET_HOLDERS,
        page_delay_sec: float = 1.0,
    ) -> None:
        self._rpc = rpc
        self._explorer = explorer
        self._target = target
        self._page_delay_sec = page_delay_sec

    async def get_token_holders(
        self,
        address: str,
        *,
        on_progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
    ) -> HolderResult:
        """Collect up to ``target`` holders of ``address``.

        ``on_progress(processed, target)`` is called after every accepted
        holder. Raises UpstreamError only when no holder at all could be
        retrieved; a later page failing returns what was collected so far.
        """
        cancel = cancel or CancelToken()
        token = normalize_address(address)
        warnings: list[PartialDataWarning] = []

        # FETCH_TOKEN_INFO
        decimals = await self._rpc.token_decimals(token, cancel=cancel)
        total_supply_raw = await self._rpc.total_supply(token, cancel=cancel)
        supply_whole = to_whole_units(total_supply_raw, decimals)

        holders: list[Holder] = []
        page_params: dict[str, Any] | None = None
        page_number = 0

        while True:
            # FETCH_PAGE
            page_number += 1
            try:
                page = await self._explorer.get_holders_page(token, page_params, cancel=cancel)
            except UpstreamError as e:
                if not holders:
                    raise UpstreamError(f"No holders retrieved for {token}") from e
                warn(warnings, "holders", f"page {page_number} failed, returning partial list", str(e))
                break

            progress_total = self._target
            if page.total_count is not None:
                progress_total = min(self._target, page.total_count)

            for index, raw_item in enumerate(page.items):
                holder = self._parse_item(raw_item, decimals, supply_whole)
                if holder is None:
                    warn(warnings, "holders", f"skipped malformed holder item {page_number}.{index}")
                    continue
                holders.append(holder)
                if on_progress is not None:
                    on_progress(len(holders), max(progress_total, len(holders)))
                if len(holders) >= self._target:
                    break

            if len(holders) >= self._target or not page.next_page_params:
                break
            if not page.items or page.next_page_params == page_params:
                warn(warnings, "holders", f"listing stalled at page {page_number}, stopping")
                break
            page_params = page.next_page_params
            await cancel.sleep(self._page_delay_sec)

        # FINALIZE
        if not holders:
            raise UpstreamError(f"No holders retrieved for {token}")

        holders.sort(key=lambda h: h.raw_balance, reverse=True)
        result = HolderResult(
            holders=holders,
            total_holders=len(holders),
            total_supply=str(supply_whole),
            top10_percentage=top_n_percentage(holders),
            warnings=warnings,
        )
        logger.info(
            f"[HOLDERS] {token[:10]}: {result.total_holders} holders over {page_number} pages, "
            f"top10={result.top10_percentage:.2f}%"
        )
        return result

    @staticmethod
    def _parse_item(raw_item: Any, decimals: int, supply_whole: int) -> Holder | None:
        try:
            item = BlockscoutHolderItem.model_validate(raw_item)
        except PydanticValidationError:
            return None
        balance_whole = to_whole_units(item.value, decimals)
        percentage = 0.0
        if supply_whole > 0:
            percentage = clamp_percentage(balance_whole / supply_whole * 100)
        return Holder(
            address=item.address.hash,
            balance=str(balance_whole),
            percentage=round(percentage, 2),
            raw_balance=item.value,
        )
