"""Liquidity distribution across trading pairs."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger

from tokenscan.parsers.dexscreener.client import DexScreenerClient
from tokenscan.parsers.dexscreener.models import DexScreenerPair
from tokenscan.parsers.exceptions import UpstreamError
from tokenscan.parsers.scan_types import (
    CancelToken,
    PartialDataWarning,
    normalize_address,
    warn,
)


@dataclass
class LiquidityResult:
    pairs: list[DexScreenerPair]  # liquidity.usd > 0, descending
    warnings: list[PartialDataWarning] = field(default_factory=list)

    @property
    def total_liquidity_usd(self) -> Decimal:
        return sum((p.liquidity_usd for p in self.pairs), Decimal(0))


class LiquidityAggregator:
    def __init__(self, dexscreener: DexScreenerClient) -> None:
        self._dexscreener = dexscreener

    async def get_pairs_data(
        self, address: str, *, cancel: CancelToken | None = None
    ) -> LiquidityResult:
        token = normalize_address(address)
        warnings: list[PartialDataWarning] = []
        pairs = await self._dexscreener.get_token_pairs(token, warnings, cancel=cancel)

        valid: list[DexScreenerPair] = []
        for pair in pairs:
            usd = pair.liquidity_usd
            if usd is None or usd <= 0:
                warn(warnings, "liquidity", f"dropped pair {pair.pairAddress} without positive USD liquidity")
                continue
            valid.append(pair)

        if not valid:
            raise UpstreamError(f"No valid liquidity pairs found for {token}")

        valid.sort(key=lambda p: p.liquidity_usd, reverse=True)
        logger.info(f"[LIQUIDITY] {token[:10]}: {len(valid)} pairs, top={valid[0].dexId}")
        return LiquidityResult(pairs=valid, warnings=warnings)
