"""24h trading volume share per pair."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from loguru import logger

from tokenscan.parsers.dexscreener.client import DexScreenerClient
from tokenscan.parsers.dexscreener.models import DexScreenerPair, DexScreenerToken
from tokenscan.parsers.exceptions import UpstreamError
from tokenscan.parsers.scan_types import CancelToken, PartialDataWarning, normalize_address

_CENT = Decimal("0.01")


@dataclass
class VolumePair:
    dexId: str
    pairAddress: str
    baseToken: DexScreenerToken
    quoteToken: DexScreenerToken
    volume: Decimal  # 24h, USD
    percentage: Decimal  # share of total_volume, 2 decimals


@dataclass
class VolumeResult:
    pairs: list[VolumePair]  # descending by volume
    total_volume: Decimal
    dex_count: int
    warnings: list[PartialDataWarning] = field(default_factory=list)


def volume_share(volume: Decimal, total: Decimal) -> Decimal:
    return (volume / total * 100).quantize(_CENT, rounding=ROUND_HALF_UP)


class VolumeAggregator:
    def __init__(self, dexscreener: DexScreenerClient) -> None:
        self._dexscreener = dexscreener

    async def get_volume_data(
        self, address: str, *, cancel: CancelToken | None = None
    ) -> VolumeResult:
        token = normalize_address(address)
        warnings: list[PartialDataWarning] = []
        pairs = await self._dexscreener.get_token_pairs(token, warnings, cancel=cancel)

        # zero-volume pairs are normal (idle pools), not a data problem
        active: list[DexScreenerPair] = [
            p for p in pairs if p.volume_h24 is not None and p.volume_h24 > 0
        ]
        if not active:
            raise UpstreamError(f"No volume data found for {token}")

        active.sort(key=lambda p: p.volume_h24, reverse=True)
        total = sum((p.volume_h24 for p in active), Decimal(0))

        volume_pairs = [
            VolumePair(
                dexId=p.dexId,
                pairAddress=p.pairAddress,
                baseToken=p.baseToken,
                quoteToken=p.quoteToken,
                volume=p.volume_h24,
                percentage=volume_share(p.volume_h24, total),
            )
            for p in active
        ]
        logger.info(f"[VOLUME] {token[:10]}: {len(volume_pairs)} pairs, total=${total:,.2f}")
        return VolumeResult(
            pairs=volume_pairs,
            total_volume=total,
            dex_count=len(volume_pairs),
            warnings=warnings,
        )
