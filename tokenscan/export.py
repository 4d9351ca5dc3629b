"""Delimited-text exports of scan results (the dashboard's download files)."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence

from tokenscan.parsers.burn_aggregator import BurnResult
from tokenscan.parsers.holder_aggregator import HolderResult
from tokenscan.parsers.liquidity_aggregator import LiquidityResult
from tokenscan.parsers.volume_aggregator import VolumeResult

EXPORT_KINDS = {
    "burns": "burned.txt",
    "holders": "holders.csv",
    "liquidity": "liquidity.csv",
    "volume": "volume.csv",
}


def _to_csv(header: Sequence[str], rows: Iterable[Sequence[object]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def export_filename(token_name: str, kind: str) -> str:
    stem = (token_name or "token").strip().lower().replace(" ", "-") or "token"
    return f"{stem}-{EXPORT_KINDS[kind]}"


def burns_to_text(result: BurnResult, address: str | None = None) -> str:
    """Single headerless line: ``name,address_or_symbol,total_burned``."""
    return f"{result.name.lower()},{address or result.symbol},{result.total_burned:.2f}\n"


def holders_to_csv(result: HolderResult) -> str:
    return _to_csv(
        ["Address", "Balance", "Percentage"],
        ([h.address, h.balance, f"{h.percentage:.2f}"] for h in result.holders),
    )


def liquidity_to_csv(result: LiquidityResult) -> str:
    return _to_csv(
        ["DEX", "Pair Address", "Base Token", "Quote Token", "Liquidity (USD)"],
        (
            [p.dexId, p.pairAddress, p.baseToken.symbol, p.quoteToken.symbol, p.liquidity_usd]
            for p in result.pairs
        ),
    )


def volume_to_csv(result: VolumeResult) -> str:
    return _to_csv(
        ["DEX", "Pair Address", "Base Token", "Quote Token", "24h Volume", "Percentage"],
        (
            [p.dexId, p.pairAddress, p.baseToken.symbol, p.quoteToken.symbol, p.volume, p.percentage]
            for p in result.pairs
        ),
    )
