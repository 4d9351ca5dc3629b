"""Scan endpoints: burns, holders, liquidity, volume (JSON or CSV)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from tokenscan import export
from tokenscan.api.dependencies import get_services, scan_cancel_token
from tokenscan.api.limiter import limiter
from tokenscan.config.settings import settings
from tokenscan.parsers.burn_aggregator import BurnResult
from tokenscan.parsers.holder_aggregator import HolderResult
from tokenscan.parsers.liquidity_aggregator import LiquidityResult
from tokenscan.parsers.scan_types import CancelToken, PartialDataWarning
from tokenscan.parsers.services import ScanServices
from tokenscan.parsers.volume_aggregator import VolumeResult

router = APIRouter(prefix="/api/v1", tags=["scans"])

FORMAT_PATTERN = "^(json|csv)$"


class WarningOut(BaseModel):
    source: str
    reason: str


class BurnRecordOut(BaseModel):
    address: str
    amount: str
    available: bool


class BurnResponse(BaseModel):
    name: str
    symbol: str
    decimals: int
    total_supply: str
    total_burned: str
    burn_percentage: str
    burn_details: list[BurnRecordOut]
    unavailable: list[str]
    warnings: list[WarningOut]


class HolderOut(BaseModel):
    address: str
    balance: str
    percentage: float


class HoldersResponse(BaseModel):
    holders: list[HolderOut]
    total_holders: int
    total_supply: str
    top10_percentage: float
    warnings: list[WarningOut]


class PairOut(BaseModel):
    dex_id: str
    pair_address: str
    base_symbol: str
    quote_symbol: str
    liquidity_usd: str | None = None
    volume_h24: str | None = None
    percentage: str | None = None


class LiquidityResponse(BaseModel):
    pairs: list[PairOut]
    warnings: list[WarningOut]


class VolumeResponse(BaseModel):
    pairs: list[PairOut]
    total_volume: str
    dex_count: int
    warnings: list[WarningOut]


def _warnings(items: list[PartialDataWarning]) -> list[WarningOut]:
    # upstream detail text stays in the logs
    return [WarningOut(source=w.source, reason=w.reason) for w in items]


def _csv(body: str, filename: str) -> PlainTextResponse:
    media_type = "text/plain" if filename.endswith(".txt") else "text/csv"
    return PlainTextResponse(
        body,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def burn_response(result: BurnResult) -> BurnResponse:
    return BurnResponse(
        name=result.name,
        symbol=result.symbol,
        decimals=result.decimals,
        total_supply=result.total_supply,
        total_burned=f"{result.total_burned:.2f}",
        burn_percentage=result.burn_percentage,
        burn_details=[
            BurnRecordOut(address=d.address, amount=f"{d.amount:.2f}", available=d.available)
            for d in result.burn_details
        ],
        unavailable=list(result.unavailable),
        warnings=_warnings(result.warnings),
    )


def holders_response(result: HolderResult) -> HoldersResponse:
    return HoldersResponse(
        holders=[
            HolderOut(address=h.address, balance=h.balance, percentage=h.percentage)
            for h in result.holders
        ],
        total_holders=result.total_holders,
        total_supply=result.total_supply,
        top10_percentage=result.top10_percentage,
        warnings=_warnings(result.warnings),
    )


def liquidity_response(result: LiquidityResult) -> LiquidityResponse:
    return LiquidityResponse(
        pairs=[
            PairOut(
                dex_id=p.dexId,
                pair_address=p.pairAddress,
                base_symbol=p.baseToken.symbol,
                quote_symbol=p.quoteToken.symbol,
                liquidity_usd=str(p.liquidity_usd),
                volume_h24=str(p.volume_h24) if p.volume_h24 is not None else None,
            )
            for p in result.pairs
        ],
        warnings=_warnings(result.warnings),
    )


def volume_response(result: VolumeResult) -> VolumeResponse:
    return VolumeResponse(
        pairs=[
            PairOut(
                dex_id=p.dexId,
                pair_address=p.pairAddress,
                base_symbol=p.baseToken.symbol,
                quote_symbol=p.quoteToken.symbol,
                volume_h24=str(p.volume),
                percentage=f"{p.percentage:.2f}",
            )
            for p in result.pairs
        ],
        total_volume=str(result.total_volume),
        dex_count=result.dex_count,
        warnings=_warnings(result.warnings),
    )


@router.get("/burns", response_model=BurnResponse)
@limiter.limit(settings.dashboard_rate_limit)
async def scan_burns(
    request: Request,
    name: str = Query(..., min_length=1, max_length=32),
    address: str | None = Query(None, max_length=64),
    format: str = Query("json", pattern=FORMAT_PATTERN),
    services: ScanServices = Depends(get_services),
    cancel: CancelToken = Depends(scan_cancel_token),
):
    """Burned supply of the native asset (``name`` = native symbol) or an ERC20."""
    result = await services.burns.scan(name, address, cancel=cancel)
    if format == "csv":
        return _csv(export.burns_to_text(result, address), export.export_filename(result.name, "burns"))
    return burn_response(result)


@router.get("/holders/{address}", response_model=HoldersResponse)
@limiter.limit(settings.dashboard_rate_limit)
async def scan_holders(
    request: Request,
    address: str,
    name: str = Query("token", max_length=32),
    format: str = Query("json", pattern=FORMAT_PATTERN),
    services: ScanServices = Depends(get_services),
    cancel: CancelToken = Depends(scan_cancel_token),
):
    result = await services.holders.get_token_holders(address, cancel=cancel)
    if format == "csv":
        return _csv(export.holders_to_csv(result), export.export_filename(name, "holders"))
    return holders_response(result)


@router.get("/liquidity/{address}", response_model=LiquidityResponse)
@limiter.limit(settings.dashboard_rate_limit)
async def scan_liquidity(
    request: Request,
    address: str,
    name: str = Query("token", max_length=32),
    format: str = Query("json", pattern=FORMAT_PATTERN),
    services: ScanServices = Depends(get_services),
    cancel: CancelToken = Depends(scan_cancel_token),
):
    result = await services.liquidity.get_pairs_data(address, cancel=cancel)
    if format == "csv":
        return _csv(export.liquidity_to_csv(result), export.export_filename(name, "liquidity"))
    return liquidity_response(result)


@router.get("/volume/{address}", response_model=VolumeResponse)
@limiter.limit(settings.dashboard_rate_limit)
async def scan_volume(
    request: Request,
    address: str,
    name: str = Query("token", max_length=32),
    format: str = Query("json", pattern=FORMAT_PATTERN),
    services: ScanServices = Depends(get_services),
    cancel: CancelToken = Depends(scan_cancel_token),
):
    result = await services.volume.get_volume_data(address, cancel=cancel)
    if format == "csv":
        return _csv(export.volume_to_csv(result), export.export_filename(name, "volume"))
    return volume_response(result)
