"""Explicitly constructed scan services.

One ``ScanServices`` per process (or per test) replaces hidden singletons:
build it from ``Settings``, pass it to whoever scans, close it on shutdown.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from loguru import logger

from tokenscan.config.settings import Settings
from tokenscan.parsers.blockscout.client import BlockscoutClient
from tokenscan.parsers.burn_aggregator import BurnAggregator, NativeAsset
from tokenscan.parsers.dexscreener.client import DexScreenerClient
from tokenscan.parsers.fetcher import RetryableFetcher, RetryPolicy
from tokenscan.parsers.holder_aggregator import HolderAggregator
from tokenscan.parsers.liquidity_aggregator import LiquidityAggregator
from tokenscan.parsers.rate_limiter import RateLimiter
from tokenscan.parsers.rpc.client import EvmRpcClient
from tokenscan.parsers.volume_aggregator import VolumeAggregator


@dataclass
class ScanServices:
    http: httpx.AsyncClient
    burns: BurnAggregator
    holders: HolderAggregator
    liquidity: LiquidityAggregator
    volume: VolumeAggregator

    async def close(self) -> None:
        await self.http.aclose()


def build_services(settings: Settings, http: httpx.AsyncClient | None = None) -> ScanServices:
    policy = RetryPolicy(
        attempts=settings.retry_attempts,
        delay_sec=settings.retry_delay_sec,
        timeout_sec=settings.query_timeout_sec,
    )
    http = http or httpx.AsyncClient(
        timeout=settings.query_timeout_sec,
        headers={"Accept": "application/json"},
        follow_redirects=True,
    )

    # one limiter per upstream, shared by every aggregator that hits it
    rpc = EvmRpcClient(
        RetryableFetcher(policy, http, RateLimiter(settings.rpc_max_rps)), settings.rpc_url
    )
    explorer = BlockscoutClient(
        RetryableFetcher(policy, http, RateLimiter(settings.scan_max_rps)), settings.scan_api_url
    )
    dexscreener = DexScreenerClient(
        RetryableFetcher(policy, http, RateLimiter(settings.dexscreener_max_rps)),
        settings.dexscreener_api_url,
    )

    services = ScanServices(
        http=http,
        burns=BurnAggregator(
            rpc,
            settings.burn_address_list,
            NativeAsset(
                name=settings.native_token_name,
                symbol=settings.native_token_symbol,
                decimals=settings.native_token_decimals,
            ),
        ),
        holders=HolderAggregator(
            rpc,
            explorer,
            target=settings.holders_target,
            page_delay_sec=settings.holders_page_delay_sec,
        ),
        liquidity=LiquidityAggregator(dexscreener),
        volume=VolumeAggregator(dexscreener),
    )
    logger.debug(
        f"[SERVICES] rpc={settings.rpc_url} scan={settings.scan_api_url} "
        f"burn_addresses={len(settings.burn_address_list)}"
    )
    return services
