from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from tokenscan.parsers.dexscreener.models import DexScreenerPair
from tokenscan.parsers.exceptions import UpstreamError
from tokenscan.parsers.fetcher import RetryableFetcher
from tokenscan.parsers.scan_types import CancelToken, PartialDataWarning, warn


class DexScreenerClient:
    """Async REST client for the DexScreener token-pairs endpoint (no auth)."""

    def __init__(self, fetcher: RetryableFetcher, api_url: str) -> None:
        self._fetcher = fetcher
        self._api_url = api_url.rstrip("/")

    async def get_raw_pairs(
        self, token_address: str, *, cancel: CancelToken | None = None
    ) -> list[Any]:
        """Fetch the ``pairs`` array for a token, unvalidated."""
        data = await self._fetcher.get_json(f"{self._api_url}/{token_address}", cancel=cancel)
        if not isinstance(data, dict):
            raise UpstreamError("Invalid API response format")
        pairs = data.get("pairs")
        if not isinstance(pairs, list):
            # DexScreener answers {"pairs": null} for unknown tokens
            raise UpstreamError(f"No pairs found for token {token_address}")
        return pairs

    async def get_token_pairs(
        self,
        token_address: str,
        warnings: list[PartialDataWarning],
        *,
        cancel: CancelToken | None = None,
    ) -> list[DexScreenerPair]:
        """Fetch and decode pairs; malformed entries are skipped into ``warnings``."""
        raw_pairs = await self.get_raw_pairs(token_address, cancel=cancel)
        pairs: list[DexScreenerPair] = []
        for index, raw in enumerate(raw_pairs):
            try:
                pairs.append(DexScreenerPair.model_validate(raw))
            except PydanticValidationError as e:
                warn(warnings, "dexscreener", f"skipped malformed pair #{index}", _first_error(e))
        logger.debug(f"[DEXSCREENER] {token_address[:10]}: {len(pairs)}/{len(raw_pairs)} pairs decoded")
        return pairs


def _first_error(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', '')}"
