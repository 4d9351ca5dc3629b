"""Blockscout v2 REST client: paginated token holder listing."""

from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from tokenscan.parsers.blockscout.models import BlockscoutHolderPage
from tokenscan.parsers.exceptions import UpstreamError
from tokenscan.parsers.fetcher import RetryableFetcher
from tokenscan.parsers.scan_types import CancelToken


class BlockscoutClient:
    """Holder listing via ``/tokens/{address}/holders`` with cursor params."""

    def __init__(self, fetcher: RetryableFetcher, api_url: str) -> None:
        self._fetcher = fetcher
        self._api_url = api_url.rstrip("/")

    async def get_holders_page(
        self,
        token_address: str,
        page_params: dict[str, Any] | None = None,
        *,
        cancel: CancelToken | None = None,
    ) -> BlockscoutHolderPage:
        """Fetch one holder page. ``page_params`` is the previous page's ``next_page_params``."""
        url = f"{self._api_url}/tokens/{token_address}/holders"
        data = await self._fetcher.get_json(url, params=page_params or None, cancel=cancel)
        try:
            page = BlockscoutHolderPage.model_validate(data)
        except PydanticValidationError as e:
            raise UpstreamError(f"Malformed holders page for {token_address}") from e
        logger.debug(
            f"[HOLDERS] page for {token_address[:10]}: {len(page.items)} items, "
            f"next={'yes' if page.next_page_params else 'no'}"
        )
        return page
