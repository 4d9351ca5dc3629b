"""Shared test fixtures: fake upstreams served through httpx.MockTransport."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from eth_abi import encode
from eth_utils import encode_hex

from tokenscan.config.settings import Settings
from tokenscan.parsers.rpc import erc20
from tokenscan.parsers.services import ScanServices, build_services

RPC_URL = "https://rpc.test"
SCAN_API_URL = "https://scan.test/api/v2"
DEX_API_URL = "https://dex.test/latest/dex/tokens"

TOKEN = "0x2fa878ab3f87cc1c9737fc071108f904c0b0c95d"
BURN_ZERO = "0x0000000000000000000000000000000000000000"
BURN_DEAD = "0x000000000000000000000000000000000000dEaD"
BURN_369 = "0x0000000000000000000000000000000000000369"

E18 = 10**18

_SELECTORS = {
    encode_hex(erc20.NAME): "name",
    encode_hex(erc20.SYMBOL): "symbol",
    encode_hex(erc20.DECIMALS): "decimals",
    encode_hex(erc20.TOTAL_SUPPLY): "totalSupply",
    encode_hex(erc20.BALANCE_OF): "balanceOf",
}


class FakeChain:
    """In-memory JSON-RPC node: native balances plus one ERC20 contract.

    ``failing`` holds field names ("name", "decimals", ...) or
    ``"balanceOf:<address>"`` / ``"native:<address>"`` keys that answer with
    an RPC error instead of a value. Keys in ``malformed`` answer with a
    non-hex result. ``balance_delay`` stalls every ``balanceOf`` response.
    """

    def __init__(
        self,
        *,
        name: str = "Incentive",
        symbol: str = "INC",
        decimals: int = 18,
        total_supply: int = 1_000 * E18,
        token_balances: dict[str, int] | None = None,
        native_balances: dict[str, int] | None = None,
        failing: set[str] | None = None,
        malformed: set[str] | None = None,
        balance_delay: float = 0.0,
    ) -> None:
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.total_supply = total_supply
        self.token_balances = {k.lower(): v for k, v in (token_balances or {}).items()}
        self.native_balances = {k.lower(): v for k, v in (native_balances or {}).items()}
        self.failing = failing or set()
        self.malformed = malformed or set()
        self.balance_delay = balance_delay
        self.calls: list[str] = []

    def handle(self, body: dict[str, Any]) -> dict[str, Any]:
        method = body["method"]
        if method == "eth_getBalance":
            address = body["params"][0].lower()
            self.calls.append(f"native:{address}")
            if f"native:{address}" in self.failing or "native" in self.failing:
                return self._error(body)
            return self._result(body, hex(self.native_balances.get(address, 0)))

        if method == "eth_call":
            data: str = body["params"][0]["data"]
            field = _SELECTORS.get(data[:10], "unknown")
            key = field
            if field == "balanceOf":
                owner = "0x" + data[-40:]
                key = f"balanceOf:{owner.lower()}"
            self.calls.append(key)
            if field in self.failing or key in self.failing:
                return self._error(body)
            if field in self.malformed or key in self.malformed:
                return self._result(body, "0xzz")
            return self._result(body, encode_hex(self._encode(field, key)))

        return self._error(body)

    def _encode(self, field: str, key: str) -> bytes:
        if field == "name":
            return encode(["string"], [self.name])
        if field == "symbol":
            return encode(["string"], [self.symbol])
        if field == "decimals":
            return encode(["uint8"], [self.decimals])
        if field == "totalSupply":
            return encode(["uint256"], [self.total_supply])
        owner = key.split(":", 1)[1]
        return encode(["uint256"], [self.token_balances.get(owner, 0)])

    @staticmethod
    def _result(body: dict[str, Any], result: Any) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "id": body.get("id"), "result": result}

    @staticmethod
    def _error(body: dict[str, Any]) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "id": body.get("id"), "error": {"code": -32000, "message": "execution reverted"}}


def holder_item(address: str, value: int | str) -> dict[str, Any]:
    return {"address": {"hash": address}, "value": str(value), "token_id": None}


def holder_pages(sizes: list[int], balance_start: int = 10_000) -> list[list[dict[str, Any]]]:
    """Pages of holders with strictly descending whole-token balances."""
    pages = []
    balance = balance_start
    counter = 0
    for size in sizes:
        page = []
        for _ in range(size):
            page.append(holder_item(f"0x{counter:040x}", balance * E18))
            balance -= 1
            counter += 1
        pages.append(page)
    return pages


class FakeExplorer:
    """Blockscout holder listing serving ``pages`` with ``page`` cursor params."""

    def __init__(
        self,
        pages: list[list[dict[str, Any]]],
        *,
        failing_pages: set[int] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.pages = pages
        self.failing_pages = failing_pages or set()
        self.delay = delay  # seconds each page response is held back
        self.requested: list[int] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        index = int(request.url.params.get("page", "0"))
        self.requested.append(index)
        if index in self.failing_pages:
            return httpx.Response(503, text="backend overloaded")
        items = self.pages[index] if index < len(self.pages) else []
        next_params = {"page": index + 1, "items_count": 50} if index + 1 < len(self.pages) else None
        total = sum(len(p) for p in self.pages)
        return httpx.Response(
            200, json={"items": items, "next_page_params": next_params, "total_count": total}
        )


def pair(
    dex: str,
    *,
    liquidity: Any = None,
    volume: Any = None,
    address: str | None = None,
    base: str = "INC",
    quote: str = "WPLS",
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "chainId": "pulsechain",
        "dexId": dex,
        "pairAddress": address or f"0xpair{dex}",
        "baseToken": {"address": TOKEN, "name": "Incentive", "symbol": base},
        "quoteToken": {"address": "0xA1077a294dDE1B09bB078844df40758a5D0f9a27", "symbol": quote},
    }
    if liquidity is not None:
        data["liquidity"] = {"usd": liquidity}
    if volume is not None:
        data["volume"] = {"h24": volume}
    return data


def make_transport(
    *,
    chain: FakeChain | None = None,
    explorer: FakeExplorer | None = None,
    dex_payload: Any = None,
    dex_status: int = 200,
) -> httpx.MockTransport:
    async def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url.startswith(RPC_URL) and chain is not None:
            body = json.loads(request.content)
            reply = chain.handle(body)
            if chain.balance_delay and body["method"] == "eth_call" and chain.calls[-1].startswith("balanceOf"):
                await asyncio.sleep(chain.balance_delay)
            return httpx.Response(200, json=reply)
        if url.startswith(SCAN_API_URL) and explorer is not None:
            response = explorer.handle(request)
            if explorer.delay:
                await asyncio.sleep(explorer.delay)
            return response
        if url.startswith(DEX_API_URL):
            if dex_status != 200:
                return httpx.Response(dex_status, text="upstream exploded: secret-internal-detail")
            return httpx.Response(200, json=dex_payload)
        return httpx.Response(404, json={"message": "not found"})

    return httpx.MockTransport(handler)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        rpc_url=RPC_URL,
        rpc_max_rps=0,
        scan_api_url=SCAN_API_URL,
        scan_max_rps=0,
        dexscreener_api_url=DEX_API_URL,
        dexscreener_max_rps=0,
        burn_addresses=f"{BURN_ZERO},{BURN_DEAD},{BURN_369}",
        query_timeout_sec=5.0,
        retry_attempts=3,
        retry_delay_sec=0.0,
        holders_target=200,
        holders_page_delay_sec=0.0,
    )


@pytest.fixture
def make_services(test_settings: Settings) -> Callable[..., ScanServices]:
    """Build ScanServices wired to fake upstreams."""

    def _make(**fakes: Any) -> ScanServices:
        http = httpx.AsyncClient(transport=make_transport(**fakes))
        return build_services(test_settings, http=http)

    return _make
