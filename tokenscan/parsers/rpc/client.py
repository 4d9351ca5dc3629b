"""EVM JSON-RPC client: native balances and ERC20 contract reads."""

from collections.abc import Callable
from typing import Any, TypeVar

from eth_utils import decode_hex
from loguru import logger

from tokenscan.parsers.exceptions import UpstreamError
from tokenscan.parsers.fetcher import RetryableFetcher
from tokenscan.parsers.rpc import erc20
from tokenscan.parsers.rpc.models import JsonRpcResponse
from tokenscan.parsers.scan_types import CancelToken
from tokenscan.parsers.units import parse_raw_amount

T = TypeVar("T")


class RpcError(UpstreamError):
    pass


def _decode_response(body: Any) -> Any:
    response = JsonRpcResponse.model_validate(body)
    if response.error is not None:
        raise RpcError(f"RPC error {response.error.code}: {response.error.message}")
    return response.result


def _balance_result(result: Any) -> int:
    balance = parse_raw_amount(result)
    if balance is None:
        raise UpstreamError(f"Malformed eth_getBalance result: {result!r}")
    return balance


def _call_result(result: Any) -> bytes:
    if not isinstance(result, str):
        raise UpstreamError(f"Malformed eth_call result: {result!r}")
    try:
        raw = decode_hex(result)
    except ValueError as e:
        raise UpstreamError(f"Non-hex eth_call result: {result[:66]!r}") from e
    if not raw:
        # no code at address, or a non-standard contract
        raise UpstreamError("Empty eth_call result")
    return raw


class EvmRpcClient:
    """Async JSON-RPC client. Every call goes through the shared RetryableFetcher."""

    def __init__(self, fetcher: RetryableFetcher, rpc_url: str) -> None:
        self._fetcher = fetcher
        self._rpc_url = rpc_url
        self._request_id = 0

    async def call(
        self,
        method: str,
        params: list[Any],
        *,
        parse: Callable[[Any], T] | None = None,
        cancel: CancelToken | None = None,
    ) -> Any:
        """Send one request. ``parse`` runs on the result inside the retry loop."""
        self._request_id += 1
        payload = {"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params}
        return await self._fetcher.post_json(
            self._rpc_url,
            payload,
            decode=_decode_response if parse is None else lambda body: parse(_decode_response(body)),
            label=f"RPC {method}",
            cancel=cancel,
        )

    async def get_balance(self, address: str, *, cancel: CancelToken | None = None) -> int:
        """Native coin balance in raw units (wei)."""
        return await self.call("eth_getBalance", [address, "latest"], parse=_balance_result, cancel=cancel)

    async def eth_call(self, to: str, data: str, *, cancel: CancelToken | None = None) -> bytes:
        return await self.call(
            "eth_call", [{"to": to, "data": data}, "latest"], parse=_call_result, cancel=cancel
        )

    # === ERC20 reads ===

    async def token_name(self, token: str, *, cancel: CancelToken | None = None) -> str:
        raw = await self.eth_call(token, erc20.call_data(erc20.NAME), cancel=cancel)
        return erc20.decode_text(raw, "name")

    async def token_symbol(self, token: str, *, cancel: CancelToken | None = None) -> str:
        raw = await self.eth_call(token, erc20.call_data(erc20.SYMBOL), cancel=cancel)
        return erc20.decode_text(raw, "symbol")

    async def token_decimals(self, token: str, *, cancel: CancelToken | None = None) -> int:
        raw = await self.eth_call(token, erc20.call_data(erc20.DECIMALS), cancel=cancel)
        decimals = erc20.decode_uint(raw, "decimals")
        if decimals > 255:
            raise UpstreamError(f"Implausible decimals() for {token}: {decimals}")
        return decimals

    async def total_supply(self, token: str, *, cancel: CancelToken | None = None) -> int:
        raw = await self.eth_call(token, erc20.call_data(erc20.TOTAL_SUPPLY), cancel=cancel)
        return erc20.decode_uint(raw, "totalSupply")

    async def balance_of(self, token: str, owner: str, *, cancel: CancelToken | None = None) -> int:
        raw = await self.eth_call(token, erc20.balance_of_data(owner), cancel=cancel)
        balance = erc20.decode_uint(raw, "balanceOf")
        logger.debug(f"[RPC] balanceOf({owner[:10]}) on {token[:10]} = {balance}")
        return balance
