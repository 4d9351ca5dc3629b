"""Burn totals: balances held at known burn addresses against supply.

Native asset: identity comes from settings and its "supply" is the native
balance of the first configured burn address. That mirrors how the
dashboard approximates native supply when no mint registry exists.

Contract token: name/symbol/decimals/totalSupply are read independently;
each failing read falls back to a default and is listed in
``TokenIdentity.unavailable`` instead of aborting the scan.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TypeVar

from loguru import logger

from tokenscan.parsers.exceptions import UpstreamError, ValidationError
from tokenscan.parsers.rpc.client import EvmRpcClient
from tokenscan.parsers.scan_types import (
    CancelToken,
    PartialDataWarning,
    TokenIdentity,
    normalize_address,
    warn,
)
from tokenscan.parsers.units import format_amount, percentage_of, to_human_scale

T = TypeVar("T")

DEFAULT_NAME = "Unknown"
DEFAULT_DECIMALS = 18


@dataclass(frozen=True)
class NativeAsset:
    name: str
    symbol: str
    decimals: int = 18


@dataclass
class BurnRecord:
    address: str  # checksummed
    amount: Decimal  # human-scale
    available: bool = True  # False when the balance read failed and 0 was assumed

    @property
    def amount_display(self) -> str:
        return format_amount(self.amount)


@dataclass
class BurnResult:
    name: str
    symbol: str
    decimals: int
    total_supply: str  # raw integer units
    total_burned: Decimal
    burn_percentage: str  # 2 decimals; may exceed 100 on decimal mismatches
    burn_details: list[BurnRecord]
    is_native: bool = False
    unavailable: tuple[str, ...] = ()
    warnings: list[PartialDataWarning] = field(default_factory=list)

    @property
    def total_burned_display(self) -> str:
        return format_amount(self.total_burned)

    @property
    def total_supply_human(self) -> Decimal:
        return to_human_scale(int(self.total_supply), self.decimals)


class BurnAggregator:
    def __init__(
        self,
        rpc: EvmRpcClient,
        burn_addresses: list[str],
        native: NativeAsset,
    ) -> None:
        if not burn_addresses:
            raise ValueError("at least one burn address is required")
        self._rpc = rpc
        self._burn_addresses = [normalize_address(a, "burn address") for a in burn_addresses]
        self._native = native

    @property
    def burn_addresses(self) -> list[str]:
        return list(self._burn_addresses)

    def is_native(self, name: str) -> bool:
        return name.strip().lower() == self._native.symbol.lower()

    async def scan(
        self,
        name: str,
        address: str | None = None,
        *,
        cancel: CancelToken | None = None,
    ) -> BurnResult:
        cancel = cancel or CancelToken()
        warnings: list[PartialDataWarning] = []
        native = self.is_native(name or "")

        if native:
            identity = await self._native_identity(cancel)
            token = None
        else:
            if not address:
                raise ValidationError("address required")
            token = normalize_address(address)
            identity = await self._contract_identity(token, warnings, cancel)

        details = await asyncio.gather(
            *(
                self._burn_balance(burn, token, identity.decimals, warnings, cancel)
                for burn in self._burn_addresses
            )
        )
        cancel.raise_if_cancelled()

        # sum the exact values, never the rounded display strings
        total_burned = sum((d.amount for d in details), Decimal(0))
        supply_human = to_human_scale(identity.total_supply, identity.decimals)
        pct = percentage_of(total_burned, supply_human)
        burn_percentage = f"{pct:.2f}" if pct is not None else "0.00"

        logger.info(
            f"[BURNS] {identity.symbol}: burned={format_amount(total_burned)} "
            f"({burn_percentage}%) across {len(details)} addresses"
        )
        return BurnResult(
            name=identity.name,
            symbol=identity.symbol,
            decimals=identity.decimals,
            total_supply=str(identity.total_supply),
            total_burned=total_burned,
            burn_percentage=burn_percentage,
            burn_details=list(details),
            is_native=native,
            unavailable=identity.unavailable,
            warnings=warnings,
        )

    async def _native_identity(self, cancel: CancelToken) -> TokenIdentity:
        # Supply failure here is fatal: UpstreamError propagates to the caller.
        supply = await self._rpc.get_balance(self._burn_addresses[0], cancel=cancel)
        return TokenIdentity(
            name=self._native.name,
            symbol=self._native.symbol,
            decimals=self._native.decimals,
            total_supply=supply,
        )

    async def _contract_identity(
        self, token: str, warnings: list[PartialDataWarning], cancel: CancelToken
    ) -> TokenIdentity:
        unavailable: list[str] = []

        async def read(field_name: str, op: Callable[[], Awaitable[T]], default: T) -> T:
            try:
                return await op()
            except UpstreamError as e:
                unavailable.append(field_name)
                warn(warnings, "burns", f"{field_name}() read failed, using {default!r}", str(e))
                return default

        name = await read("name", lambda: self._rpc.token_name(token, cancel=cancel), DEFAULT_NAME)
        symbol = await read("symbol", lambda: self._rpc.token_symbol(token, cancel=cancel), DEFAULT_NAME)
        decimals = await read(
            "decimals", lambda: self._rpc.token_decimals(token, cancel=cancel), DEFAULT_DECIMALS
        )
        total_supply = await read("totalSupply", lambda: self._rpc.total_supply(token, cancel=cancel), 0)

        if len(unavailable) == 4:
            raise UpstreamError(f"Token info unavailable for {token}")
        return TokenIdentity(
            name=name,
            symbol=symbol,
            decimals=decimals,
            total_supply=total_supply,
            unavailable=tuple(unavailable),
        )

    async def _burn_balance(
        self,
        burn: str,
        token: str | None,
        decimals: int,
        warnings: list[PartialDataWarning],
        cancel: CancelToken,
    ) -> BurnRecord:
        try:
            if token is None:
                raw = await self._rpc.get_balance(burn, cancel=cancel)
            else:
                raw = await self._rpc.balance_of(token, burn, cancel=cancel)
        except UpstreamError as e:
            warn(warnings, "burns", f"balance read failed for {burn}, counting 0", str(e))
            return BurnRecord(address=burn, amount=Decimal(0), available=False)
        return BurnRecord(address=burn, amount=to_human_scale(raw, decimals))
