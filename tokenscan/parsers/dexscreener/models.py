from decimal import Decimal

from pydantic import BaseModel, Field


class DexScreenerToken(BaseModel):
    address: str | None = None
    name: str | None = None
    symbol: str = Field(min_length=1)

    model_config = {"extra": "ignore"}


class DexScreenerVolume(BaseModel):
    m5: Decimal | None = None
    h1: Decimal | None = None
    h6: Decimal | None = None
    h24: Decimal | None = None

    model_config = {"extra": "ignore"}


class DexScreenerLiquidity(BaseModel):
    usd: Decimal | None = None
    base: Decimal | None = None
    quote: Decimal | None = None

    model_config = {"extra": "ignore"}


class DexScreenerPair(BaseModel):
    """A trading pair with the identity fields every aggregate needs."""

    chainId: str = ""
    dexId: str = Field(min_length=1)
    pairAddress: str = Field(min_length=1)
    url: str | None = None
    baseToken: DexScreenerToken
    quoteToken: DexScreenerToken
    priceUsd: str | None = None
    volume: DexScreenerVolume | None = None
    liquidity: DexScreenerLiquidity | None = None
    fdv: Decimal | None = None
    pairCreatedAt: int | None = None

    model_config = {"extra": "ignore"}

    @property
    def liquidity_usd(self) -> Decimal | None:
        if self.liquidity is None or self.liquidity.usd is None:
            return None
        return self.liquidity.usd if self.liquidity.usd.is_finite() else None

    @property
    def volume_h24(self) -> Decimal | None:
        if self.volume is None or self.volume.h24 is None:
            return None
        return self.volume.h24 if self.volume.h24.is_finite() else None
