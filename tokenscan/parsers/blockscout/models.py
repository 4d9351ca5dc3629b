from typing import Any

from pydantic import BaseModel, Field, field_validator

from tokenscan.parsers.units import parse_raw_amount


class BlockscoutAddress(BaseModel):
    hash: str = Field(min_length=1)

    model_config = {"extra": "ignore"}


class BlockscoutHolderItem(BaseModel):
    """One holder row. ``value`` is the raw integer balance as a string."""

    address: BlockscoutAddress
    value: int
    percentage: float | None = None

    model_config = {"extra": "ignore"}

    @field_validator("value", mode="before")
    @classmethod
    def _parse_value(cls, v: Any) -> int:
        parsed = parse_raw_amount(v)
        if parsed is None:
            raise ValueError(f"unparseable balance {v!r}")
        return parsed


class BlockscoutHolderPage(BaseModel):
    """Raw page envelope. Items stay untyped so one bad row can't sink the page."""

    items: list[Any]
    next_page_params: dict[str, Any] | None = None
    total_count: int | None = None

    model_config = {"extra": "ignore"}
