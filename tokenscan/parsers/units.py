"""Raw-integer ↔ human-scale conversions and percentage helpers."""

from decimal import Decimal, InvalidOperation, localcontext

# uint256 has 78 digits; keep enough precision to divide it exactly
_PRECISION = 100


def to_human_scale(raw: int, decimals: int) -> Decimal:
    """Raw integer balance divided by 10**decimals, without float rounding."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(raw) / (Decimal(10) ** decimals)


def to_whole_units(raw: int, decimals: int) -> int:
    """Integer division by 10**decimals (fractional part truncated)."""
    return raw // (10 ** decimals)


def parse_raw_amount(value: object) -> int | None:
    """Parse an upstream integer amount (int, decimal string or 0x-hex)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    try:
        parsed = int(text, 16) if text.lower().startswith("0x") else int(text)
    except ValueError:
        return None
    return parsed if parsed >= 0 else None


def clamp_percentage(value: float) -> float:
    if value != value:  # NaN
        return 0.0
    return max(0.0, min(100.0, value))


def percentage_of(part: Decimal, whole: Decimal) -> Decimal | None:
    """``part / whole * 100``, or None when ``whole`` is zero or non-finite."""
    try:
        if not whole.is_finite() or whole <= 0:
            return None
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            return part / whole * 100
    except InvalidOperation:
        return None


def format_amount(value: Decimal, places: int = 2) -> str:
    """Thousands-separated display string, e.g. ``1,234,567.89``."""
    return f"{value:,.{places}f}"
