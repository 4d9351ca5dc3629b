"""Read-only token analytics: burns, holders, liquidity and volume."""

__version__ = "0.1.0"
