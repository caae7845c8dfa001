"""Brokerage position data model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Position:
    """Held quantity of a symbol as reported by a position source.

    Attributes:
        symbol: Raw ticker as reported by the broker (may carry suffixes).
        quantity: Share count.
        current_price: Latest price per share.
        average_price: Average cost per share.
        market_value: Reported market value; derived when missing.
    """

    symbol: str
    quantity: float
    current_price: float = 0.0
    average_price: float = 0.0
    market_value: float | None = None

    @property
    def value(self) -> float:
        """Market value, falling back to quantity x current price."""
        if self.market_value is not None:
            return self.market_value
        return self.quantity * self.current_price

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Position:
        """Build from a store row (snake_case) or broker payload (camelCase)."""
        symbol = row.get("symbol") or row.get("ticker") or ""
        market_value = _first(row, "market_value", "marketValue")
        return cls(
            symbol=str(symbol),
            quantity=float(row.get("quantity") or 0.0),
            current_price=float(_first(row, "current_price", "currentPrice") or 0.0),
            average_price=float(_first(row, "average_price", "averagePrice") or 0.0),
            market_value=float(market_value) if market_value is not None else None,
        )


def _first(row: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return None
