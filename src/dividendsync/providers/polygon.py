"""Polygon.io reference-dividends provider."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from dividendsync.dates import parse_date
from dividendsync.models.dividend import Frequency, ProviderDividend
from dividendsync.providers.base import BaseDividendProvider, to_float

POLYGON_DIVIDENDS_URL = "https://api.polygon.io/v3/reference/dividends"

_FREQUENCY_CODES = {
    1: Frequency.ANNUAL,
    2: Frequency.SEMI_ANNUAL,
    4: Frequency.QUARTERLY,
    12: Frequency.MONTHLY,
}


class PolygonProvider(BaseDividendProvider):
    """Sum one year of cash dividends from ``/v3/reference/dividends``."""

    name = "polygon"

    def __init__(
        self,
        api_key: str | None = None,
        lookback_days: int = 365,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.api_key = api_key or ""
        self.lookback_days = lookback_days

    def _request(self, symbol: str) -> tuple[str, dict[str, Any]]:
        end = date.today()
        start = end - timedelta(days=self.lookback_days)
        return (
            POLYGON_DIVIDENDS_URL,
            {
                "ticker": symbol,
                "ex_dividend_date.gte": start.isoformat(),
                "ex_dividend_date.lte": end.isoformat(),
                "order": "desc",
                "limit": 20,
                "apiKey": self.api_key,
            },
        )

    def parse(self, symbol: str, payload: Any) -> ProviderDividend | None:
        results = payload.get("results") or []
        results = [r for r in results if to_float(r.get("cash_amount")) > 0]
        if not results:
            return None

        annual = sum(to_float(r["cash_amount"]) for r in results)
        latest = max(results, key=lambda r: r.get("ex_dividend_date") or "")
        frequency = _FREQUENCY_CODES.get(
            latest.get("frequency"), Frequency.from_count(len(results))
        )
        return ProviderDividend(
            source=self.name,
            annual_dividend=annual,
            frequency=frequency,
            ex_date=parse_date(latest.get("ex_dividend_date")),
            payment_date=parse_date(latest.get("pay_date")),
        )
