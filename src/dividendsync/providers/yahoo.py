"""Yahoo Finance chart-events provider (free, no key required)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from dividendsync.models.dividend import Frequency, ProviderDividend
from dividendsync.providers.base import BaseDividendProvider, to_float

YAHOO_CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart/{symbol}"


class YahooProvider(BaseDividendProvider):
    """Sum the last year of dividend events from the chart endpoint.

    Yield is derived from ``meta.regularMarketPrice`` when present.
    """

    name = "yahoo"

    def _request(self, symbol: str) -> tuple[str, dict[str, Any]]:
        return (
            YAHOO_CHART_URL.format(symbol=symbol),
            {"interval": "1d", "range": "1y", "events": "div,split"},
        )

    def parse(self, symbol: str, payload: Any) -> ProviderDividend | None:
        results = (payload.get("chart") or {}).get("result") or []
        if not results:
            return None
        result = results[0]
        dividends = (result.get("events") or {}).get("dividends") or {}
        events = sorted(
            (e for e in dividends.values() if to_float(e.get("amount")) > 0),
            key=lambda e: int(e["date"]),
        )
        if not events:
            return None

        annual = sum(to_float(e["amount"]) for e in events)
        price = to_float((result.get("meta") or {}).get("regularMarketPrice"))
        last = events[-1]
        return ProviderDividend(
            source=self.name,
            annual_dividend=annual,
            dividend_yield=annual / price * 100 if price > 0 else 0.0,
            frequency=Frequency.from_count(len(events)),
            ex_date=datetime.fromtimestamp(int(last["date"]), tz=timezone.utc).date(),
        )
