"""Alpha Vantage company-overview provider."""

from __future__ import annotations

from typing import Any

from dividendsync.dates import parse_date
from dividendsync.errors import DividendSyncError, DividendSyncErrorCode
from dividendsync.models.dividend import Frequency, ProviderDividend
from dividendsync.providers.base import BaseDividendProvider, to_float

ALPHA_VANTAGE_URL = "https://www.alphavantage.co/query"


class AlphaVantageProvider(BaseDividendProvider):
    """Dividend per share and yield from ``function=OVERVIEW``.

    Alpha Vantage answers throttled requests with HTTP 200 and a ``Note`` or
    ``Information`` message instead of data; those are raised as rate limits.
    """

    name = "alphavantage"

    def __init__(self, api_key: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.api_key = api_key or "demo"

    def _request(self, symbol: str) -> tuple[str, dict[str, Any]]:
        return (
            ALPHA_VANTAGE_URL,
            {"function": "OVERVIEW", "symbol": symbol, "apikey": self.api_key},
        )

    def parse(self, symbol: str, payload: Any) -> ProviderDividend | None:
        if not isinstance(payload, dict):
            raise TypeError(f"expected object, got {type(payload).__name__}")
        if "Note" in payload or "Information" in payload:
            raise DividendSyncError(
                f"{self.name}: {payload.get('Note') or payload.get('Information')}",
                code=DividendSyncErrorCode.RATE_LIMITED,
                retryable=True,
            )
        if not payload:
            return None

        annual = to_float(payload.get("DividendPerShare"))
        if annual <= 0:
            return None
        return ProviderDividend(
            source=self.name,
            annual_dividend=annual,
            dividend_yield=_yield_percent(payload.get("DividendYield")),
            frequency=Frequency.QUARTERLY,
            ex_date=parse_date(payload.get("ExDividendDate")),
            payment_date=parse_date(payload.get("DividendDate")),
        )


def _yield_percent(raw: Any) -> float:
    # "0.0052" is a fraction; "0.52%" is already a percentage.
    if isinstance(raw, str) and raw.strip().endswith("%"):
        return to_float(raw)
    return to_float(raw) * 100
