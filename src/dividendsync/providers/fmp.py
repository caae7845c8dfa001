"""Financial Modeling Prep company-profile provider."""

from __future__ import annotations

from typing import Any

from dividendsync.models.dividend import Frequency, ProviderDividend
from dividendsync.providers.base import BaseDividendProvider, to_float

FMP_PROFILE_URL = "https://financialmodelingprep.com/api/v3/profile/{symbol}"


class FMPProvider(BaseDividendProvider):
    """``lastDiv`` (annualised) and ``price`` from the profile endpoint."""

    name = "fmp"

    def __init__(self, api_key: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.api_key = api_key or "demo"

    def _request(self, symbol: str) -> tuple[str, dict[str, Any]]:
        return FMP_PROFILE_URL.format(symbol=symbol), {"apikey": self.api_key}

    def parse(self, symbol: str, payload: Any) -> ProviderDividend | None:
        if isinstance(payload, dict):
            # Error envelope, e.g. {"Error Message": "Invalid API KEY."}
            if payload.get("Error Message"):
                raise ValueError(payload["Error Message"])
            payload = [payload]
        if not payload:
            return None

        profile = payload[0]
        annual = to_float(profile.get("lastDiv"))
        if annual <= 0:
            return None
        price = to_float(profile.get("price"))
        return ProviderDividend(
            source=self.name,
            annual_dividend=annual,
            dividend_yield=annual / price * 100 if price > 0 else 0.0,
            frequency=Frequency.QUARTERLY,
        )
