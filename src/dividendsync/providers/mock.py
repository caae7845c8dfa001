"""Mock provider for testing - no network, no API keys."""

from __future__ import annotations

from collections import Counter

from dividendsync.models.dividend import Frequency, ProviderDividend
from dividendsync.providers.base import BaseDividendProvider


class MockProvider(BaseDividendProvider):
    """In-memory provider that returns pre-loaded dividend data.

    Use ``set_dividend`` to pre-load a result and ``set_failure`` to make a
    symbol raise. Unknown symbols return None. ``calls`` counts lookups per
    symbol so tests can assert how often the network would have been hit.
    """

    def __init__(self, name: str = "mock") -> None:
        self.name = name
        self.timeout = 0.0
        self._dividends: dict[str, ProviderDividend | None] = {}
        self._failures: dict[str, Exception] = {}
        self.calls: Counter[str] = Counter()

    # --- Pre-load helpers ---

    def set_dividend(
        self,
        symbol: str,
        annual: float,
        dividend_yield: float = 0.0,
        frequency: Frequency = Frequency.QUARTERLY,
        **kwargs,
    ) -> None:
        self._dividends[symbol.upper()] = ProviderDividend(
            source=self.name,
            annual_dividend=annual,
            dividend_yield=dividend_yield,
            frequency=frequency,
            **kwargs,
        )

    def set_no_dividend(self, symbol: str) -> None:
        self._dividends[symbol.upper()] = None

    def set_failure(self, symbol: str, exc: Exception) -> None:
        self._failures[symbol.upper()] = exc

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    # --- Provider implementation ---

    def fetch_dividend(self, symbol: str) -> ProviderDividend | None:
        key = symbol.upper()
        self.calls[key] += 1
        if key in self._failures:
            raise self._failures[key]
        result = self._dividends.get(key)
        if result is not None and result.annual_dividend <= 0:
            return None
        return result

    def _request(self, symbol):  # type: ignore[override]
        raise NotImplementedError

    def parse(self, symbol, payload):  # type: ignore[override]
        raise NotImplementedError

    def close(self) -> None:
        pass
