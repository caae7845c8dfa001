"""Dividend fact data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class Frequency(Enum):
    """Dividend payment frequency."""

    QUARTERLY = "quarterly"
    MONTHLY = "monthly"
    SEMI_ANNUAL = "semi-annual"
    ANNUAL = "annual"

    @property
    def payments_per_year(self) -> int:
        return _PAYMENTS_PER_YEAR[self]

    @classmethod
    def parse(cls, value: str | Frequency | None) -> Frequency:
        """Lenient parse; unknown values default to quarterly."""
        if isinstance(value, Frequency):
            return value
        if not isinstance(value, str):
            return cls.QUARTERLY
        key = value.strip().lower().replace("_", "-").replace(" ", "-")
        return _ALIASES.get(key, cls.QUARTERLY)

    @classmethod
    def from_count(cls, payments: int) -> Frequency:
        """Guess frequency from the number of payments seen in a year."""
        if payments >= 10:
            return cls.MONTHLY
        if payments > 3:
            return cls.QUARTERLY
        if payments > 1:
            return cls.SEMI_ANNUAL
        return cls.ANNUAL


_PAYMENTS_PER_YEAR = {
    Frequency.QUARTERLY: 4,
    Frequency.MONTHLY: 12,
    Frequency.SEMI_ANNUAL: 2,
    Frequency.ANNUAL: 1,
}

_ALIASES = {
    "quarterly": Frequency.QUARTERLY,
    "quarter": Frequency.QUARTERLY,
    "monthly": Frequency.MONTHLY,
    "month": Frequency.MONTHLY,
    "semi-annual": Frequency.SEMI_ANNUAL,
    "semiannual": Frequency.SEMI_ANNUAL,
    "semi-annually": Frequency.SEMI_ANNUAL,
    "annual": Frequency.ANNUAL,
    "annually": Frequency.ANNUAL,
    "yearly": Frequency.ANNUAL,
}


@dataclass(frozen=True)
class DividendFact:
    """Resolved per-share dividend metadata for one symbol.

    ``annual == 0`` marks a confirmed non-payer. That is a valid fact and is
    cached like any other.

    Attributes:
        annual: Total dividend per share per year.
        quarterly: Per-share amount per quarter (``annual / 4``).
        dividend_yield: Yield in percent.
        frequency: Payment frequency.
        next_ex_date: Next (or most recent known) ex-dividend date.
        payment_date: Payment date.
        is_etf: Whether the symbol is an ETF.
        source: Where the fact came from ("curated", a provider name, "none").
    """

    annual: float
    quarterly: float
    dividend_yield: float = 0.0
    frequency: Frequency = Frequency.QUARTERLY
    next_ex_date: date | None = None
    payment_date: date | None = None
    is_etf: bool = False
    source: str = "curated"

    @property
    def pays_dividend(self) -> bool:
        return self.annual > 0

    @classmethod
    def from_annual(
        cls,
        annual: float,
        dividend_yield: float = 0.0,
        frequency: Frequency | str | None = Frequency.QUARTERLY,
        next_ex_date: date | None = None,
        payment_date: date | None = None,
        is_etf: bool = False,
        source: str = "curated",
    ) -> DividendFact:
        return cls(
            annual=annual,
            quarterly=annual / 4,
            dividend_yield=dividend_yield,
            frequency=Frequency.parse(frequency),
            next_ex_date=next_ex_date,
            payment_date=payment_date,
            is_etf=is_etf,
            source=source,
        )

    @classmethod
    def none(cls, source: str = "none") -> DividendFact:
        """Zero-dividend sentinel for confirmed non-payers."""
        return cls(annual=0.0, quarterly=0.0, source=source)


@dataclass(frozen=True)
class ProviderDividend:
    """Normalised result from a single third-party provider.

    Every provider validates its own payload shape and returns this; the
    resolver only ever sees this type.

    Attributes:
        source: Provider name (the variant tag).
        annual_dividend: Annual dividend per share.
        dividend_yield: Yield in percent (0 when the provider has no price).
        frequency: Payment frequency.
        ex_date: Ex-dividend date.
        payment_date: Payment date.
    """

    source: str
    annual_dividend: float
    dividend_yield: float = 0.0
    frequency: Frequency = Frequency.QUARTERLY
    ex_date: date | None = None
    payment_date: date | None = None

    def to_fact(self) -> DividendFact:
        return DividendFact.from_annual(
            self.annual_dividend,
            dividend_yield=self.dividend_yield,
            frequency=self.frequency,
            next_ex_date=self.ex_date,
            payment_date=self.payment_date,
            source=self.source,
        )
