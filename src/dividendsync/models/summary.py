"""Portfolio dividend summary data models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any

import pandas as pd

from dividendsync.dates import iso_or_none
from dividendsync.models.dividend import Frequency
from dividendsync.models.record import DividendRecord


@dataclass(frozen=True)
class DividendContribution:
    """One dividend-paying symbol's share of portfolio income.

    Attributes:
        symbol: Normalised ticker.
        original_symbols: Raw broker symbols that mapped to this ticker.
        shares: Total shares across all lots.
        annual_dividend: Annual dividend per share.
        quarterly_dividend: Quarterly dividend per share.
        annual_income: ``annual_dividend * shares``.
        quarterly_income: ``quarterly_dividend * shares``.
        dividend_yield: Yield in percent.
        frequency: Payment frequency.
        position_value: Market value of all lots.
        ex_date: Next ex-dividend date.
        payment_date: Payment date.
        source: Resolver origin of the dividend fact.
    """

    symbol: str
    original_symbols: tuple[str, ...]
    shares: float
    annual_dividend: float
    quarterly_dividend: float
    annual_income: float
    quarterly_income: float
    dividend_yield: float
    frequency: Frequency
    position_value: float = 0.0
    ex_date: date | None = None
    payment_date: date | None = None
    source: str = "curated"

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "originalSymbols": list(self.original_symbols),
            "shares": self.shares,
            "annualDividend": self.annual_dividend,
            "quarterlyDividend": self.quarterly_dividend,
            "totalAnnualIncome": self.annual_income,
            "totalQuarterlyIncome": self.quarterly_income,
            "yield": self.dividend_yield,
            "frequency": self.frequency.value,
            "currentValue": self.position_value,
            "exDate": iso_or_none(self.ex_date),
            "paymentDate": iso_or_none(self.payment_date),
            "apiSource": self.source,
        }


@dataclass(frozen=True)
class CalculationStats:
    """Counters describing one calculator run."""

    total_positions: int = 0
    total_analyzed: int = 0
    symbols_matched: int = 0
    dividend_payers_found: int = 0
    newly_detected: int = 0
    api_calls_made: int = 0
    cache_hits: int = 0
    curated_hits: int = 0

    @property
    def coverage_percentage(self) -> float:
        if self.total_analyzed == 0:
            return 0.0
        return round(self.symbols_matched / self.total_analyzed * 100, 2)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalPositions": self.total_positions,
            "totalAnalyzed": self.total_analyzed,
            "symbolsMatched": self.symbols_matched,
            "dividendPayersFound": self.dividend_payers_found,
            "newlyDetected": self.newly_detected,
            "apiCallsMade": self.api_calls_made,
            "cacheHits": self.cache_hits,
            "databaseHits": self.curated_hits,
            "coveragePercentage": self.coverage_percentage,
        }


@dataclass(frozen=True)
class PortfolioDividendSummary:
    """Aggregate dividend income and yield for one set of positions."""

    total_annual_income: float = 0.0
    total_quarterly_income: float = 0.0
    total_portfolio_value: float = 0.0
    portfolio_yield: float = 0.0
    dividend_paying_stocks: list[DividendContribution] = field(default_factory=list)
    stats: CalculationStats = field(default_factory=CalculationStats)

    @property
    def monthly_average(self) -> float:
        return self.total_annual_income / 12

    @property
    def symbols(self) -> set[str]:
        return {c.symbol for c in self.dividend_paying_stocks}

    def to_records(
        self,
        user_id: str,
        portfolio_id: str,
        detected_at: datetime | None = None,
    ) -> list[DividendRecord]:
        """Turn contributions into store records for reconciliation."""
        return [
            DividendRecord(
                user_id=user_id,
                portfolio_id=portfolio_id,
                symbol=c.symbol,
                company_name=c.symbol,
                annual_dividend=c.annual_dividend,
                dividend_yield=c.dividend_yield,
                frequency=c.frequency,
                ex_dividend_date=c.ex_date,
                payment_date=c.payment_date,
                shares_owned=c.shares,
                estimated_annual_income=c.annual_income,
                detection_source=c.source,
                detected_at=detected_at,
                is_active=True,
            )
            for c in self.dividend_paying_stocks
        ]

    def to_frame(self) -> pd.DataFrame:
        """Contributions as a DataFrame, one row per dividend-paying symbol."""
        columns = [f for f in DividendContribution.__dataclass_fields__]
        if not self.dividend_paying_stocks:
            return pd.DataFrame(columns=columns)
        rows = []
        for c in self.dividend_paying_stocks:
            row = asdict(c)
            row["frequency"] = c.frequency.value
            row["original_symbols"] = ",".join(c.original_symbols)
            rows.append(row)
        return pd.DataFrame(rows, columns=columns).set_index("symbol", drop=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalAnnualIncome": self.total_annual_income,
            "totalQuarterlyIncome": self.total_quarterly_income,
            "totalPortfolioValue": self.total_portfolio_value,
            "portfolioYield": self.portfolio_yield,
            "monthlyAverage": self.monthly_average,
            "dividendPayingStocks": [c.to_dict() for c in self.dividend_paying_stocks],
            "stats": self.stats.to_dict(),
        }
