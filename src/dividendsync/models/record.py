"""Persisted dividend record data model."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any

from dividendsync.dates import iso_or_none, parse_date, parse_timestamp
from dividendsync.models.dividend import Frequency
from dividendsync.symbols import normalize


@dataclass(frozen=True)
class DividendRecord:
    """Per-portfolio, per-symbol dividend detection record.

    Uniquely keyed by (``user_id``, ``portfolio_id``, ``symbol``). Records are
    never deleted; a sold position flips ``is_active`` to False.

    Attributes:
        user_id: Owning user.
        portfolio_id: Owning portfolio.
        symbol: Normalised ticker.
        annual_dividend: Annual dividend per share.
        dividend_yield: Yield in percent.
        frequency: Payment frequency.
        shares_owned: Shares held when detected.
        estimated_annual_income: ``annual_dividend * shares_owned``.
        company_name: Display name (defaults to the symbol).
        ex_dividend_date: Ex-dividend date.
        payment_date: Payment date.
        detection_source: Resolver origin ("curated", provider name, ...).
        detected_at: When the record was (re)written.
        is_active: False once the symbol is no longer held.
        id: Store-assigned identifier, if any.
    """

    user_id: str
    portfolio_id: str
    symbol: str
    annual_dividend: float
    dividend_yield: float
    frequency: Frequency = Frequency.QUARTERLY
    shares_owned: float | None = None
    estimated_annual_income: float = 0.0
    company_name: str | None = None
    ex_dividend_date: date | None = None
    payment_date: date | None = None
    detection_source: str = "curated"
    detected_at: datetime | None = None
    is_active: bool = True
    id: str | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.user_id, self.portfolio_id, self.symbol)

    def with_changes(self, **changes: Any) -> DividendRecord:
        return replace(self, **changes)

    def to_row(self) -> dict[str, Any]:
        """Row shape of the ``detected_dividends`` table."""
        row: dict[str, Any] = {
            "user_id": self.user_id,
            "portfolio_id": self.portfolio_id,
            "symbol": self.symbol,
            "company_name": self.company_name or self.symbol,
            "annual_dividend": self.annual_dividend,
            "dividend_yield": self.dividend_yield,
            "frequency": self.frequency.value,
            "ex_dividend_date": iso_or_none(self.ex_dividend_date),
            "payment_date": iso_or_none(self.payment_date),
            "shares_owned": self.shares_owned,
            "estimated_annual_income": self.estimated_annual_income,
            "detection_source": self.detection_source,
            "detected_at": self.detected_at.isoformat() if self.detected_at else None,
            "is_active": self.is_active,
        }
        if self.id is not None:
            row["id"] = self.id
        return row

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> DividendRecord:
        shares = row.get("shares_owned")
        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            user_id=str(row["user_id"]),
            portfolio_id=str(row["portfolio_id"]),
            symbol=str(row["symbol"]),
            company_name=row.get("company_name"),
            annual_dividend=float(row.get("annual_dividend") or 0.0),
            dividend_yield=float(row.get("dividend_yield") or 0.0),
            frequency=Frequency.parse(row.get("frequency")),
            ex_dividend_date=parse_date(row.get("ex_dividend_date")),
            payment_date=parse_date(row.get("payment_date")),
            shares_owned=float(shares) if shares is not None else None,
            estimated_annual_income=float(row.get("estimated_annual_income") or 0.0),
            detection_source=row.get("detection_source") or "curated",
            detected_at=parse_timestamp(row.get("detected_at")),
            is_active=bool(row.get("is_active", True)),
        )

    @classmethod
    def from_payload(
        cls,
        user_id: str,
        portfolio_id: str,
        payload: dict[str, Any],
    ) -> DividendRecord:
        """Build from a client-computed dividend entry (camelCase or snake_case)."""
        annual = float(payload.get("annualDividend") or payload.get("annual_dividend") or 0.0)
        shares = payload.get("shares", payload.get("shares_owned"))
        shares_owned = float(shares) if shares is not None else None
        income = payload.get("totalAnnualIncome", payload.get("estimated_annual_income"))
        if income is None:
            income = annual * (shares_owned or 0.0)
        symbol = normalize(str(payload["symbol"]))
        return cls(
            user_id=user_id,
            portfolio_id=portfolio_id,
            symbol=symbol,
            company_name=payload.get("company") or payload.get("company_name") or symbol,
            annual_dividend=annual,
            dividend_yield=float(payload.get("yield") or payload.get("dividend_yield") or 0.0),
            frequency=Frequency.parse(payload.get("frequency")),
            ex_dividend_date=parse_date(payload.get("exDate") or payload.get("ex_dividend_date")),
            payment_date=parse_date(payload.get("paymentDate") or payload.get("payment_date")),
            shares_owned=shares_owned,
            estimated_annual_income=float(income),
            detection_source=payload.get("apiSource") or payload.get("detection_source") or "manual",
        )
