"""Detection job and result data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from dividendsync.dates import parse_timestamp


class JobStatus(Enum):
    """Lifecycle state of a portfolio detection job."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class PortfolioJob:
    """Scheduled dividend detection job for one portfolio."""

    user_id: str
    portfolio_id: str
    id: str | None = None
    status: JobStatus = JobStatus.PENDING
    last_run_at: datetime | None = None
    next_run_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> PortfolioJob:
        status = row.get("status") or JobStatus.PENDING.value
        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            user_id=str(row["user_id"]),
            portfolio_id=str(row["portfolio_id"]),
            status=JobStatus(status) if status in JobStatus._value2member_map_ else JobStatus.PENDING,
            last_run_at=parse_timestamp(row.get("last_run_at")),
            next_run_at=parse_timestamp(row.get("next_run_at")),
        )


@dataclass(frozen=True)
class ReconcileResult:
    """Symbols written by one reconciliation pass, per category."""

    inserted: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deactivated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def total_writes(self) -> int:
        return len(self.inserted) + len(self.updated) + len(self.deactivated)

    def to_dict(self) -> dict[str, Any]:
        return {
            "inserted": list(self.inserted),
            "updated": list(self.updated),
            "deactivated": list(self.deactivated),
            "unchanged": len(self.unchanged),
        }


@dataclass(frozen=True)
class JobResult:
    """Outcome of running detection for one portfolio.

    Partial stats are kept on failure so the job row still records how far
    the run got.
    """

    user_id: str
    portfolio_id: str
    success: bool
    status: JobStatus
    job_id: str | None = None
    stocks_analyzed: int = 0
    dividend_stocks_found: int = 0
    analysis_stats: dict[str, Any] = field(default_factory=dict)
    reconcile: ReconcileResult | None = None
    error: str | None = None
    error_code: str | None = None
    retry_after: float | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "portfolioId": self.portfolio_id,
            "userId": self.user_id,
            "success": self.success,
            "status": self.status.value,
            "stocksAnalyzed": self.stocks_analyzed,
            "dividendStocksFound": self.dividend_stocks_found,
            "analysisStats": dict(self.analysis_stats),
        }
        if self.reconcile is not None:
            body["reconcile"] = self.reconcile.to_dict()
        if self.error is not None:
            body["error"] = self.error
            body["errorCode"] = self.error_code
        if self.retry_after is not None:
            body["retryAfter"] = self.retry_after
        return body
