"""Dividend sync models."""

from dividendsync.models.dividend import DividendFact, Frequency, ProviderDividend
from dividendsync.models.job import JobResult, JobStatus, PortfolioJob, ReconcileResult
from dividendsync.models.position import Position
from dividendsync.models.record import DividendRecord
from dividendsync.models.summary import (
    CalculationStats,
    DividendContribution,
    PortfolioDividendSummary,
)

__all__ = [
    "Position",
    "Frequency",
    "DividendFact",
    "ProviderDividend",
    "DividendRecord",
    "DividendContribution",
    "CalculationStats",
    "PortfolioDividendSummary",
    "PortfolioJob",
    "JobStatus",
    "JobResult",
    "ReconcileResult",
]
