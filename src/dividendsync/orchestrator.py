"""DividendSyncOrchestrator - positions -> calculator -> reconciler -> job bookkeeping."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from dividendsync.calculator import PortfolioDividendCalculator
from dividendsync.errors import DividendSyncError, DividendSyncErrorCode
from dividendsync.models.job import JobResult, JobStatus, PortfolioJob, ReconcileResult
from dividendsync.models.record import DividendRecord
from dividendsync.models.summary import CalculationStats
from dividendsync.reconciler import DividendReconciler
from dividendsync.store.base import JobStore, PositionSource
from dividendsync.symbols import normalize_all

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DividendSyncOrchestrator:
    """Runs dividend detection for portfolio jobs.

    Jobs are isolated: a failure in one portfolio (positions unavailable,
    store error) marks that job ``failed`` with whatever stats were gathered
    and processing moves on to the next job.

    Usage::

        orch = create_orchestrator_from_env()
        results = asyncio.run(orch.run_due())
    """

    def __init__(
        self,
        positions: PositionSource,
        calculator: PortfolioDividendCalculator,
        reconciler: DividendReconciler,
        jobs: JobStore | None = None,
        run_interval: timedelta = timedelta(hours=6),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.positions = positions
        self.calculator = calculator
        self.reconciler = reconciler
        self.jobs = jobs
        self.run_interval = run_interval
        self.clock = clock or _utcnow

    async def run_portfolio(
        self,
        user_id: str,
        portfolio_id: str,
        job: PortfolioJob | None = None,
    ) -> JobResult:
        """Detect and persist dividends for one portfolio."""
        if job is None and self.jobs is not None:
            job = await self._find_job(user_id, portfolio_id)
        job_id = job.id if job is not None else None
        now = self.clock()
        await self._update_job(job_id, {"status": JobStatus.RUNNING.value, "updated_at": now})

        stats = CalculationStats()
        dividend_count = 0
        try:
            positions = await self.positions.list_positions(user_id, portfolio_id)
        except Exception as exc:
            return await self._fail(
                job_id, user_id, portfolio_id, exc, stats, dividend_count, now,
                default_code=DividendSyncErrorCode.POSITION_FETCH_FAILED,
            )

        try:
            summary = await self.calculator.calculate(positions)
            stats = summary.stats
            dividend_count = len(summary.dividend_paying_stocks)
            reconcile = await self.reconciler.reconcile(
                user_id,
                portfolio_id,
                summary.to_records(user_id, portfolio_id, detected_at=now),
                normalize_all(p.symbol for p in positions if p.quantity > 0),
            )
        except Exception as exc:
            return await self._fail(job_id, user_id, portfolio_id, exc, stats, dividend_count, now)

        await self._update_job(
            job_id,
            {
                "status": JobStatus.COMPLETED.value,
                "stocks_analyzed": stats.total_analyzed,
                "dividend_stocks_found": dividend_count,
                "last_run_at": now,
                "next_run_at": now + self.run_interval,
                "updated_at": now,
            },
        )
        logger.info(
            "Portfolio %s: %d analyzed, %d dividend stocks",
            portfolio_id,
            stats.total_analyzed,
            dividend_count,
        )
        return JobResult(
            user_id=user_id,
            portfolio_id=portfolio_id,
            success=True,
            status=JobStatus.COMPLETED,
            job_id=job_id,
            stocks_analyzed=stats.total_analyzed,
            dividend_stocks_found=dividend_count,
            analysis_stats=stats.to_dict(),
            reconcile=reconcile,
        )

    async def run(self, jobs: Sequence[PortfolioJob]) -> list[JobResult]:
        """Run every job in order; one job failing never stops the rest."""
        results: list[JobResult] = []
        for job in jobs:
            try:
                result = await self.run_portfolio(job.user_id, job.portfolio_id, job=job)
            except Exception as exc:
                logger.exception("Job %s crashed", job.id)
                result = JobResult(
                    user_id=job.user_id,
                    portfolio_id=job.portfolio_id,
                    success=False,
                    status=JobStatus.FAILED,
                    job_id=job.id,
                    error=str(exc),
                    error_code=DividendSyncErrorCode.PROVIDER_ERROR.value,
                )
            results.append(result)
        failed = sum(1 for r in results if not r.success)
        logger.info("Processed %d jobs (%d failed)", len(results), failed)
        return results

    async def run_due(self) -> list[JobResult]:
        """Run all jobs whose ``next_run_at`` has passed."""
        if self.jobs is None:
            raise DividendSyncError(
                "No job store configured",
                code=DividendSyncErrorCode.INVALID_REQUEST,
            )
        due = await self.jobs.list_due(self.clock())
        logger.info("Found %d due dividend detection jobs", len(due))
        return await self.run(due)

    async def save_dividend_data(
        self,
        user_id: str,
        portfolio_id: str,
        records: Sequence[DividendRecord | dict[str, Any]],
    ) -> ReconcileResult:
        """Persist client-computed dividend entries.

        Goes through the reconciler so unchanged entries are not rewritten.
        Nothing is deactivated: the caller's list need not be the full
        holding set.
        """
        computed = [
            r if isinstance(r, DividendRecord) else DividendRecord.from_payload(user_id, portfolio_id, r)
            for r in records
        ]
        return await self.reconciler.reconcile(user_id, portfolio_id, computed, None)

    # ------------------------------------------------------------ internals

    async def _fail(
        self,
        job_id: str | None,
        user_id: str,
        portfolio_id: str,
        exc: Exception,
        stats: CalculationStats,
        dividend_count: int,
        now: datetime,
        default_code: DividendSyncErrorCode = DividendSyncErrorCode.STORE_ERROR,
    ) -> JobResult:
        if isinstance(exc, DividendSyncError):
            code, message, retry_after = exc.code, exc.message, exc.retry_after
        else:
            code, message, retry_after = default_code, str(exc), None
        logger.error("Portfolio %s failed (%s): %s", portfolio_id, code.value, message)

        await self._update_job(
            job_id,
            {
                "status": JobStatus.FAILED.value,
                "stocks_analyzed": stats.total_analyzed,
                "dividend_stocks_found": dividend_count,
                "last_run_at": now,
                "next_run_at": now + self.run_interval,
                "updated_at": now,
            },
        )
        return JobResult(
            user_id=user_id,
            portfolio_id=portfolio_id,
            success=False,
            status=JobStatus.FAILED,
            job_id=job_id,
            stocks_analyzed=stats.total_analyzed,
            dividend_stocks_found=dividend_count,
            analysis_stats=stats.to_dict(),
            error=message,
            error_code=code.value,
            retry_after=retry_after,
        )

    async def _find_job(self, user_id: str, portfolio_id: str) -> PortfolioJob | None:
        try:
            return await self.jobs.find_job(user_id, portfolio_id)
        except Exception as exc:
            logger.warning("Job lookup for %s failed: %s", portfolio_id, exc)
            return None

    async def _update_job(self, job_id: str | None, fields: dict[str, Any]) -> None:
        if self.jobs is None or job_id is None:
            return
        try:
            await self.jobs.update_job(job_id, fields)
        except Exception as exc:
            # Bookkeeping failures do not change the job outcome.
            logger.error("Updating job %s failed: %s", job_id, exc)
