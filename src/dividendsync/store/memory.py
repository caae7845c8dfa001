"""In-memory stores - used by tests and local dry runs."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from dividendsync.errors import DividendSyncError, DividendSyncErrorCode
from dividendsync.models.job import JobStatus, PortfolioJob
from dividendsync.models.position import Position
from dividendsync.models.record import DividendRecord
from dividendsync.store.base import DividendRecordStore, JobStore, PositionSource


class InMemoryDividendStore(DividendRecordStore):
    """Dict-backed record store.

    ``calls`` counts invocations per write method so tests can assert how
    many writes a reconciliation issued. ``fail_on`` names methods that
    should raise ``STORE_ERROR``.
    """

    def __init__(self, records: Sequence[DividendRecord] = ()) -> None:
        self._records: dict[tuple[str, str, str], DividendRecord] = {}
        self._next_id = 1
        for record in records:
            self._put(record)
        self.calls: Counter[str] = Counter()
        self.fail_on: set[str] = set()

    @property
    def write_calls(self) -> int:
        return self.calls["insert_many"] + self.calls["upsert"] + self.calls["deactivate"]

    def get(self, user_id: str, portfolio_id: str, symbol: str) -> DividendRecord | None:
        return self._records.get((user_id, portfolio_id, symbol))

    def all_records(self) -> list[DividendRecord]:
        return list(self._records.values())

    # --- DividendRecordStore ---

    async def list_active(self, user_id, portfolio_id):
        return [r for r in await self.list_all(user_id, portfolio_id) if r.is_active]

    async def list_all(self, user_id, portfolio_id):
        self._maybe_fail("list_all")
        return [
            r for r in self._records.values()
            if r.user_id == user_id and r.portfolio_id == portfolio_id
        ]

    async def insert_many(self, records):
        self.calls["insert_many"] += 1
        self._maybe_fail("insert_many")
        seen = set(self._records)
        for record in records:
            if record.key in seen:
                raise DividendSyncError(
                    f"duplicate key {record.key}",
                    code=DividendSyncErrorCode.STORE_ERROR,
                )
            seen.add(record.key)
        for record in records:
            self._put(record)

    async def upsert(self, record):
        self.calls["upsert"] += 1
        self._maybe_fail("upsert")
        self._put(record)

    async def deactivate(self, user_id, portfolio_id, exclude_symbols):
        self.calls["deactivate"] += 1
        self._maybe_fail("deactivate")
        keep = set(exclude_symbols)
        for key, record in list(self._records.items()):
            if (
                record.user_id == user_id
                and record.portfolio_id == portfolio_id
                and record.is_active
                and record.symbol not in keep
            ):
                self._records[key] = record.with_changes(is_active=False)

    # --- internals ---

    def _put(self, record: DividendRecord) -> None:
        current = self._records.get(record.key)
        if record.id is None:
            if current is not None and current.id is not None:
                record = record.with_changes(id=current.id)
            else:
                record = record.with_changes(id=str(self._next_id))
                self._next_id += 1
        self._records[record.key] = record

    def _maybe_fail(self, method: str) -> None:
        if method in self.fail_on:
            raise DividendSyncError(
                f"simulated {method} failure",
                code=DividendSyncErrorCode.STORE_ERROR,
            )


class InMemoryJobStore(JobStore):
    """Dict-backed job store keyed by job id."""

    def __init__(self, jobs: Sequence[PortfolioJob] = ()) -> None:
        self._jobs: dict[str, PortfolioJob] = {}
        self.updates: list[tuple[str, dict[str, Any]]] = []
        for i, job in enumerate(jobs, start=1):
            job_id = job.id or f"job-{i}"
            self._jobs[job_id] = PortfolioJob(
                id=job_id,
                user_id=job.user_id,
                portfolio_id=job.portfolio_id,
                status=job.status,
                last_run_at=job.last_run_at,
                next_run_at=job.next_run_at,
            )

    def get(self, job_id: str) -> PortfolioJob:
        return self._jobs[job_id]

    async def list_due(self, now: datetime) -> list[PortfolioJob]:
        return [
            job for job in self._jobs.values()
            if job.next_run_at is not None and job.next_run_at <= now
        ]

    async def find_job(self, user_id, portfolio_id):
        for job in self._jobs.values():
            if job.user_id == user_id and job.portfolio_id == portfolio_id:
                return job
        return None

    async def update_job(self, job_id, fields):
        self.updates.append((job_id, dict(fields)))
        job = self._jobs[job_id]
        changes: dict[str, Any] = {}
        if "status" in fields:
            changes["status"] = JobStatus(fields["status"])
        for name in ("last_run_at", "next_run_at"):
            if name in fields:
                changes[name] = fields[name]
        self._jobs[job_id] = PortfolioJob(
            id=job.id,
            user_id=job.user_id,
            portfolio_id=job.portfolio_id,
            status=changes.get("status", job.status),
            last_run_at=changes.get("last_run_at", job.last_run_at),
            next_run_at=changes.get("next_run_at", job.next_run_at),
        )


class InMemoryPositionSource(PositionSource):
    """Positions pre-loaded per portfolio; ``set_failure`` makes one raise."""

    def __init__(self) -> None:
        self._positions: dict[str, list[Position]] = {}
        self._failures: dict[str, Exception] = {}
        self.calls: Counter[str] = Counter()

    def set_positions(self, portfolio_id: str, positions: Sequence[Position]) -> None:
        self._positions[portfolio_id] = list(positions)

    def set_failure(self, portfolio_id: str, exc: Exception) -> None:
        self._failures[portfolio_id] = exc

    def clear_failure(self, portfolio_id: str) -> None:
        self._failures.pop(portfolio_id, None)

    async def list_positions(self, user_id, portfolio_id):
        self.calls[portfolio_id] += 1
        if portfolio_id in self._failures:
            raise self._failures[portfolio_id]
        return list(self._positions.get(portfolio_id, []))
