"""Supabase-backed stores for dividend records, jobs and positions.

Tables:

- ``detected_dividends``: one row per (user_id, portfolio_id, symbol).
- ``dividend_detection_jobs``: scheduled detection jobs.
- ``portfolio_positions``: synced broker positions.

The supabase client is synchronous; every query runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from supabase import Client, create_client

from dividendsync.errors import DividendSyncError, DividendSyncErrorCode
from dividendsync.models.job import PortfolioJob
from dividendsync.models.position import Position
from dividendsync.models.record import DividendRecord
from dividendsync.store.base import (
    DIVIDEND_CONFLICT_KEY,
    DividendRecordStore,
    JobStore,
    PositionSource,
)

logger = logging.getLogger(__name__)

DIVIDENDS_TABLE = "detected_dividends"
JOBS_TABLE = "dividend_detection_jobs"
POSITIONS_TABLE = "portfolio_positions"


def create_supabase_client(url: str | None, key: str | None) -> Client:
    if not url or not key:
        raise DividendSyncError(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set",
            code=DividendSyncErrorCode.INVALID_REQUEST,
        )
    return create_client(url, key)


class _SupabaseTable:
    table_name = ""
    error_code = DividendSyncErrorCode.STORE_ERROR

    def __init__(self, client: Client) -> None:
        self.client = client

    def _table(self):
        return self.client.table(self.table_name)

    async def _execute(self, op: str, build: Callable[[], Any]) -> list[dict[str, Any]]:
        def run() -> list[dict[str, Any]]:
            return build().execute().data or []

        try:
            return await asyncio.to_thread(run)
        except Exception as exc:
            logger.error("%s %s failed: %s", self.table_name, op, exc)
            raise DividendSyncError(
                f"{self.table_name} {op} failed: {exc}",
                code=self.error_code,
                retryable=True,
            ) from exc


class SupabaseDividendStore(_SupabaseTable, DividendRecordStore):
    """``detected_dividends`` table."""

    table_name = DIVIDENDS_TABLE

    async def list_active(self, user_id, portfolio_id):
        rows = await self._execute(
            "list_active",
            lambda: self._table()
            .select("*")
            .eq("user_id", user_id)
            .eq("portfolio_id", portfolio_id)
            .eq("is_active", True),
        )
        return [DividendRecord.from_row(r) for r in rows]

    async def list_all(self, user_id, portfolio_id):
        rows = await self._execute(
            "list_all",
            lambda: self._table()
            .select("*")
            .eq("user_id", user_id)
            .eq("portfolio_id", portfolio_id),
        )
        return [DividendRecord.from_row(r) for r in rows]

    async def insert_many(self, records: Sequence[DividendRecord]) -> None:
        if not records:
            return
        rows = [_without_id(r.to_row()) for r in records]
        await self._execute("insert", lambda: self._table().insert(rows))

    async def upsert(self, record: DividendRecord) -> None:
        row = _without_id(record.to_row())
        await self._execute(
            "upsert",
            lambda: self._table().upsert(row, on_conflict=DIVIDEND_CONFLICT_KEY),
        )

    async def deactivate(self, user_id, portfolio_id, exclude_symbols):
        def build():
            query = (
                self._table()
                .update({"is_active": False})
                .eq("user_id", user_id)
                .eq("portfolio_id", portfolio_id)
                .eq("is_active", True)
            )
            if exclude_symbols:
                query = query.not_.in_("symbol", list(exclude_symbols))
            return query

        await self._execute("deactivate", build)


class SupabaseJobStore(_SupabaseTable, JobStore):
    """``dividend_detection_jobs`` table."""

    table_name = JOBS_TABLE

    async def list_due(self, now: datetime) -> list[PortfolioJob]:
        rows = await self._execute(
            "list_due",
            lambda: self._table().select("*").lte("next_run_at", now.isoformat()),
        )
        return [PortfolioJob.from_row(r) for r in rows]

    async def find_job(self, user_id, portfolio_id):
        rows = await self._execute(
            "find_job",
            lambda: self._table()
            .select("*")
            .eq("user_id", user_id)
            .eq("portfolio_id", portfolio_id)
            .limit(1),
        )
        return PortfolioJob.from_row(rows[0]) if rows else None

    async def update_job(self, job_id, fields):
        payload = {
            k: v.isoformat() if isinstance(v, datetime) else v
            for k, v in fields.items()
        }
        await self._execute(
            "update_job",
            lambda: self._table().update(payload).eq("id", job_id),
        )


class SupabasePositionSource(_SupabaseTable, PositionSource):
    """``portfolio_positions`` table, as last synced from the broker."""

    table_name = POSITIONS_TABLE
    error_code = DividendSyncErrorCode.POSITION_FETCH_FAILED

    async def list_positions(self, user_id, portfolio_id):
        rows = await self._execute(
            "list_positions",
            lambda: self._table()
            .select("symbol, quantity, current_price, market_value, average_price")
            .eq("user_id", user_id)
            .eq("portfolio_id", portfolio_id),
        )
        return [Position.from_row(r) for r in rows]


def _without_id(row: dict[str, Any]) -> dict[str, Any]:
    row.pop("id", None)
    return row
