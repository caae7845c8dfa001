"""Storage and position-source interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from dividendsync.models.job import PortfolioJob
from dividendsync.models.position import Position
from dividendsync.models.record import DividendRecord

DIVIDEND_CONFLICT_KEY = "user_id,portfolio_id,symbol"


class DividendRecordStore(ABC):
    """Persistence for detected dividend records.

    Records are keyed by (``user_id``, ``portfolio_id``, ``symbol``) and are
    never deleted. Implementations raise ``DividendSyncError`` with code
    ``STORE_ERROR`` on failure.
    """

    @abstractmethod
    async def list_active(self, user_id: str, portfolio_id: str) -> list[DividendRecord]:
        ...

    @abstractmethod
    async def list_all(self, user_id: str, portfolio_id: str) -> list[DividendRecord]:
        """Active and inactive records."""
        ...

    @abstractmethod
    async def insert_many(self, records: Sequence[DividendRecord]) -> None:
        ...

    @abstractmethod
    async def upsert(self, record: DividendRecord) -> None:
        """Insert or overwrite on the (user_id, portfolio_id, symbol) key."""
        ...

    @abstractmethod
    async def deactivate(
        self,
        user_id: str,
        portfolio_id: str,
        exclude_symbols: Sequence[str],
    ) -> None:
        """Set ``is_active = False`` on active records not in ``exclude_symbols``."""
        ...


class JobStore(ABC):
    """Persistence for scheduled portfolio detection jobs."""

    @abstractmethod
    async def list_due(self, now: datetime) -> list[PortfolioJob]:
        """Jobs whose ``next_run_at`` is set and at/before ``now``.

        Jobs with no ``next_run_at`` are never due.
        """
        ...

    @abstractmethod
    async def find_job(self, user_id: str, portfolio_id: str) -> PortfolioJob | None:
        ...

    @abstractmethod
    async def update_job(self, job_id: str, fields: dict[str, Any]) -> None:
        ...


class PositionSource(ABC):
    """Current position snapshot for a portfolio."""

    @abstractmethod
    async def list_positions(self, user_id: str, portfolio_id: str) -> list[Position]:
        ...
