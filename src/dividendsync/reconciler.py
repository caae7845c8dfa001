"""DividendReconciler - diff computed records against the store."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timezone

from dividendsync.errors import DividendSyncError, DividendSyncErrorCode
from dividendsync.models.job import ReconcileResult
from dividendsync.models.record import DividendRecord
from dividendsync.store.base import DividendRecordStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DividendReconciler:
    """Emit the minimal write-set that brings the store in line.

    For each computed record: insert if the symbol is new, upsert if the
    stored annual amount or yield differs by more than ``tolerance`` (or the
    share count changed, or the stored record was inactive), otherwise skip.
    Stored active records whose symbol is not in ``current_symbols`` are then
    deactivated. Running twice with the same input writes nothing the second
    time.

    Writes are not atomic. A store error aborts the pass and propagates;
    writes already made stay in place and the next run converges.
    """

    def __init__(
        self,
        store: DividendRecordStore,
        tolerance: float = 1e-9,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.tolerance = tolerance
        self.clock = clock or _utcnow

    def needs_update(self, stored: DividendRecord, computed: DividendRecord) -> bool:
        if not stored.is_active:
            return True
        if not self._close(stored.annual_dividend, computed.annual_dividend):
            return True
        if not self._close(stored.dividend_yield, computed.dividend_yield):
            return True
        return not self._same_shares(stored.shares_owned, computed.shares_owned)

    async def reconcile(
        self,
        user_id: str,
        portfolio_id: str,
        computed: Sequence[DividendRecord],
        current_symbols: Iterable[str] | None = None,
    ) -> ReconcileResult:
        """Apply inserts, updates and deactivations for one portfolio.

        ``current_symbols=None`` skips the deactivation step (used when the
        caller only has a partial view of holdings). Records sharing a symbol
        are collapsed, the last one wins.
        """
        latest = {record.symbol: record for record in computed}
        existing = {
            r.symbol: r
            for r in await self._call(self.store.list_all, user_id, portfolio_id)
        }
        now = self.clock()

        inserts: list[DividendRecord] = []
        updates: list[DividendRecord] = []
        unchanged: list[str] = []
        for record in latest.values():
            record = record.with_changes(
                user_id=user_id, portfolio_id=portfolio_id, is_active=True
            )
            stored = existing.get(record.symbol)
            if stored is None:
                inserts.append(record.with_changes(detected_at=record.detected_at or now))
            elif self.needs_update(stored, record):
                updates.append(record.with_changes(id=stored.id, detected_at=now))
            else:
                unchanged.append(record.symbol)

        if inserts:
            await self._call(self.store.insert_many, inserts)
        for record in updates:
            await self._call(self.store.upsert, record)

        deactivated: list[str] = []
        if current_symbols is not None:
            keep = {s.upper() for s in current_symbols}
            deactivated = sorted(
                s for s, r in existing.items() if r.is_active and s not in keep
            )
            if deactivated:
                await self._call(self.store.deactivate, user_id, portfolio_id, sorted(keep))

        result = ReconcileResult(
            inserted=[r.symbol for r in inserts],
            updated=[r.symbol for r in updates],
            deactivated=deactivated,
            unchanged=unchanged,
        )
        logger.info(
            "Reconciled %s/%s: %d inserted, %d updated, %d deactivated, %d unchanged",
            user_id,
            portfolio_id,
            len(result.inserted),
            len(result.updated),
            len(result.deactivated),
            len(result.unchanged),
        )
        return result

    # ------------------------------------------------------------ internals

    def _close(self, a: float, b: float) -> bool:
        return math.isclose(a, b, rel_tol=0.0, abs_tol=self.tolerance)

    def _same_shares(self, a: float | None, b: float | None) -> bool:
        if a is None or b is None:
            return a is b
        return self._close(a, b)

    @staticmethod
    async def _call(fn, *args):
        try:
            return await fn(*args)
        except DividendSyncError:
            raise
        except Exception as exc:
            raise DividendSyncError(
                f"Dividend store {getattr(fn, '__name__', 'call')} failed: {exc}",
                code=DividendSyncErrorCode.STORE_ERROR,
            ) from exc
