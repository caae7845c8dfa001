"""Record stores, job stores and position sources."""

from dividendsync.store.base import (
    DIVIDEND_CONFLICT_KEY,
    DividendRecordStore,
    JobStore,
    PositionSource,
)
from dividendsync.store.memory import (
    InMemoryDividendStore,
    InMemoryJobStore,
    InMemoryPositionSource,
)

__all__ = [
    "DIVIDEND_CONFLICT_KEY",
    "DividendRecordStore",
    "JobStore",
    "PositionSource",
    "InMemoryDividendStore",
    "InMemoryJobStore",
    "InMemoryPositionSource",
]
