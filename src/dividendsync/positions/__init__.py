"""Position-sync boundary: broker sources and the rate-limit guard."""

from dividendsync.positions.guard import PositionSyncGuard
from dividendsync.positions.trading212 import Trading212PositionSource

__all__ = ["PositionSyncGuard", "Trading212PositionSource"]
