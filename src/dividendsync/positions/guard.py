"""Rate-limit cooldown for live position syncs."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from dividendsync.errors import DividendSyncError, DividendSyncErrorCode
from dividendsync.models.position import Position
from dividendsync.store.base import PositionSource

logger = logging.getLogger(__name__)


class PositionSyncGuard(PositionSource):
    """Wrap a position source with a per-user rate-limit cooldown.

    When the wrapped source raises ``RATE_LIMITED`` the user enters a
    cooldown of ``retry_after`` seconds (or ``cooldown_seconds`` when the
    source gave no hint). During the cooldown the source is not called: the
    last successful snapshot for that portfolio is served if there is one,
    otherwise ``RATE_LIMITED`` is raised with the remaining wait.

    Both maps are process-wide and unlocked; last write wins.
    """

    def __init__(
        self,
        source: PositionSource,
        cooldown_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.source = source
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock
        self._cooldown_until: dict[str, float] = {}
        self._last_positions: dict[tuple[str, str], list[Position]] = {}

    def retry_after(self, user_id: str) -> float | None:
        """Seconds left in the user's cooldown, or None if not limited."""
        until = self._cooldown_until.get(user_id)
        if until is None:
            return None
        remaining = until - self.clock()
        if remaining <= 0:
            del self._cooldown_until[user_id]
            return None
        return remaining

    async def list_positions(self, user_id: str, portfolio_id: str) -> list[Position]:
        remaining = self.retry_after(user_id)
        if remaining is not None:
            return self._fallback(user_id, portfolio_id, remaining)

        try:
            positions = await self.source.list_positions(user_id, portfolio_id)
        except DividendSyncError as exc:
            if not exc.is_rate_limited:
                raise
            wait = exc.retry_after if exc.retry_after is not None else self.cooldown_seconds
            self._cooldown_until[user_id] = self.clock() + wait
            logger.warning("Position sync rate limited for %s; cooling down %.0fs", user_id, wait)
            return self._fallback(user_id, portfolio_id, wait)

        self._last_positions[(user_id, portfolio_id)] = list(positions)
        return positions

    def _fallback(self, user_id: str, portfolio_id: str, remaining: float) -> list[Position]:
        cached = self._last_positions.get((user_id, portfolio_id))
        if cached is not None:
            logger.info("Serving cached positions for %s/%s during cooldown", user_id, portfolio_id)
            return list(cached)
        raise DividendSyncError(
            f"Rate limit reached. Please wait {remaining:.0f} seconds before syncing again.",
            code=DividendSyncErrorCode.RATE_LIMITED,
            retryable=True,
            retry_after=remaining,
        )
