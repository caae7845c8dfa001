"""Trading212 REST position source."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import certifi
import requests

from dividendsync.errors import DividendSyncError, DividendSyncErrorCode
from dividendsync.models.position import Position
from dividendsync.store.base import PositionSource

logger = logging.getLogger(__name__)

TRADING212_BASE_URL = "https://live.trading212.com/api/v0/equity"


class Trading212PositionSource(PositionSource):
    """Open positions from ``GET /portfolio``.

    One API key maps to one account, so ``user_id``/``portfolio_id`` only
    label the request in logs. HTTP 429 is raised as ``RATE_LIMITED`` with
    the server's retry hint; wrap this source in a ``PositionSyncGuard`` to
    get the per-user cooldown.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = TRADING212_BASE_URL,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.verify = certifi.where()
        session.headers.update({"Authorization": api_key})
        self.session = session

    async def list_positions(self, user_id: str, portfolio_id: str) -> list[Position]:
        payload = await asyncio.to_thread(self._get, "/portfolio")
        if not isinstance(payload, list):
            raise DividendSyncError(
                "Trading212 /portfolio returned an unexpected payload",
                code=DividendSyncErrorCode.PARSE_ERROR,
            )
        positions = [Position.from_row(item) for item in payload]
        logger.info(
            "Fetched %d Trading212 positions for %s/%s", len(positions), user_id, portfolio_id
        )
        return positions

    def _get(self, path: str) -> Any:
        try:
            resp = self.session.get(f"{self.base_url}{path}", timeout=self.timeout)
        except requests.RequestException as exc:
            raise DividendSyncError(
                f"Trading212 request failed: {exc}",
                code=DividendSyncErrorCode.POSITION_FETCH_FAILED,
                retryable=True,
            ) from exc

        if resp.status_code == 429:
            raise DividendSyncError(
                "Trading212 rate limit reached",
                code=DividendSyncErrorCode.RATE_LIMITED,
                retryable=True,
                retry_after=_retry_after(resp.headers),
            )
        if resp.status_code in (401, 403):
            raise DividendSyncError(
                "Trading212 rejected the API key",
                code=DividendSyncErrorCode.AUTH_FAILED,
            )
        if not resp.ok:
            raise DividendSyncError(
                f"Trading212 HTTP {resp.status_code}",
                code=DividendSyncErrorCode.POSITION_FETCH_FAILED,
                retryable=True,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise DividendSyncError(
                "Trading212 returned invalid JSON",
                code=DividendSyncErrorCode.PARSE_ERROR,
            ) from exc


def _retry_after(headers: Any) -> float | None:
    for name in ("Retry-After", "x-ratelimit-reset"):
        raw = headers.get(name)
        if raw is None:
            continue
        try:
            return float(raw)
        except ValueError:
            continue
    return None
