"""Abstract base class for third-party dividend data providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import certifi
import requests

from dividendsync.errors import DividendSyncError, DividendSyncErrorCode
from dividendsync.models.dividend import ProviderDividend

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "application/json, text/plain, */*",
}


class BaseDividendProvider(ABC):
    """Abstract base for all dividend providers.

    A provider answers one question: what does this symbol pay? Subclasses
    build the request (``_request``) and validate the response shape
    (``parse``). Transport failures, non-2xx responses and malformed payloads
    are all raised as ``DividendSyncError``; "no dividend data" is ``None``.
    """

    name: str = "base"

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.headers.update(DEFAULT_HEADERS)
            session.verify = certifi.where()
        self.session = session

    # --- Subclass hooks ---

    @abstractmethod
    def _request(self, symbol: str) -> tuple[str, dict[str, Any]]:
        """Return ``(url, params)`` for the symbol lookup."""
        ...

    @abstractmethod
    def parse(self, symbol: str, payload: Any) -> ProviderDividend | None:
        """Validate a decoded JSON payload and normalise it.

        Returns None when the payload is well-formed but carries no positive
        dividend.
        """
        ...

    # --- Public API ---

    def fetch_dividend(self, symbol: str) -> ProviderDividend | None:
        """Look up dividend data for an already-normalised symbol."""
        url, params = self._request(symbol)
        payload = self._get_json(url, params)
        try:
            result = self.parse(symbol, payload)
        except DividendSyncError:
            raise
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as exc:
            raise DividendSyncError(
                f"{self.name}: unexpected payload for {symbol}: {exc}",
                code=DividendSyncErrorCode.PARSE_ERROR,
                retryable=True,
            ) from exc
        if result is not None and result.annual_dividend <= 0:
            return None
        return result

    def close(self) -> None:
        self.session.close()

    # --- HTTP ---

    def _get_json(self, url: str, params: dict[str, Any]) -> Any:
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.Timeout as exc:
            raise DividendSyncError(
                f"{self.name}: request timed out",
                code=DividendSyncErrorCode.TIMEOUT,
                retryable=True,
            ) from exc
        except requests.RequestException as exc:
            raise DividendSyncError(
                f"{self.name}: request failed: {exc}",
                code=DividendSyncErrorCode.PROVIDER_ERROR,
                retryable=True,
            ) from exc

        self._check_response(resp)
        try:
            return resp.json()
        except ValueError as exc:
            raise DividendSyncError(
                f"{self.name}: invalid JSON response",
                code=DividendSyncErrorCode.PARSE_ERROR,
                retryable=True,
            ) from exc

    def _check_response(self, resp: requests.Response) -> None:
        if resp.status_code == 429:
            raise DividendSyncError(
                f"{self.name}: rate limited",
                code=DividendSyncErrorCode.RATE_LIMITED,
                retryable=True,
                retry_after=_retry_after(resp),
            )
        if resp.status_code in (401, 403):
            raise DividendSyncError(
                f"{self.name}: authentication failed ({resp.status_code})",
                code=DividendSyncErrorCode.AUTH_FAILED,
            )
        if resp.status_code == 404:
            raise DividendSyncError(
                f"{self.name}: symbol not found",
                code=DividendSyncErrorCode.NOT_FOUND,
                retryable=True,
            )
        if not 200 <= resp.status_code < 300:
            raise DividendSyncError(
                f"{self.name}: HTTP {resp.status_code}",
                code=DividendSyncErrorCode.PROVIDER_ERROR,
                retryable=True,
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def _retry_after(resp: requests.Response) -> float | None:
    raw = resp.headers.get("Retry-After")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def to_float(value: Any) -> float:
    """Coerce a provider number/string to float; blanks and junk become 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    raw = str(value).strip().rstrip("%")
    if raw in ("", "None", "-", "N/A"):
        return 0.0
    try:
        return float(raw)
    except ValueError:
        return 0.0
