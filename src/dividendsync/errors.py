"""Dividend sync error types."""

from __future__ import annotations

from enum import Enum


class DividendSyncErrorCode(Enum):
    """Error classification codes."""

    RATE_LIMITED = "rate_limited"
    AUTH_FAILED = "auth_failed"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    PROVIDER_ERROR = "provider_error"
    PARSE_ERROR = "parse_error"
    STORE_ERROR = "store_error"
    POSITION_FETCH_FAILED = "position_fetch_failed"
    NO_DATA = "no_data"
    INVALID_REQUEST = "invalid_request"


class DividendSyncError(Exception):
    """Dividend sync exception with error code and retry hints.

    Attributes:
        message: Human-readable error description.
        code: Structured error code for programmatic handling.
        retryable: Whether the caller may retry (or try another provider).
        retry_after: Suggested delay in seconds before retrying, when known.
    """

    def __init__(
        self,
        message: str,
        code: DividendSyncErrorCode = DividendSyncErrorCode.PROVIDER_ERROR,
        retryable: bool = False,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable
        self.retry_after = retry_after

    @property
    def is_rate_limited(self) -> bool:
        return self.code is DividendSyncErrorCode.RATE_LIMITED
