"""Scheduling-trigger request handler.

Accepts the JSON body of an HTTP/cron invocation and returns a status code
plus a JSON-ready body:

- ``{"userId": ..., "portfolioId": ...}`` runs one portfolio.
- ``{"runAll": true}`` runs every due job.
- ``{"saveData": true, "userId": ..., "portfolioId": ..., "dividendData": [...]}``
  saves client-computed dividends.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from dividendsync.errors import DividendSyncError, DividendSyncErrorCode
from dividendsync.models.job import JobResult
from dividendsync.models.record import DividendRecord
from dividendsync.orchestrator import DividendSyncOrchestrator

logger = logging.getLogger(__name__)

MISSING_PARAMETERS = "Missing required parameters: portfolioId and userId, or runAll flag"


@dataclass(frozen=True)
class TriggerResponse:
    status: int
    body: dict[str, Any] = field(default_factory=dict)


def rate_limited_body(retry_after: float | None, message: str | None = None) -> dict[str, Any]:
    seconds = math.ceil(retry_after) if retry_after is not None else None
    return {
        "success": False,
        "error": "RATE_LIMITED",
        "retryAfter": seconds,
        "message": message
        or f"Rate limit reached. Please wait {seconds or 'a few'} seconds before syncing again.",
    }


def _job_response(result: JobResult) -> TriggerResponse:
    if result.success:
        return TriggerResponse(200, result.to_dict())
    if result.error_code == DividendSyncErrorCode.RATE_LIMITED.value:
        return TriggerResponse(429, rate_limited_body(result.retry_after, result.error))
    return TriggerResponse(500, result.to_dict())


def _parse_entry(user_id: str, portfolio_id: str, entry: Any) -> DividendRecord:
    if not isinstance(entry, dict):
        raise TypeError("each entry must be an object")
    if not str(entry.get("symbol") or "").strip():
        raise ValueError("each entry needs a symbol")
    return DividendRecord.from_payload(user_id, portfolio_id, entry)


async def handle_trigger(
    payload: Any,
    orchestrator: DividendSyncOrchestrator,
) -> TriggerResponse:
    if not isinstance(payload, dict):
        return TriggerResponse(400, {"success": False, "error": "Request body must be a JSON object"})

    user_id = payload.get("userId")
    portfolio_id = payload.get("portfolioId")
    try:
        if payload.get("saveData"):
            entries = payload.get("dividendData")
            if not user_id or not portfolio_id or not isinstance(entries, list):
                return TriggerResponse(
                    400,
                    {
                        "success": False,
                        "error": "saveData requires userId, portfolioId and a dividendData list",
                    },
                )
            try:
                records = [_parse_entry(user_id, portfolio_id, entry) for entry in entries]
            except (KeyError, TypeError, ValueError) as exc:
                return TriggerResponse(
                    400, {"success": False, "error": f"Invalid dividendData entry: {exc}"}
                )
            result = await orchestrator.save_dividend_data(user_id, portfolio_id, records)
            return TriggerResponse(
                200,
                {
                    "success": True,
                    "message": f"Saved {len(entries)} dividend entries",
                    "reconcile": result.to_dict(),
                },
            )

        if user_id and portfolio_id:
            return _job_response(await orchestrator.run_portfolio(user_id, portfolio_id))

        if payload.get("runAll"):
            results = await orchestrator.run_due()
            return TriggerResponse(
                200,
                {
                    "success": True,
                    "message": f"Processed {len(results)} portfolios",
                    "processedJobs": len(results),
                    "failedJobs": sum(1 for r in results if not r.success),
                    "results": [r.to_dict() for r in results],
                },
            )
    except DividendSyncError as exc:
        logger.error("Trigger failed (%s): %s", exc.code.value, exc.message)
        if exc.is_rate_limited:
            return TriggerResponse(429, rate_limited_body(exc.retry_after, exc.message))
        return TriggerResponse(
            500, {"success": False, "error": exc.message, "errorCode": exc.code.value}
        )
    except Exception as exc:
        logger.exception("Trigger failed unexpectedly")
        return TriggerResponse(500, {"success": False, "error": str(exc) or type(exc).__name__})

    return TriggerResponse(400, {"success": False, "error": MISSING_PARAMETERS})
