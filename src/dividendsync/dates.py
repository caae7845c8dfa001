"""Lenient date parsing for provider payloads and store rows."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from dateutil import parser as date_parser

_EMPTY = {"", "-", "None", "N/A", "NA", "null"}


def parse_date(value: Any) -> date | None:
    """Convert a provider/store date value into a ``date``.

    Accepts ``date``/``datetime`` objects, epoch seconds, and any string
    dateutil understands. Returns None for blanks and unparseable input.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        if value <= 0:
            return None
        return datetime.fromtimestamp(value, tz=timezone.utc).date()

    raw = str(value).strip()
    if raw in _EMPTY:
        return None
    try:
        return date_parser.isoparse(raw).date()
    except ValueError:
        pass
    try:
        return date_parser.parse(raw).date()
    except (ValueError, OverflowError):
        return None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO timestamp (store rows) into an aware ``datetime``."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = date_parser.isoparse(str(value))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def iso_or_none(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None
