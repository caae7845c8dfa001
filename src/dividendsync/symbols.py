"""Broker symbol normalisation."""

from __future__ import annotations

import re
from collections.abc import Iterable

# Order matters: _US_EQ must be tried before _EQ.
BROKER_SUFFIXES: tuple[str, ...] = ("_US_EQ", "_EQ", ".L", ".TO")

_SUFFIX_RE = re.compile(
    "(?:" + "|".join(re.escape(s) for s in BROKER_SUFFIXES) + ")$",
    re.IGNORECASE,
)


def normalize(raw_symbol: str) -> str:
    """Strip broker suffixes and upper-case a ticker.

    ``AAPL_US_EQ`` -> ``AAPL``, ``vod.l`` -> ``VOD``. Never raises and is
    idempotent: suffixes are stripped until none remain.
    """
    symbol = (raw_symbol or "").strip().upper()
    while True:
        stripped = _SUFFIX_RE.sub("", symbol)
        if stripped == symbol:
            return symbol
        symbol = stripped


def normalize_all(raw_symbols: Iterable[str]) -> list[str]:
    """Normalise and de-duplicate, keeping first-seen order."""
    seen: dict[str, None] = {}
    for raw in raw_symbols:
        seen.setdefault(normalize(raw), None)
    return list(seen)
