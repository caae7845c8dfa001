"""Curated dividend table - a hand-maintained seed/override layer.

The packaged CSV is a point-in-time snapshot of well-known tickers. It is not
expected to stay current; the resolver consults it before any live provider
and writes runtime discoveries (including confirmed non-payers) back into the
in-memory copy.
"""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import pandas as pd

from dividendsync.dates import parse_date
from dividendsync.models.dividend import DividendFact, Frequency

CURATED_SOURCE = "curated"


def load_curated_frame(path: Path | str | None = None) -> pd.DataFrame:
    """Read the curated table CSV (packaged copy by default)."""
    if path is None:
        ref = resources.files("dividendsync") / "data" / "curated_dividends.csv"
        with resources.as_file(ref) as fp:
            df = pd.read_csv(fp, dtype={"symbol": str})
    else:
        df = pd.read_csv(path, dtype={"symbol": str})
    df["symbol"] = df["symbol"].str.strip().str.upper()
    return df.drop_duplicates(subset="symbol", keep="last")


def _row_to_fact(row: dict[str, Any]) -> DividendFact:
    return DividendFact.from_annual(
        float(row["annual"]),
        dividend_yield=float(row["yield"]),
        frequency=Frequency.parse(row.get("frequency")),
        next_ex_date=parse_date(row["next_ex_date"]) if pd.notna(row.get("next_ex_date")) else None,
        payment_date=parse_date(row["payment_date"]) if pd.notna(row.get("payment_date")) else None,
        is_etf=str(row.get("is_etf")).strip().lower() == "true",
        source=CURATED_SOURCE,
    )


@lru_cache(maxsize=1)
def _packaged_facts() -> dict[str, DividendFact]:
    df = load_curated_frame()
    return {row["symbol"]: _row_to_fact(row) for row in df.to_dict(orient="records")}


class CuratedTable:
    """Mutable symbol -> DividendFact mapping seeded from the curated CSV.

    Each instance owns its own copy, so runtime additions never leak between
    resolvers.
    """

    def __init__(self, facts: dict[str, DividendFact] | None = None) -> None:
        self._facts: dict[str, DividendFact] = dict(
            _packaged_facts() if facts is None else facts
        )

    @classmethod
    def from_csv(cls, path: Path | str) -> CuratedTable:
        df = load_curated_frame(path)
        return cls({row["symbol"]: _row_to_fact(row) for row in df.to_dict(orient="records")})

    @classmethod
    def empty(cls) -> CuratedTable:
        return cls({})

    def get(self, symbol: str) -> DividendFact | None:
        return self._facts.get(symbol.upper())

    def add(self, symbol: str, fact: DividendFact) -> None:
        self._facts[symbol.upper()] = fact

    def symbols(self) -> list[str]:
        return sorted(self._facts)

    def dividend_payers(self) -> list[str]:
        return sorted(s for s, f in self._facts.items() if f.pays_dividend)

    def stats(self) -> dict[str, Any]:
        total = len(self._facts)
        paying = len(self.dividend_payers())
        return {
            "totalStocks": total,
            "dividendPayingStocks": paying,
            "nonDividendStocks": total - paying,
            "coverageRate": round(paying / total * 100) if total else 0,
        }

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and symbol.upper() in self._facts

    def __len__(self) -> int:
        return len(self._facts)
