"""Tests for the curated dividend table."""

from datetime import date

import pytest

from dividendsync.curated import CuratedTable, load_curated_frame
from dividendsync.models.dividend import DividendFact, Frequency


class TestPackagedTable:
    def test_loads_packaged_csv(self):
        df = load_curated_frame()
        assert {"symbol", "annual", "yield", "frequency"} <= set(df.columns)
        assert df["symbol"].is_unique
        assert len(df) >= 250

    def test_known_payer(self):
        table = CuratedTable()
        fact = table.get("aapl")
        assert fact.annual == pytest.approx(0.96)
        assert fact.quarterly == pytest.approx(0.24)
        assert fact.next_ex_date == date(2024, 8, 9)
        assert fact.source == "curated"

    def test_known_non_payer_is_present(self):
        table = CuratedTable()
        assert "AMZN" in table
        assert not table.get("AMZN").pays_dividend

    def test_monthly_and_etf_flags(self):
        table = CuratedTable()
        assert table.get("O").frequency is Frequency.MONTHLY
        assert table.get("SPY").is_etf
        assert table.get("SPY").next_ex_date is None

    def test_stats(self):
        stats = CuratedTable().stats()
        assert stats["totalStocks"] == stats["dividendPayingStocks"] + stats["nonDividendStocks"]
        assert 0 < stats["coverageRate"] <= 100


class TestRuntimeAdditions:
    def test_instances_do_not_share_additions(self):
        first, second = CuratedTable(), CuratedTable()
        first.add("zzzz", DividendFact.none())
        assert "ZZZZ" in first
        assert "ZZZZ" not in second

    def test_empty_table(self):
        table = CuratedTable.empty()
        assert len(table) == 0
        assert table.get("AAPL") is None


class TestFromCsv:
    def test_custom_csv(self, tmp_path):
        path = tmp_path / "custom.csv"
        path.write_text(
            "symbol,annual,yield,frequency,next_ex_date,payment_date,is_etf\n"
            "abc,2.40,4.0,monthly,2024-07-01,,false\n"
            "XYZ,0,0,quarterly,,,false\n"
        )
        table = CuratedTable.from_csv(path)
        assert table.symbols() == ["ABC", "XYZ"]
        assert table.dividend_payers() == ["ABC"]
        fact = table.get("ABC")
        assert fact.frequency is Frequency.MONTHLY
        assert fact.next_ex_date == date(2024, 7, 1)
        assert fact.payment_date is None
