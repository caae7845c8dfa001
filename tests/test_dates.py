"""Tests for lenient date parsing."""

from datetime import date, datetime, timezone

import pytest

from dividendsync.dates import iso_or_none, parse_date, parse_timestamp


class TestParseDate:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2024-09-13", date(2024, 9, 13)),
            ("2024-09-13T00:00:00Z", date(2024, 9, 13)),
            ("Sep 13, 2024", date(2024, 9, 13)),
            (date(2024, 1, 2), date(2024, 1, 2)),
            (datetime(2024, 1, 2, 15, 0), date(2024, 1, 2)),
            (1726214400, date(2024, 9, 13)),
        ],
    )
    def test_parses(self, value, expected):
        assert parse_date(value) == expected

    @pytest.mark.parametrize("value", [None, "", "None", "-", "N/A", 0, "not a date"])
    def test_blank_or_junk(self, value):
        assert parse_date(value) is None


class TestParseTimestamp:
    def test_naive_becomes_utc(self):
        assert parse_timestamp("2024-06-01T12:00:00") == datetime(2024, 6, 1, 12, tzinfo=timezone.utc)

    def test_aware_kept(self):
        ts = parse_timestamp("2024-06-01T12:00:00+02:00")
        assert ts.utcoffset().total_seconds() == 7200

    def test_blank(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None


def test_iso_or_none():
    assert iso_or_none(date(2024, 1, 2)) == "2024-01-02"
    assert iso_or_none(None) is None
