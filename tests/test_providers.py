"""Tests for dividend providers with a mocked HTTP session."""

from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from dividendsync.config import DividendProviderType
from dividendsync.errors import DividendSyncError, DividendSyncErrorCode
from dividendsync.models.dividend import Frequency
from dividendsync.providers import PROVIDER_CLASSES, create_provider
from dividendsync.providers.alphavantage import AlphaVantageProvider
from dividendsync.providers.fmp import FMPProvider
from dividendsync.providers.mock import MockProvider
from dividendsync.providers.polygon import PolygonProvider
from dividendsync.providers.yahoo import YahooProvider


def _session(payload=None, status=200, headers=None, json_error=False):
    resp = MagicMock()
    resp.status_code = status
    resp.headers = headers or {}
    if json_error:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = payload
    session = MagicMock()
    session.get.return_value = resp
    return session


def _ts(y, m, d):
    return int(datetime(y, m, d, 13, 30, tzinfo=timezone.utc).timestamp())


class TestYahooProvider:
    def _payload(self, amounts, price=190.0):
        events = {
            str(_ts(2024, month, 10)): {"amount": amount, "date": _ts(2024, month, 10)}
            for month, amount in amounts
        }
        return {
            "chart": {
                "result": [{
                    "meta": {"regularMarketPrice": price},
                    "events": {"dividends": events},
                }]
            }
        }

    def test_sums_last_year_of_events(self):
        payload = self._payload([(2, 0.24), (5, 0.25), (8, 0.25), (11, 0.25)])
        provider = YahooProvider(session=_session(payload))
        result = provider.fetch_dividend("AAPL")
        assert result.source == "yahoo"
        assert result.annual_dividend == pytest.approx(0.99)
        assert result.frequency is Frequency.QUARTERLY
        assert result.dividend_yield == pytest.approx(0.99 / 190.0 * 100)
        assert result.ex_date == date(2024, 11, 10)

    def test_request_shape(self):
        session = _session(self._payload([(2, 0.24)]))
        YahooProvider(session=session, timeout=3.0).fetch_dividend("KO")
        url = session.get.call_args.args[0]
        kwargs = session.get.call_args.kwargs
        assert url.endswith("/v8/finance/chart/KO")
        assert kwargs["params"]["events"] == "div,split"
        assert kwargs["timeout"] == 3.0

    def test_no_events_is_none(self):
        payload = {"chart": {"result": [{"meta": {}, "events": {}}]}}
        assert YahooProvider(session=_session(payload)).fetch_dividend("TSLA") is None

    def test_empty_result_is_none(self):
        payload = {"chart": {"result": None, "error": {"code": "Not Found"}}}
        assert YahooProvider(session=_session(payload)).fetch_dividend("XXXX") is None

    def test_bad_shape_is_parse_error(self):
        with pytest.raises(DividendSyncError) as exc_info:
            YahooProvider(session=_session(["not", "a", "dict"])).fetch_dividend("AAPL")
        assert exc_info.value.code is DividendSyncErrorCode.PARSE_ERROR


class TestAlphaVantageProvider:
    def test_parses_overview(self):
        payload = {
            "Symbol": "KO",
            "DividendPerShare": "1.94",
            "DividendYield": "0.0305",
            "ExDividendDate": "2024-09-13",
            "DividendDate": "2024-10-01",
        }
        result = AlphaVantageProvider(session=_session(payload)).fetch_dividend("KO")
        assert result.annual_dividend == pytest.approx(1.94)
        assert result.dividend_yield == pytest.approx(3.05)
        assert result.ex_date == date(2024, 9, 13)
        assert result.payment_date == date(2024, 10, 1)

    def test_percent_yield_string(self):
        payload = {"DividendPerShare": "1.00", "DividendYield": "2.5%"}
        result = AlphaVantageProvider(session=_session(payload)).fetch_dividend("X")
        assert result.dividend_yield == pytest.approx(2.5)

    def test_none_values(self):
        payload = {"DividendPerShare": "None", "DividendYield": "None", "ExDividendDate": "None"}
        assert AlphaVantageProvider(session=_session(payload)).fetch_dividend("TSLA") is None

    def test_throttle_note_is_rate_limited(self):
        payload = {"Note": "Thank you for using Alpha Vantage! Our standard API rate limit is 25 requests per day."}
        with pytest.raises(DividendSyncError) as exc_info:
            AlphaVantageProvider(session=_session(payload)).fetch_dividend("KO")
        assert exc_info.value.is_rate_limited

    def test_api_key_defaults_to_demo(self):
        session = _session({})
        AlphaVantageProvider(session=session).fetch_dividend("KO")
        params = session.get.call_args.kwargs["params"]
        assert params == {"function": "OVERVIEW", "symbol": "KO", "apikey": "demo"}


class TestFMPProvider:
    def test_parses_profile(self):
        payload = [{"symbol": "PEP", "lastDiv": 5.42, "price": 170.0}]
        result = FMPProvider(api_key="k", session=_session(payload)).fetch_dividend("PEP")
        assert result.source == "fmp"
        assert result.annual_dividend == pytest.approx(5.42)
        assert result.dividend_yield == pytest.approx(5.42 / 170.0 * 100)

    def test_zero_last_div(self):
        payload = [{"symbol": "AMZN", "lastDiv": 0, "price": 180.0}]
        assert FMPProvider(session=_session(payload)).fetch_dividend("AMZN") is None

    def test_empty_list(self):
        assert FMPProvider(session=_session([])).fetch_dividend("XXXX") is None

    def test_error_envelope_is_parse_error(self):
        payload = {"Error Message": "Invalid API KEY."}
        with pytest.raises(DividendSyncError) as exc_info:
            FMPProvider(session=_session(payload)).fetch_dividend("PEP")
        assert exc_info.value.code is DividendSyncErrorCode.PARSE_ERROR


class TestPolygonProvider:
    def test_sums_cash_amounts(self):
        payload = {
            "results": [
                {"cash_amount": 0.25, "ex_dividend_date": "2024-08-12", "pay_date": "2024-08-15", "frequency": 4},
                {"cash_amount": 0.25, "ex_dividend_date": "2024-05-10", "frequency": 4},
                {"cash_amount": 0.24, "ex_dividend_date": "2024-02-09", "frequency": 4},
            ]
        }
        result = PolygonProvider(api_key="k", session=_session(payload)).fetch_dividend("AAPL")
        assert result.annual_dividend == pytest.approx(0.74)
        assert result.frequency is Frequency.QUARTERLY
        assert result.ex_date == date(2024, 8, 12)
        assert result.payment_date == date(2024, 8, 15)

    def test_frequency_from_count_when_missing(self):
        payload = {
            "results": [
                {"cash_amount": 1.0, "ex_dividend_date": "2024-06-01"},
                {"cash_amount": 1.0, "ex_dividend_date": "2023-12-01"},
            ]
        }
        result = PolygonProvider(session=_session(payload)).fetch_dividend("X")
        assert result.frequency is Frequency.SEMI_ANNUAL

    def test_request_window(self):
        session = _session({"results": []})
        assert PolygonProvider(api_key="k", session=session).fetch_dividend("AAPL") is None
        params = session.get.call_args.kwargs["params"]
        assert params["ticker"] == "AAPL"
        assert params["apiKey"] == "k"
        assert params["ex_dividend_date.gte"] < params["ex_dividend_date.lte"]


class TestHttpErrors:
    @pytest.mark.parametrize(
        "status, code",
        [
            (401, DividendSyncErrorCode.AUTH_FAILED),
            (403, DividendSyncErrorCode.AUTH_FAILED),
            (404, DividendSyncErrorCode.NOT_FOUND),
            (500, DividendSyncErrorCode.PROVIDER_ERROR),
        ],
    )
    def test_status_codes(self, status, code):
        with pytest.raises(DividendSyncError) as exc_info:
            FMPProvider(session=_session(status=status)).fetch_dividend("PEP")
        assert exc_info.value.code is code

    def test_rate_limit_carries_retry_after(self):
        session = _session(status=429, headers={"Retry-After": "12"})
        with pytest.raises(DividendSyncError) as exc_info:
            YahooProvider(session=session).fetch_dividend("AAPL")
        assert exc_info.value.is_rate_limited
        assert exc_info.value.retry_after == 12.0

    def test_invalid_json(self):
        with pytest.raises(DividendSyncError) as exc_info:
            YahooProvider(session=_session(json_error=True)).fetch_dividend("AAPL")
        assert exc_info.value.code is DividendSyncErrorCode.PARSE_ERROR

    def test_timeout(self):
        session = MagicMock()
        session.get.side_effect = requests.Timeout("slow")
        with pytest.raises(DividendSyncError) as exc_info:
            YahooProvider(session=session).fetch_dividend("AAPL")
        assert exc_info.value.code is DividendSyncErrorCode.TIMEOUT
        assert exc_info.value.retryable

    def test_connection_error(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("down")
        with pytest.raises(DividendSyncError) as exc_info:
            PolygonProvider(session=session).fetch_dividend("AAPL")
        assert exc_info.value.code is DividendSyncErrorCode.PROVIDER_ERROR


class TestMockProvider:
    def test_preloaded_and_unknown(self, mock_provider):
        mock_provider.set_dividend("KO", 1.84, dividend_yield=3.0)
        assert mock_provider.fetch_dividend("ko").annual_dividend == 1.84
        assert mock_provider.fetch_dividend("TSLA") is None
        assert mock_provider.calls["KO"] == 1
        assert mock_provider.total_calls == 2

    def test_failure(self, mock_provider):
        mock_provider.set_failure("KO", DividendSyncError("boom"))
        with pytest.raises(DividendSyncError):
            mock_provider.fetch_dividend("KO")


class TestRegistry:
    def test_every_type_registered(self):
        assert set(PROVIDER_CLASSES) == set(DividendProviderType)

    def test_create_mock(self):
        provider = create_provider(DividendProviderType.MOCK, name="stub")
        assert isinstance(provider, MockProvider)
        assert provider.name == "stub"

    def test_create_with_key(self):
        provider = create_provider(DividendProviderType.FMP, api_key="secret", timeout=2.0)
        assert isinstance(provider, FMPProvider)
        assert provider.api_key == "secret"
        assert provider.timeout == 2.0
