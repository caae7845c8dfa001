"""Tests for DividendResolver - cache, curated table, provider chain, sentinel."""

import asyncio

import pytest

from dividendsync.cache import MemoryFactCache, NoFactCache
from dividendsync.curated import CuratedTable
from dividendsync.errors import DividendSyncError, DividendSyncErrorCode
from dividendsync.providers.mock import MockProvider
from dividendsync.resolver import DividendResolver


def _resolver(*providers, curated=None, cache=None):
    return DividendResolver(
        list(providers),
        curated=curated if curated is not None else CuratedTable.empty(),
        cache=cache,
        provider_delay=0,
        provider_batch_delay=0,
    )


class TestResolutionOrder:
    def test_curated_hit_skips_providers(self, resolver, mock_provider):
        fact = asyncio.run(resolver.resolve("AAPL"))
        assert fact.annual == pytest.approx(0.96)
        assert mock_provider.total_calls == 0
        assert resolver.last_origin("AAPL") == "curated"
        assert resolver.stats.curated_hits == 1

    def test_curated_non_payer_skips_providers(self, resolver, mock_provider):
        fact = asyncio.run(resolver.resolve("AMZN"))
        assert not fact.pays_dividend
        assert mock_provider.total_calls == 0

    def test_second_lookup_hits_cache(self, resolver):
        asyncio.run(resolver.resolve("KO"))
        asyncio.run(resolver.resolve("KO"))
        assert resolver.stats.curated_hits == 1
        assert resolver.stats.cache_hits == 1
        assert resolver.last_origin("KO") == "cache"

    def test_provider_fallback(self, resolver, mock_provider):
        mock_provider.set_dividend("PEP", 5.42, dividend_yield=3.2)
        fact = asyncio.run(resolver.resolve("PEP"))
        assert fact.annual == pytest.approx(5.42)
        assert fact.quarterly == pytest.approx(1.355)
        assert fact.source == "mock"
        assert resolver.last_origin("PEP") == "mock"
        assert resolver.stats.provider_hits == 1

    def test_input_is_normalised(self, resolver):
        fact = asyncio.run(resolver.resolve("aapl_us_eq"))
        assert fact.annual == pytest.approx(0.96)


class TestProviderChain:
    def test_first_positive_provider_wins(self):
        first, second, third = MockProvider("a"), MockProvider("b"), MockProvider("c")
        second.set_dividend("XYZ", 2.0)
        third.set_dividend("XYZ", 9.0)
        resolver = _resolver(first, second, third)

        fact = asyncio.run(resolver.resolve("XYZ"))
        assert fact.annual == 2.0
        assert fact.source == "b"
        assert first.calls["XYZ"] == 1
        assert third.calls["XYZ"] == 0

    def test_zero_dividend_advances_chain(self):
        first, second = MockProvider("a"), MockProvider("b")
        first.set_dividend("XYZ", 0.0)
        second.set_dividend("XYZ", 1.5)
        fact = asyncio.run(_resolver(first, second).resolve("XYZ"))
        assert fact.source == "b"

    @pytest.mark.parametrize(
        "exc",
        [
            DividendSyncError("timeout", code=DividendSyncErrorCode.TIMEOUT, retryable=True),
            DividendSyncError("429", code=DividendSyncErrorCode.RATE_LIMITED, retryable=True),
            DividendSyncError("bad key", code=DividendSyncErrorCode.AUTH_FAILED),
            RuntimeError("unexpected"),
        ],
    )
    def test_provider_failure_is_swallowed(self, exc):
        broken, good = MockProvider("broken"), MockProvider("good")
        broken.set_failure("XYZ", exc)
        good.set_dividend("XYZ", 1.0)
        fact = asyncio.run(_resolver(broken, good).resolve("XYZ"))
        assert fact.annual == 1.0

    def test_all_providers_failing_yields_sentinel(self):
        broken = MockProvider("broken")
        broken.set_failure("XYZ", RuntimeError("down"))
        fact = asyncio.run(_resolver(broken).resolve("XYZ"))
        assert fact.annual == 0
        assert fact.source == "none"

    def test_delay_between_providers(self, monkeypatch):
        sleeps = []

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        monkeypatch.setattr("dividendsync.resolver.asyncio.sleep", fake_sleep)
        resolver = DividendResolver(
            [MockProvider("a"), MockProvider("b"), MockProvider("c")],
            curated=CuratedTable.empty(),
            provider_delay=0.05,
        )
        asyncio.run(resolver.resolve("XYZ"))
        assert sleeps == [0.05, 0.05]


class TestNonPayerCaching:
    def test_unknown_symbol_is_resolved_once(self, resolver, mock_provider):
        first = asyncio.run(resolver.resolve("ZZZZ"))
        second = asyncio.run(resolver.resolve("ZZZZ"))
        assert first.annual == 0
        assert second.annual == 0
        assert mock_provider.calls["ZZZZ"] == 1
        assert resolver.stats.negatives == 1

    def test_negative_written_to_curated_table(self, resolver):
        asyncio.run(resolver.resolve("ZZZZ"))
        assert "ZZZZ" in resolver.curated
        assert not resolver.curated.get("ZZZZ").pays_dividend

    def test_curated_table_short_circuits_without_cache(self, mock_provider):
        resolver = _resolver(mock_provider, cache=NoFactCache())
        asyncio.run(resolver.resolve("ZZZZ"))
        asyncio.run(resolver.resolve("ZZZZ"))
        assert mock_provider.calls["ZZZZ"] == 1

    def test_clearing_cache_alone_does_not_refetch(self, resolver, mock_provider):
        asyncio.run(resolver.resolve("ZZZZ"))
        resolver.cache.clear_all()
        asyncio.run(resolver.resolve("ZZZZ"))
        # Still answered by the runtime curated entry.
        assert mock_provider.calls["ZZZZ"] == 1

    def test_fresh_table_and_cache_refetch(self, mock_provider):
        resolver = _resolver(mock_provider, cache=MemoryFactCache())
        asyncio.run(resolver.resolve("ZZZZ"))
        resolver.curated = CuratedTable.empty()
        resolver.cache.clear_all()
        asyncio.run(resolver.resolve("ZZZZ"))
        assert mock_provider.calls["ZZZZ"] == 2


class TestResolveMany:
    def test_dedups_and_normalises(self, resolver, mock_provider):
        mock_provider.set_dividend("PEP", 5.42)
        facts = asyncio.run(
            resolver.resolve_many(["AAPL", "aapl_us_eq", "PEP", "PEP"], batch_size=2, batch_delay=0)
        )
        assert set(facts) == {"AAPL", "PEP"}
        assert mock_provider.calls["PEP"] == 1

    def test_stats_reset(self, resolver):
        asyncio.run(resolver.resolve("KO"))
        resolver.reset()
        assert resolver.stats.curated_hits == 0
        assert resolver.last_origin("KO") is None
        assert len(resolver.cache) == 0

    def test_stats_delta(self, resolver):
        before = resolver.stats.copy()
        asyncio.run(resolver.resolve("KO"))
        asyncio.run(resolver.resolve("ZZZZ"))
        delta = resolver.stats.since(before)
        assert delta.curated_hits == 1
        assert delta.provider_calls == 1
        assert delta.negatives == 1

    def test_provider_bound_symbols_use_provider_batches(self, monkeypatch, resolver, mock_provider):
        import dividendsync.resolver as resolver_module

        calls = []
        real = resolver_module.run_in_batches

        async def recording(items, worker, batch_size, delay):
            calls.append((list(items), batch_size, delay))
            return await real(items, worker, batch_size, 0)

        monkeypatch.setattr(resolver_module, "run_in_batches", recording)
        mock_provider.set_dividend("PEP", 5.42)
        resolver.provider_batch_size = 3
        resolver.provider_batch_delay = 1.0

        facts = asyncio.run(
            resolver.resolve_many(["AAPL", "PEP", "KO", "ZZZZ"], batch_size=10, batch_delay=0.5)
        )

        assert list(facts) == ["AAPL", "PEP", "KO", "ZZZZ"]
        assert calls == [
            (["AAPL", "KO"], 10, 0.5),
            (["PEP", "ZZZZ"], 3, 1.0),
        ]
        assert facts["PEP"].annual == pytest.approx(5.42)
        assert facts["ZZZZ"].annual == 0

    def test_is_known_covers_cache_and_curated(self, resolver):
        assert resolver.is_known("KO")
        assert not resolver.is_known("ZZZZ")
        asyncio.run(resolver.resolve("ZZZZ"))
        resolver.curated = CuratedTable.empty()
        assert resolver.is_known("zzzz")
        assert not resolver.is_known("KO")
