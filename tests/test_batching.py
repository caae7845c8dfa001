"""Tests for the batched fan-out helper."""

import asyncio

import pytest

from dividendsync.batching import run_in_batches


class TestRunInBatches:
    def test_results_in_input_order(self):
        async def double(x):
            await asyncio.sleep(0.001 * (5 - x))
            return x * 2

        assert asyncio.run(run_in_batches([1, 2, 3, 4, 5], double, batch_size=2, delay=0)) == [
            2, 4, 6, 8, 10,
        ]

    def test_failure_does_not_abort_siblings(self):
        async def work(x):
            if x == 2:
                raise ValueError("bad item")
            return x

        results = asyncio.run(run_in_batches([1, 2, 3], work, batch_size=3, delay=0))
        assert results[0] == 1
        assert isinstance(results[1], ValueError)
        assert results[2] == 3

    def test_batch_concurrency_is_bounded(self):
        active = 0
        peak = 0

        async def work(x):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.001)
            active -= 1
            return x

        asyncio.run(run_in_batches(list(range(10)), work, batch_size=3, delay=0))
        assert peak == 3

    def test_delay_only_between_batches(self, monkeypatch):
        sleeps = []
        real_sleep = asyncio.sleep

        async def fake_sleep(seconds):
            sleeps.append(seconds)
            await real_sleep(0)

        async def work(x):
            return x

        monkeypatch.setattr("dividendsync.batching.asyncio.sleep", fake_sleep)
        asyncio.run(run_in_batches(list(range(7)), work, batch_size=3, delay=0.5))
        assert sleeps == [0.5, 0.5]

    def test_empty(self):
        async def work(x):
            return x

        assert asyncio.run(run_in_batches([], work)) == []

    def test_invalid_batch_size(self):
        async def work(x):
            return x

        with pytest.raises(ValueError):
            asyncio.run(run_in_batches([1], work, batch_size=0))
