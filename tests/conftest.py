"""Shared fixtures for dividendsync tests."""

from __future__ import annotations

import sys
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

# Ensure src/ is on the path for editable-style imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from dividendsync.cache import MemoryFactCache
from dividendsync.curated import CuratedTable
from dividendsync.models.dividend import DividendFact
from dividendsync.models.position import Position
from dividendsync.providers.mock import MockProvider
from dividendsync.resolver import DividendResolver
from dividendsync.store.memory import InMemoryDividendStore, InMemoryJobStore, InMemoryPositionSource

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def small_curated() -> CuratedTable:
    """A tiny curated table: two payers and one known non-payer."""
    return CuratedTable({
        "AAPL": DividendFact.from_annual(
            0.96,
            dividend_yield=0.5,
            next_ex_date=date(2024, 8, 9),
            payment_date=date(2024, 8, 15),
        ),
        "KO": DividendFact.from_annual(1.84, dividend_yield=3.0),
        "AMZN": DividendFact.from_annual(0.0, dividend_yield=0.0),
    })


@pytest.fixture
def resolver(mock_provider, small_curated) -> DividendResolver:
    return DividendResolver(
        [mock_provider],
        curated=small_curated,
        cache=MemoryFactCache(),
        provider_delay=0,
        provider_batch_delay=0,
    )


@pytest.fixture
def store() -> InMemoryDividendStore:
    return InMemoryDividendStore()


@pytest.fixture
def job_store() -> InMemoryJobStore:
    return InMemoryJobStore()


@pytest.fixture
def position_source() -> InMemoryPositionSource:
    return InMemoryPositionSource()


@pytest.fixture
def sample_positions() -> list[Position]:
    return [
        Position("AAPL_US_EQ", 10, current_price=190.0),
        Position("KO_US_EQ", 20, current_price=60.0),
        Position("AMZN_US_EQ", 5, current_price=180.0),
    ]
