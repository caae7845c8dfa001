"""dividendsync - dividend detection and reconciliation for portfolios.

Resolves dividend facts per symbol (curated table, then a fallback chain of
free data providers), computes portfolio income and yield, and keeps a
per-portfolio record store in line with current holdings.

Quick start::

    import asyncio
    from dividendsync import create_orchestrator_from_env

    orch = create_orchestrator_from_env()
    results = asyncio.run(orch.run_due())
"""

from __future__ import annotations

import os

from dividendsync.batching import run_in_batches
from dividendsync.cache import FactCache, MemoryFactCache, NoFactCache
from dividendsync.calculator import PortfolioDividendCalculator, summarize
from dividendsync.config import DEFAULT_PROVIDER_ORDER, DividendProviderType, DividendSyncConfig
from dividendsync.curated import CuratedTable
from dividendsync.errors import DividendSyncError, DividendSyncErrorCode
from dividendsync.factory import build_orchestrator, build_providers, build_resolver
from dividendsync.models import (
    CalculationStats,
    DividendContribution,
    DividendFact,
    DividendRecord,
    Frequency,
    JobResult,
    JobStatus,
    PortfolioDividendSummary,
    PortfolioJob,
    Position,
    ProviderDividend,
    ReconcileResult,
)
from dividendsync.orchestrator import DividendSyncOrchestrator
from dividendsync.positions import PositionSyncGuard, Trading212PositionSource
from dividendsync.reconciler import DividendReconciler
from dividendsync.resolver import DividendResolver, ResolverStats
from dividendsync.store import (
    DividendRecordStore,
    InMemoryDividendStore,
    InMemoryJobStore,
    InMemoryPositionSource,
    JobStore,
    PositionSource,
)
from dividendsync.symbols import normalize, normalize_all
from dividendsync.trigger import TriggerResponse, handle_trigger

__version__ = "0.1.0"

__all__ = [
    # Pipeline
    "DividendResolver",
    "ResolverStats",
    "PortfolioDividendCalculator",
    "summarize",
    "DividendReconciler",
    "DividendSyncOrchestrator",
    "run_in_batches",
    "handle_trigger",
    "TriggerResponse",
    # Factories
    "config_from_env",
    "create_orchestrator_from_env",
    "build_orchestrator",
    "build_providers",
    "build_resolver",
    # Symbols
    "normalize",
    "normalize_all",
    # Curated data and caching
    "CuratedTable",
    "FactCache",
    "MemoryFactCache",
    "NoFactCache",
    # Stores and sources
    "DividendRecordStore",
    "JobStore",
    "PositionSource",
    "InMemoryDividendStore",
    "InMemoryJobStore",
    "InMemoryPositionSource",
    "PositionSyncGuard",
    "Trading212PositionSource",
    # Config
    "DividendSyncConfig",
    "DividendProviderType",
    "DEFAULT_PROVIDER_ORDER",
    # Errors
    "DividendSyncError",
    "DividendSyncErrorCode",
    # Models
    "Position",
    "Frequency",
    "DividendFact",
    "ProviderDividend",
    "DividendRecord",
    "DividendContribution",
    "CalculationStats",
    "PortfolioDividendSummary",
    "PortfolioJob",
    "JobStatus",
    "JobResult",
    "ReconcileResult",
]


def config_from_env() -> DividendSyncConfig:
    """Build a config from environment variables.

    Environment variables:
        DIVIDEND_PROVIDERS: Comma-separated provider chain
            (default: "yahoo,alphavantage,fmp,polygon").
        DIVIDEND_CACHE: Fact cache backend, "memory" or "none" (default: "memory").
        DIVIDEND_CACHE_TTL: Fact cache TTL in seconds (default: process lifetime).
        DIVIDEND_REQUEST_TIMEOUT: HTTP timeout in seconds (default: 10).
        ALPHA_VANTAGE_API_KEY: Alpha Vantage API key (default: "demo").
        FMP_API_KEY: Financial Modeling Prep API key (default: "demo").
        POLYGON_API_KEY: Polygon.io API key.
        TRADING212_API_KEY: Trading212 key; enables live position syncs.
        SUPABASE_URL: Supabase project URL.
        SUPABASE_SERVICE_ROLE_KEY: Supabase service-role key.
    """
    provider_str = os.getenv(
        "DIVIDEND_PROVIDERS", ",".join(p.value for p in DEFAULT_PROVIDER_ORDER)
    )
    provider_types = [
        DividendProviderType(name.strip())
        for name in provider_str.split(",")
        if name.strip()
    ]
    ttl = os.getenv("DIVIDEND_CACHE_TTL")

    return DividendSyncConfig(
        providers=provider_types,
        cache_backend=os.getenv("DIVIDEND_CACHE", "memory"),
        cache_ttl_seconds=int(ttl) if ttl else None,
        request_timeout=float(os.getenv("DIVIDEND_REQUEST_TIMEOUT", "10")),
        alpha_vantage_api_key=os.getenv("ALPHA_VANTAGE_API_KEY"),
        fmp_api_key=os.getenv("FMP_API_KEY"),
        polygon_api_key=os.getenv("POLYGON_API_KEY"),
        trading212_api_key=os.getenv("TRADING212_API_KEY"),
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
    )


def create_orchestrator_from_env() -> DividendSyncOrchestrator:
    """Zero-config factory: Supabase stores plus env-configured providers.

    Positions come from Trading212 (behind a cooldown guard) when
    ``TRADING212_API_KEY`` is set, otherwise from the ``portfolio_positions``
    table.
    """
    from dividendsync.store.supabase import (
        SupabaseDividendStore,
        SupabaseJobStore,
        SupabasePositionSource,
        create_supabase_client,
    )

    config = config_from_env()
    client = create_supabase_client(config.supabase_url, config.supabase_key)

    positions: PositionSource
    if config.trading212_api_key:
        positions = PositionSyncGuard(
            Trading212PositionSource(config.trading212_api_key, timeout=config.request_timeout),
            cooldown_seconds=config.rate_limit_cooldown_seconds,
        )
    else:
        positions = SupabasePositionSource(client)

    return build_orchestrator(
        config,
        positions=positions,
        store=SupabaseDividendStore(client),
        jobs=SupabaseJobStore(client),
    )
