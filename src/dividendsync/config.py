"""Dividend sync configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DividendProviderType(Enum):
    """Supported third-party dividend data providers."""

    YAHOO = "yahoo"
    ALPHA_VANTAGE = "alphavantage"
    FMP = "fmp"
    POLYGON = "polygon"
    MOCK = "mock"


DEFAULT_PROVIDER_ORDER: tuple[DividendProviderType, ...] = (
    DividendProviderType.YAHOO,
    DividendProviderType.ALPHA_VANTAGE,
    DividendProviderType.FMP,
    DividendProviderType.POLYGON,
)


@dataclass
class DividendSyncConfig:
    """Configuration for the dividend sync pipeline.

    Attributes:
        providers: Dividend providers ordered by priority (fallback chain).
        cache_backend: Fact cache type, "memory" or "none".
        cache_ttl_seconds: TTL for cached facts; None keeps them for the
            process lifetime.
        cache_max_entries: LRU bound for the memory fact cache.
        provider_delay: Seconds slept between provider attempts.
        request_timeout: Timeout in seconds for every outbound HTTP call.
        listing_batch_size: Unique symbols resolved concurrently per batch.
        listing_batch_delay: Seconds slept between listing batches.
        provider_batch_size: Batch size when every symbol needs a live fetch.
        provider_batch_delay: Delay between live-fetch batches.
        reconcile_tolerance: Absolute tolerance when comparing stored and
            computed dividend amounts/yields.
        run_interval_hours: Hours until a completed job is due again.
        rate_limit_cooldown_seconds: Cooldown after a position source reports
            a rate limit without a retry hint.
        alpha_vantage_api_key: Alpha Vantage API key ("demo" works for a
            handful of symbols).
        fmp_api_key: Financial Modeling Prep API key.
        polygon_api_key: Polygon.io API key.
        trading212_api_key: Trading212 API key for live position syncs.
        supabase_url: Supabase project URL.
        supabase_key: Supabase service-role key.
    """

    providers: list[DividendProviderType] = field(
        default_factory=lambda: list(DEFAULT_PROVIDER_ORDER)
    )
    cache_backend: str = "memory"
    cache_ttl_seconds: int | None = None
    cache_max_entries: int = 10_000
    provider_delay: float = 0.05
    request_timeout: float = 10.0

    listing_batch_size: int = 10
    listing_batch_delay: float = 0.5
    provider_batch_size: int = 3
    provider_batch_delay: float = 1.0

    reconcile_tolerance: float = 1e-9
    run_interval_hours: float = 6.0
    rate_limit_cooldown_seconds: float = 30.0

    alpha_vantage_api_key: str | None = None
    fmp_api_key: str | None = None
    polygon_api_key: str | None = None
    trading212_api_key: str | None = None
    supabase_url: str | None = None
    supabase_key: str | None = None
