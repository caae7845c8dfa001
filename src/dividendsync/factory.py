"""Wire config into a ready-to-run resolver / orchestrator."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from dividendsync.cache import create_fact_cache
from dividendsync.calculator import PortfolioDividendCalculator
from dividendsync.config import DividendProviderType, DividendSyncConfig
from dividendsync.orchestrator import DividendSyncOrchestrator
from dividendsync.providers import create_provider
from dividendsync.providers.base import BaseDividendProvider
from dividendsync.reconciler import DividendReconciler
from dividendsync.resolver import DividendResolver
from dividendsync.store.base import DividendRecordStore, JobStore, PositionSource

logger = logging.getLogger(__name__)


def build_providers(config: DividendSyncConfig) -> list[BaseDividendProvider]:
    """Instantiate the provider chain in configured order.

    Polygon has no keyless tier and is skipped without a key.
    """
    providers: list[BaseDividendProvider] = []
    for pt in config.providers:
        kwargs: dict[str, Any] = {}
        if pt is not DividendProviderType.MOCK:
            kwargs["timeout"] = config.request_timeout
        if pt is DividendProviderType.ALPHA_VANTAGE and config.alpha_vantage_api_key:
            kwargs["api_key"] = config.alpha_vantage_api_key
        elif pt is DividendProviderType.FMP and config.fmp_api_key:
            kwargs["api_key"] = config.fmp_api_key
        elif pt is DividendProviderType.POLYGON:
            if not config.polygon_api_key:
                logger.debug("POLYGON_API_KEY not set; skipping polygon provider")
                continue
            kwargs["api_key"] = config.polygon_api_key
        providers.append(create_provider(pt, **kwargs))
    return providers


def build_resolver(config: DividendSyncConfig) -> DividendResolver:
    return DividendResolver(
        build_providers(config),
        cache=create_fact_cache(
            config.cache_backend,
            ttl_seconds=config.cache_ttl_seconds,
            max_entries=config.cache_max_entries,
        ),
        provider_delay=config.provider_delay,
        provider_batch_size=config.provider_batch_size,
        provider_batch_delay=config.provider_batch_delay,
    )


def build_orchestrator(
    config: DividendSyncConfig,
    positions: PositionSource,
    store: DividendRecordStore,
    jobs: JobStore | None = None,
    resolver: DividendResolver | None = None,
) -> DividendSyncOrchestrator:
    calculator = PortfolioDividendCalculator(
        resolver or build_resolver(config),
        batch_size=config.listing_batch_size,
        batch_delay=config.listing_batch_delay,
    )
    return DividendSyncOrchestrator(
        positions=positions,
        calculator=calculator,
        reconciler=DividendReconciler(store, tolerance=config.reconcile_tolerance),
        jobs=jobs,
        run_interval=timedelta(hours=config.run_interval_hours),
    )
