"""DividendResolver - cache -> curated table -> provider chain -> sentinel."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass
from typing import Any

from dividendsync.batching import run_in_batches
from dividendsync.cache import FactCache, MemoryFactCache
from dividendsync.curated import CuratedTable
from dividendsync.models.dividend import DividendFact
from dividendsync.providers.base import BaseDividendProvider
from dividendsync.symbols import normalize

logger = logging.getLogger(__name__)

ORIGIN_CACHE = "cache"
ORIGIN_CURATED = "curated"
ORIGIN_NONE = "none"


@dataclass
class ResolverStats:
    """Running counters for one resolver instance."""

    cache_hits: int = 0
    curated_hits: int = 0
    provider_calls: int = 0
    provider_hits: int = 0
    negatives: int = 0

    def copy(self) -> ResolverStats:
        return ResolverStats(**asdict(self))

    def since(self, earlier: ResolverStats) -> ResolverStats:
        """Counter deltas relative to an earlier snapshot."""
        now, before = asdict(self), asdict(earlier)
        return ResolverStats(**{k: now[k] - before[k] for k in now})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class DividendResolver:
    """Answers "does this symbol pay a dividend, and how much".

    Resolution order, first success wins:

    1. the fact cache (positive and negative results alike),
    2. the curated table,
    3. each provider in order, stopping at the first positive annual dividend,
    4. the zero-dividend sentinel.

    Every resolved fact is written to the cache and to this resolver's curated
    table, so a confirmed non-payer never reaches a provider twice. ``resolve``
    never raises.

    Usage::

        resolver = DividendResolver([create_provider(DividendProviderType.YAHOO)])
        fact = await resolver.resolve("KO")
    """

    def __init__(
        self,
        providers: Sequence[BaseDividendProvider] = (),
        curated: CuratedTable | None = None,
        cache: FactCache | None = None,
        provider_delay: float = 0.05,
        provider_batch_size: int = 3,
        provider_batch_delay: float = 1.0,
    ) -> None:
        self.providers = list(providers)
        self.curated = curated if curated is not None else CuratedTable()
        self.cache = cache if cache is not None else MemoryFactCache()
        self.provider_delay = provider_delay
        self.provider_batch_size = provider_batch_size
        self.provider_batch_delay = provider_batch_delay
        self.stats = ResolverStats()
        self._origins: dict[str, str] = {}

    async def resolve(self, symbol: str) -> DividendFact:
        key = normalize(symbol)

        cached = self.cache.get(key)
        if cached is not None:
            self.stats.cache_hits += 1
            self._origins[key] = ORIGIN_CACHE
            return cached

        curated = self.curated.get(key)
        if curated is not None:
            self.stats.curated_hits += 1
            return self._remember(key, curated, ORIGIN_CURATED)

        fact = await self._from_providers(key)
        if fact is not None:
            self.stats.provider_hits += 1
            return self._remember(key, fact, fact.source)

        logger.debug("No dividend data for %s; caching as non-payer", key)
        self.stats.negatives += 1
        return self._remember(key, DividendFact.none(), ORIGIN_NONE)

    async def resolve_many(
        self,
        symbols: Iterable[str],
        batch_size: int = 10,
        batch_delay: float = 0.5,
    ) -> dict[str, DividendFact]:
        """Resolve unique normalised symbols in fixed-size batches.

        Symbols already in the cache or curated table go through
        ``batch_size``/``batch_delay`` batches. Symbols that need a live
        provider lookup use the smaller ``provider_batch_size`` /
        ``provider_batch_delay`` window.
        """
        unique = list(dict.fromkeys(normalize(s) for s in symbols))
        known = [s for s in unique if self.is_known(s)]
        misses = [s for s in unique if not self.is_known(s)]

        facts: dict[str, DividendFact] = {}
        for group, size, delay in (
            (known, batch_size, batch_delay),
            (misses, self.provider_batch_size, self.provider_batch_delay),
        ):
            if not group:
                continue
            settled = await run_in_batches(group, self.resolve, size, delay)
            for symbol, outcome in zip(group, settled):
                # resolve() does not raise; anything else is a cancellation-level
                # problem and is treated as "no dividend".
                facts[symbol] = outcome if isinstance(outcome, DividendFact) else DividendFact.none()
        return {s: facts[s] for s in unique}

    def is_known(self, symbol: str) -> bool:
        """True when ``symbol`` resolves without a provider call."""
        key = normalize(symbol)
        return self.cache.has(key) or key in self.curated

    def last_origin(self, symbol: str) -> str | None:
        """Where the most recent fact for ``symbol`` came from.

        One of "cache", "curated", "none" or a provider name; None if the
        symbol was never resolved by this instance.
        """
        return self._origins.get(normalize(symbol))

    def reset(self) -> None:
        """Drop cached facts and counters (the curated table is kept)."""
        self.cache.clear_all()
        self.stats = ResolverStats()
        self._origins.clear()

    # ------------------------------------------------------------ internals

    async def _from_providers(self, symbol: str) -> DividendFact | None:
        for i, provider in enumerate(self.providers):
            if i and self.provider_delay > 0:
                await asyncio.sleep(self.provider_delay)
            self.stats.provider_calls += 1
            try:
                result = await asyncio.to_thread(provider.fetch_dividend, symbol)
            except Exception as exc:
                logger.warning("%s lookup for %s failed: %s", provider.name, symbol, exc)
                continue
            if result is not None and result.annual_dividend > 0:
                logger.debug(
                    "%s: %s pays %.4f/yr", provider.name, symbol, result.annual_dividend
                )
                return result.to_fact()
        return None

    def _remember(self, symbol: str, fact: DividendFact, origin: str) -> DividendFact:
        self.cache.store(symbol, fact)
        self.curated.add(symbol, fact)
        self._origins[symbol] = origin
        return fact
