"""PortfolioDividendCalculator - positions in, income and yield out."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace

from dividendsync.models.dividend import DividendFact
from dividendsync.models.position import Position
from dividendsync.models.summary import (
    CalculationStats,
    DividendContribution,
    PortfolioDividendSummary,
)
from dividendsync.resolver import ORIGIN_CACHE, ORIGIN_CURATED, ORIGIN_NONE, DividendResolver
from dividendsync.symbols import normalize

logger = logging.getLogger(__name__)

_NON_PROVIDER_ORIGINS = {ORIGIN_CACHE, ORIGIN_CURATED, ORIGIN_NONE, None}


@dataclass
class _Holding:
    symbol: str
    shares: float = 0.0
    value: float = 0.0
    price: float = 0.0
    originals: list[str] = field(default_factory=list)


def _group(positions: Sequence[Position]) -> tuple[dict[str, _Holding], float]:
    """Group lots by normalised symbol; also return the whole-portfolio value."""
    holdings: dict[str, _Holding] = {}
    total_value = 0.0
    for pos in positions:
        total_value += pos.value
        if pos.quantity <= 0:
            continue
        symbol = normalize(pos.symbol)
        h = holdings.setdefault(symbol, _Holding(symbol))
        h.shares += pos.quantity
        h.value += pos.value
        if pos.current_price > 0:
            h.price = pos.current_price
        if pos.symbol not in h.originals:
            h.originals.append(pos.symbol)
    return holdings, total_value


def summarize(
    positions: Sequence[Position],
    facts: Mapping[str, DividendFact],
) -> PortfolioDividendSummary:
    """Aggregate already-resolved facts over a position list.

    ``facts`` is keyed by normalised symbol; symbols missing from it are
    treated as non-payers. Non-payers still count towards portfolio value.
    """
    holdings, total_value = _group(positions)

    contributions: list[DividendContribution] = []
    for symbol, h in holdings.items():
        fact = facts.get(symbol)
        if fact is None or not fact.pays_dividend:
            continue
        dividend_yield = fact.dividend_yield
        if dividend_yield <= 0 and h.price > 0:
            dividend_yield = fact.annual / h.price * 100
        contributions.append(
            DividendContribution(
                symbol=symbol,
                original_symbols=tuple(h.originals),
                shares=h.shares,
                annual_dividend=fact.annual,
                quarterly_dividend=fact.quarterly,
                annual_income=fact.annual * h.shares,
                quarterly_income=fact.quarterly * h.shares,
                dividend_yield=dividend_yield,
                frequency=fact.frequency,
                position_value=h.value,
                ex_date=fact.next_ex_date,
                payment_date=fact.payment_date,
                source=fact.source,
            )
        )
    contributions.sort(key=lambda c: c.annual_income, reverse=True)

    annual = sum(c.annual_income for c in contributions)
    quarterly = sum(c.quarterly_income for c in contributions)
    return PortfolioDividendSummary(
        total_annual_income=annual,
        total_quarterly_income=quarterly,
        total_portfolio_value=total_value,
        portfolio_yield=annual / total_value * 100 if total_value > 0 else 0.0,
        dividend_paying_stocks=contributions,
        stats=CalculationStats(
            total_positions=len(positions),
            total_analyzed=len(holdings),
            symbols_matched=sum(
                1 for s in holdings if s in facts and facts[s].source != ORIGIN_NONE
            ),
            dividend_payers_found=len(contributions),
        ),
    )


class PortfolioDividendCalculator:
    """Resolve each unique held symbol once, then aggregate.

    Args:
        resolver: Shared DividendResolver.
        batch_size: Unique symbols resolved concurrently per batch.
        batch_delay: Seconds slept between batches.
    """

    def __init__(
        self,
        resolver: DividendResolver,
        batch_size: int = 10,
        batch_delay: float = 0.5,
    ) -> None:
        self.resolver = resolver
        self.batch_size = batch_size
        self.batch_delay = batch_delay

    async def calculate(self, positions: Sequence[Position]) -> PortfolioDividendSummary:
        if not positions:
            return PortfolioDividendSummary()

        holdings, _ = _group(positions)
        before = self.resolver.stats.copy()
        facts = await self.resolver.resolve_many(
            holdings, batch_size=self.batch_size, batch_delay=self.batch_delay
        )
        delta = self.resolver.stats.since(before)

        summary = summarize(positions, facts)
        stats = replace(
            summary.stats,
            newly_detected=sum(
                1 for s in facts if self.resolver.last_origin(s) not in _NON_PROVIDER_ORIGINS
            ),
            api_calls_made=delta.provider_calls,
            cache_hits=delta.cache_hits,
            curated_hits=delta.curated_hits,
        )
        logger.info(
            "Analyzed %d symbols: %d dividend payers, %.2f annual income",
            stats.total_analyzed,
            stats.dividend_payers_found,
            summary.total_annual_income,
        )
        return replace(summary, stats=stats)
