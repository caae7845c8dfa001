"""Dividend provider registry."""

from __future__ import annotations

from dividendsync.config import DividendProviderType
from dividendsync.providers.base import BaseDividendProvider

# Lazy registry - concrete classes are imported on demand.
PROVIDER_CLASSES: dict[DividendProviderType, str] = {
    DividendProviderType.YAHOO: "dividendsync.providers.yahoo.YahooProvider",
    DividendProviderType.ALPHA_VANTAGE: "dividendsync.providers.alphavantage.AlphaVantageProvider",
    DividendProviderType.FMP: "dividendsync.providers.fmp.FMPProvider",
    DividendProviderType.POLYGON: "dividendsync.providers.polygon.PolygonProvider",
    DividendProviderType.MOCK: "dividendsync.providers.mock.MockProvider",
}


def create_provider(
    provider_type: DividendProviderType,
    **kwargs,
) -> BaseDividendProvider:
    """Instantiate a provider by type, forwarding kwargs to its constructor."""
    import importlib

    dotted = PROVIDER_CLASSES[provider_type]
    module_path, cls_name = dotted.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls = getattr(module, cls_name)
    return cls(**kwargs)


__all__ = ["BaseDividendProvider", "PROVIDER_CLASSES", "create_provider"]
