"""Market data layer -- public exchange data via ccxt, shaped into MarketSnapshots."""

from forecaster.market_data.ccxt_client import CcxtMarketDataClient
from forecaster.market_data.client import MarketDataClient
from forecaster.market_data.snapshot_provider import SnapshotProvider, normalize_symbol

__all__ = [
    "CcxtMarketDataClient",
    "MarketDataClient",
    "SnapshotProvider",
    "normalize_symbol",
]
