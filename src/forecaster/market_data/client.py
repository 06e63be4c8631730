"""Abstract market data client interface.

The snapshot provider depends only on this interface, keeping
exchange-specific details isolated in the concrete implementation.
Only public endpoints are used; no API keys are required.
"""

from abc import ABC, abstractmethod


class MarketDataClient(ABC):
    """Abstract base class for public exchange market data."""

    @abstractmethod
    async def connect(self) -> None:
        """Initialize connection and load markets."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources (CRITICAL for ccxt async)."""
        ...

    @abstractmethod
    async def fetch_ticker(self, symbol: str) -> dict:
        """Fetch the 24h ticker for a spot symbol (e.g. "BTC/USDT")."""
        ...

    @abstractmethod
    async def fetch_tickers(self) -> dict:
        """Fetch 24h tickers for every spot symbol, keyed by symbol."""
        ...

    @abstractmethod
    async def fetch_ohlcv(
        self, symbol: str, timeframe: str = "1h", limit: int = 100
    ) -> list[list]:
        """Fetch candles as [timestamp_ms, open, high, low, close, volume], oldest first."""
        ...

    @abstractmethod
    async def fetch_funding_rate(self, symbol: str) -> dict:
        """Fetch the current funding rate for a perpetual (e.g. "BTC/USDT:USDT").

        Returns a ccxt funding-rate structure with at least ``fundingRate``.
        """
        ...
