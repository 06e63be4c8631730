"""Market data client implementation via ccxt async.

Wraps any ccxt.async_support exchange (binance by default) with market
loading and async cleanup. Funding rates come from the exchange's
perpetual swap markets, so the instance is created with defaultType "spot"
and the swap symbol is passed explicitly.
"""

import ccxt.async_support as ccxt_async

from forecaster.config import ExchangeSettings
from forecaster.logging import get_logger
from forecaster.market_data.client import MarketDataClient

logger = get_logger(__name__)


class CcxtMarketDataClient(MarketDataClient):
    """Concrete public market data client using ccxt async."""

    def __init__(self, settings: ExchangeSettings) -> None:
        self._settings = settings

        exchange_class = getattr(ccxt_async, settings.exchange_id, None)
        if exchange_class is None:
            raise ValueError(f"Unknown ccxt exchange id: {settings.exchange_id}")

        self._exchange = exchange_class({
            "enableRateLimit": True,
            "options": {"defaultType": "spot"},
        })
        self._markets: dict = {}

    @property
    def exchange(self):
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def connect(self) -> None:
        """Initialize connection by loading markets."""
        logger.info("connecting_to_exchange", exchange=self._settings.exchange_id)
        self._markets = await self._exchange.load_markets()
        logger.info(
            "exchange_connected",
            exchange=self._settings.exchange_id,
            market_count=len(self._markets),
        )

    async def close(self) -> None:
        """Clean up ccxt async resources. CRITICAL: must be called to avoid resource leaks."""
        logger.info("closing_exchange_connection", exchange=self._settings.exchange_id)
        await self._exchange.close()

    async def fetch_ticker(self, symbol: str) -> dict:
        return await self._exchange.fetch_ticker(symbol)

    async def fetch_tickers(self) -> dict:
        return await self._exchange.fetch_tickers()

    async def fetch_ohlcv(
        self, symbol: str, timeframe: str = "1h", limit: int = 100
    ) -> list[list]:
        return await self._exchange.fetch_ohlcv(symbol, timeframe, limit=limit)

    async def fetch_funding_rate(self, symbol: str) -> dict:
        return await self._exchange.fetch_funding_rate(symbol)
