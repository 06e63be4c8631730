"""Builds MarketSnapshot records from live exchange data.

Fetches the 24h ticker, recent candles and the perpetual funding rate
concurrently. The funding rate is best-effort: when the pair has no
perpetual market, or the request fails, it degrades to 0. Ticker and
candle failures are fatal to the snapshot and surface as MarketDataError.

All numeric values are converted to Decimal via str() to avoid float
artefacts.
"""

import asyncio
from decimal import Decimal

import ccxt.async_support as ccxt_async

from forecaster.exceptions import MarketDataError
from forecaster.logging import get_logger
from forecaster.market_data.client import MarketDataClient
from forecaster.models import Candle, MarketSnapshot

logger = get_logger(__name__)

#: Quote currencies recognised when splitting a joined symbol like BTCUSDT.
KNOWN_QUOTES: tuple[str, ...] = ("USDT", "USDC", "FDUSD", "BUSD", "BTC", "ETH")


def _to_decimal(value: object) -> Decimal:
    """Convert an exchange number (float, str, or None) to Decimal."""
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


async def _cancel_pending(tasks: list[asyncio.Task]) -> None:
    """Cancel unfinished sibling requests and wait until they have stopped."""
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


def normalize_symbol(symbol: str) -> str:
    """Normalize user input to a ccxt spot symbol.

    "btc-usdt", "BTC_USDT", "BTCUSDT" and "BTC/USDT" all become "BTC/USDT".

    Raises:
        ValueError: the quote currency cannot be determined.
    """
    cleaned = symbol.strip().upper().replace("-", "/").replace("_", "/")
    if "/" in cleaned:
        base, _, quote = cleaned.partition("/")
        quote = quote.split(":")[0]
        if base and quote:
            return f"{base}/{quote}"
        raise ValueError(f"Invalid symbol: {symbol!r}")

    for quote in KNOWN_QUOTES:
        if cleaned.endswith(quote) and len(cleaned) > len(quote):
            return f"{cleaned[: -len(quote)]}/{quote}"
    raise ValueError(f"Cannot determine quote currency for symbol: {symbol!r}")


def to_perp_symbol(spot_symbol: str) -> str:
    """Linear perpetual symbol settled in the quote currency ("BTC/USDT:USDT")."""
    quote = spot_symbol.split("/")[1]
    return f"{spot_symbol}:{quote}"


def parse_candles(rows: list[list]) -> list[Candle]:
    """Convert ccxt OHLCV rows into Candles, dropping duplicate timestamps.

    Rows are sorted oldest-first; some exchanges return newest first.
    """
    candles: list[Candle] = []
    last_time: int | None = None
    for row in sorted(rows, key=lambda r: r[0]):
        ts = int(row[0])
        if last_time is not None and ts <= last_time:
            continue
        candles.append(
            Candle(
                time=ts,
                open=_to_decimal(row[1]),
                high=_to_decimal(row[2]),
                low=_to_decimal(row[3]),
                close=_to_decimal(row[4]),
                volume=_to_decimal(row[5]),
            )
        )
        last_time = ts
    return candles


class SnapshotProvider:
    """Supplies MarketSnapshots for the forecast engine.

    Args:
        client: Public market data client.
    """

    def __init__(self, client: MarketDataClient) -> None:
        self._client = client

    async def get_snapshot(
        self, symbol: str, interval: str = "1h", limit: int = 100
    ) -> MarketSnapshot:
        """Fetch ticker, candles and funding rate for ``symbol``.

        Raises:
            ValueError: ``symbol`` cannot be normalized.
            MarketDataError: ticker or candles unavailable.
        """
        spot_symbol = normalize_symbol(symbol)

        tasks = [
            asyncio.create_task(self._client.fetch_ticker(spot_symbol)),
            asyncio.create_task(
                self._client.fetch_ohlcv(spot_symbol, timeframe=interval, limit=limit)
            ),
            asyncio.create_task(self._fetch_funding_rate(spot_symbol)),
        ]
        try:
            ticker, rows, funding_rate = await asyncio.gather(*tasks)
        except ccxt_async.BaseError as e:
            await _cancel_pending(tasks)
            logger.warning("market_data_unavailable", symbol=spot_symbol, error=str(e))
            raise MarketDataError(f"Market data unavailable for {spot_symbol}: {e}") from e
        except Exception:
            await _cancel_pending(tasks)
            raise

        candles = parse_candles(rows)
        if not candles:
            raise MarketDataError(f"No candles returned for {spot_symbol}")

        price = ticker.get("last")
        return MarketSnapshot(
            symbol=spot_symbol,
            price=_to_decimal(price) if price is not None else candles[-1].close,
            volume_24h=_to_decimal(ticker.get("baseVolume")),
            price_change_24h=_to_decimal(ticker.get("percentage")),
            funding_rate=funding_rate,
            candles=tuple(candles),
        )

    async def _fetch_funding_rate(self, spot_symbol: str) -> Decimal:
        perp_symbol = to_perp_symbol(spot_symbol)
        try:
            data = await self._client.fetch_funding_rate(perp_symbol)
        except Exception as e:
            logger.debug("funding_rate_unavailable", symbol=perp_symbol, error=str(e))
            return Decimal("0")
        return _to_decimal(data.get("fundingRate"))

    async def get_top_pairs(self, limit: int = 20, quote: str = "USDT") -> list[str]:
        """Spot pairs quoted in ``quote``, highest 24h quote volume first."""
        try:
            tickers = await self._client.fetch_tickers()
        except ccxt_async.BaseError as e:
            raise MarketDataError(f"Tickers unavailable: {e}") from e

        suffix = f"/{quote}"
        candidates = [
            (symbol, _to_decimal(t.get("quoteVolume")))
            for symbol, t in tickers.items()
            if symbol.endswith(suffix)
        ]
        candidates.sort(key=lambda item: item[1], reverse=True)
        return [symbol for symbol, _ in candidates[:limit]]
