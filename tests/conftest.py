"""Shared test fixtures for the forecast engine."""

from collections.abc import Callable, Sequence
from decimal import Decimal

import pytest

from forecaster.config import AppSettings, SentimentSettings
from forecaster.models import Candle, MarketSnapshot

HOUR_MS = 3_600_000


def build_candles(closes: Sequence[float | str | Decimal], start_ms: int = 1_700_000_000_000) -> list[Candle]:
    """Hourly candles whose open/high/low equal the close."""
    candles = []
    for i, close in enumerate(closes):
        price = Decimal(str(close))
        candles.append(
            Candle(
                time=start_ms + i * HOUR_MS,
                open=price,
                high=price,
                low=price,
                close=price,
                volume=Decimal("10"),
            )
        )
    return candles


@pytest.fixture
def snapshot_factory() -> Callable[..., MarketSnapshot]:
    """Return a builder for MarketSnapshots from a list of closes."""

    def _make(
        closes: Sequence[float | str | Decimal],
        symbol: str = "BTC/USDT",
        funding_rate: Decimal = Decimal("0"),
    ) -> MarketSnapshot:
        candles = build_candles(closes)
        return MarketSnapshot(
            symbol=symbol,
            price=candles[-1].close,
            volume_24h=Decimal("1000"),
            price_change_24h=Decimal("0"),
            funding_rate=funding_rate,
            candles=tuple(candles),
        )

    return _make


@pytest.fixture
def flat_snapshot(snapshot_factory: Callable[..., MarketSnapshot]) -> MarketSnapshot:
    """25 flat candles closing at 100."""
    return snapshot_factory([100] * 25)


@pytest.fixture
def app_settings() -> AppSettings:
    """Return AppSettings with test defaults (no sentiment API key)."""
    return AppSettings(
        log_level="DEBUG",
        sentiment=SentimentSettings(api_key="", timeout_seconds=0.5),  # type: ignore[arg-type]
    )
