"""Tests for the REST API routes.

The snapshot provider is mocked; the engine is real and runs on the
rule-based sentiment path.
"""

from collections.abc import Callable
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from forecaster.api.app import create_app
from forecaster.config import AppSettings
from forecaster.engine import ForecastEngine
from forecaster.exceptions import MarketDataError
from forecaster.market_data.snapshot_provider import SnapshotProvider
from forecaster.models import MarketSnapshot
from forecaster.sentiment.scorer import SentimentScorer


@pytest.fixture
def provider() -> AsyncMock:
    return AsyncMock(spec=SnapshotProvider)


@pytest.fixture
def client(app_settings: AppSettings, provider: AsyncMock) -> TestClient:
    app = create_app()
    app.state.settings = app_settings
    app.state.snapshot_provider = provider
    app.state.engine = ForecastEngine(scorer=SentimentScorer(settings=app_settings.sentiment))
    return TestClient(app)


class TestForecastRoute:
    """Tests for GET /api/forecast."""

    def test_flat_market_forecast(
        self, client: TestClient, provider: AsyncMock, flat_snapshot: MarketSnapshot
    ) -> None:
        provider.get_snapshot.return_value = flat_snapshot

        response = client.get("/api/forecast", params={"symbol": "BTCUSDT"})

        assert response.status_code == 200
        data = response.json()
        assert data["symbol"] == "BTC/USDT"
        assert data["signal"] == "neutral"
        assert Decimal(data["confidence"]) == Decimal("0")
        assert data["recommendation"] == "Wait for clearer signals"
        assert data["components"]["ema"]["trend"] == "neutral"
        assert data["components"]["bollinger"]["signal"] == "neutral"
        assert data["components"]["sentiment"]["used_fallback"] is True
        assert Decimal(data["components"]["fibonacci"]["levels"]["level_618"]) == Decimal("100")

    def test_default_interval_and_limit(
        self,
        client: TestClient,
        provider: AsyncMock,
        flat_snapshot: MarketSnapshot,
        app_settings: AppSettings,
    ) -> None:
        provider.get_snapshot.return_value = flat_snapshot

        client.get("/api/forecast", params={"symbol": "ETHUSDT"})

        provider.get_snapshot.assert_awaited_once_with(
            "ETHUSDT",
            interval=app_settings.exchange.default_interval,
            limit=app_settings.exchange.default_limit,
        )

    def test_insufficient_history_is_422(
        self,
        client: TestClient,
        provider: AsyncMock,
        snapshot_factory: Callable[..., MarketSnapshot],
    ) -> None:
        provider.get_snapshot.return_value = snapshot_factory([100] * 10)

        response = client.get("/api/forecast", params={"symbol": "NEWUSDT"})

        assert response.status_code == 422
        assert "Not enough data" in response.json()["error"]

    def test_bad_symbol_is_400(self, client: TestClient, provider: AsyncMock) -> None:
        provider.get_snapshot.side_effect = ValueError("Cannot determine quote currency")

        response = client.get("/api/forecast", params={"symbol": "???"})

        assert response.status_code == 400

    def test_exchange_failure_is_502(self, client: TestClient, provider: AsyncMock) -> None:
        provider.get_snapshot.side_effect = MarketDataError("exchange down")

        response = client.get("/api/forecast", params={"symbol": "BTCUSDT"})

        assert response.status_code == 502
        assert response.json() == {"error": "exchange down"}


class TestOtherRoutes:
    """Tests for /api/pairs and /health."""

    def test_pairs(self, client: TestClient, provider: AsyncMock) -> None:
        provider.get_top_pairs.return_value = ["BTC/USDT", "ETH/USDT"]

        response = client.get("/api/pairs", params={"limit": 2})

        assert response.status_code == 200
        assert response.json() == {"pairs": ["BTC/USDT", "ETH/USDT"]}
        provider.get_top_pairs.assert_awaited_once_with(limit=2)

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.json() == {"status": "ok"}
