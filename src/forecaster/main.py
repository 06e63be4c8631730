"""Entry point for the forecast API server.

Component wiring order (in _build_components):
1. AppSettings (configuration)
2. Logging setup
3. CcxtMarketDataClient (public exchange data)
4. SnapshotProvider
5. HuggingFaceClassifier (only when SENTIMENT_API_KEY is set)
6. SentimentScorer
7. ForecastEngine

The exchange client is connected and closed by the FastAPI lifespan.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from forecaster.api.app import create_app
from forecaster.config import AppSettings
from forecaster.engine import ForecastEngine
from forecaster.logging import get_logger, setup_logging
from forecaster.market_data.ccxt_client import CcxtMarketDataClient
from forecaster.market_data.snapshot_provider import SnapshotProvider
from forecaster.sentiment.classifier import HuggingFaceClassifier
from forecaster.sentiment.scorer import SentimentScorer


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all components from settings.

    Does NOT connect the exchange client -- that happens in the lifespan.
    """
    logger = get_logger("forecaster.main")

    market_client = CcxtMarketDataClient(settings.exchange)
    snapshot_provider = SnapshotProvider(market_client)

    classifier = None
    if settings.sentiment.api_key.get_secret_value():
        classifier = HuggingFaceClassifier(settings.sentiment)
    else:
        logger.warning(
            "no_sentiment_api_key",
            note="Sentiment will use the rule-based technical score only.",
        )

    scorer = SentimentScorer(classifier=classifier, settings=settings.sentiment)
    engine = ForecastEngine(scorer=scorer, settings=settings.indicators)

    return {
        "market_client": market_client,
        "snapshot_provider": snapshot_provider,
        "scorer": scorer,
        "engine": engine,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect the exchange client on startup and close it on shutdown."""
    logger = get_logger("forecaster.main")
    market_client = app.state.market_client

    await market_client.connect()
    logger.info("forecaster_started")

    try:
        yield
    finally:
        await market_client.close()
        logger.info("forecaster_stopped")


async def run() -> None:
    """Run the forecast API server."""
    settings = AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("forecaster.main")

    components = _build_components(settings)

    app = create_app(lifespan=lifespan)
    app.state.settings = settings
    app.state.market_client = components["market_client"]
    app.state.snapshot_provider = components["snapshot_provider"]
    app.state.engine = components["engine"]

    logger.info(
        "starting_api",
        host=settings.api.host,
        port=settings.api.port,
        exchange=settings.exchange.exchange_id,
    )

    config = uvicorn.Config(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
