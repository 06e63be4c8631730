"""JSON API endpoints for forecasts and pair discovery."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from forecaster.exceptions import InsufficientDataError, MarketDataError
from forecaster.logging import get_logger
from forecaster.models import forecast_to_dict

log = get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health() -> JSONResponse:
    return JSONResponse(content={"status": "ok"})


@router.get("/api/forecast")
async def get_forecast(
    request: Request,
    symbol: str = Query("BTCUSDT"),
    interval: str | None = Query(None),
    limit: int | None = Query(None, ge=2, le=1000),
) -> JSONResponse:
    """Forecast for one symbol.

    422 when the pair lacks enough history, 400 for an unparseable symbol,
    502 when the exchange cannot supply data.
    """
    provider = request.app.state.snapshot_provider
    engine = request.app.state.engine
    settings = request.app.state.settings

    try:
        snapshot = await provider.get_snapshot(
            symbol,
            interval=interval or settings.exchange.default_interval,
            limit=limit or settings.exchange.default_limit,
        )
        result = await engine.forecast(snapshot)
    except InsufficientDataError as e:
        log.info("forecast_insufficient_data", symbol=symbol, error=str(e))
        return JSONResponse(status_code=422, content={"error": str(e)})
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except MarketDataError as e:
        return JSONResponse(status_code=502, content={"error": str(e)})

    return JSONResponse(content=forecast_to_dict(result))


@router.get("/api/pairs")
async def get_pairs(
    request: Request,
    limit: int = Query(20, ge=1, le=200),
) -> JSONResponse:
    """Most traded USDT pairs, for pair selection in clients."""
    provider = request.app.state.snapshot_provider
    try:
        pairs = await provider.get_top_pairs(limit=limit)
    except MarketDataError as e:
        return JSONResponse(status_code=502, content={"error": str(e)})
    return JSONResponse(content={"pairs": pairs})
