"""FastAPI application factory for the forecast API."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from forecaster.api import routes


def create_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Route handlers read ``settings``, ``engine`` and ``snapshot_provider``
    from ``app.state``; main.py (or a test) is responsible for setting them.

    Args:
        lifespan: Optional async context manager for application lifespan events.
    """
    app = FastAPI(title="Forecast Signal Engine", lifespan=lifespan)
    app.include_router(routes.router)
    return app
