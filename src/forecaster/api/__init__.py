"""REST API around the forecast engine."""

from forecaster.api.app import create_app

__all__ = ["create_app"]
