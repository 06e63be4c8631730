"""Custom exceptions for the forecast engine.

Only InsufficientDataError and MarketDataError ever reach callers of the
engine or the snapshot provider. ExternalServiceError is raised by
sentiment classifiers and always absorbed by the scorer's fallback.
"""


class ForecastError(Exception):
    """Base exception for all forecast errors."""


class InsufficientDataError(ForecastError):
    """Raised when a price series is too short for an indicator."""

    def __init__(self, indicator: str, required: int, available: int) -> None:
        self.indicator = indicator
        self.required = required
        self.available = available
        super().__init__(
            f"Not enough data for {indicator}: need {required}, got {available}"
        )


class ExternalServiceError(ForecastError):
    """Raised when the sentiment classifier fails or returns a malformed reply."""


class MarketDataError(ForecastError):
    """Raised when the exchange cannot supply a ticker or candles for a symbol."""
