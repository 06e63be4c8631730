"""Deterministic technical indicators over close-price series.

Every function here is a pure function of its inputs and raises
InsufficientDataError when the series is too short for its period.
"""

from forecaster.indicators.bollinger import compute_bollinger
from forecaster.indicators.ema import analyze_trend, classify_trend, compute_ema
from forecaster.indicators.fibonacci import compute_fibonacci

__all__ = [
    "analyze_trend",
    "classify_trend",
    "compute_bollinger",
    "compute_ema",
    "compute_fibonacci",
]
