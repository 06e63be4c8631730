"""Price trend detection from a fast/slow EMA pair.

Computes Exponential Moving Averages over close prices and classifies the
relationship of the fast EMA to the slow one into five trend labels. Uses
Decimal arithmetic with quantize to keep intermediate values bounded.

CRITICAL: All computations use Decimal. Never use float.
"""

from collections.abc import Sequence
from decimal import Decimal

from forecaster.exceptions import InsufficientDataError
from forecaster.models import EMAResult, TrendLabel, to_decimal

#: Precision limit for EMA intermediate results (12 decimal places).
_EMA_QUANTIZE = Decimal("0.000000000001")

#: Fast EMA must clear the slow EMA by 1% for a "strong" label.
_STRONG_UPPER = Decimal("1.01")
_STRONG_LOWER = Decimal("0.99")


def compute_ema(prices: Sequence[Decimal | float], period: int) -> list[Decimal]:
    """Compute an Exponential Moving Average seeded with a simple average.

    The first output value is the mean of the first ``period`` prices; each
    later value is:
        k = 2 / (period + 1)
        EMA_t = price_t * k + EMA_{t-1} * (1 - k)

    Args:
        prices: Ordered prices (oldest first). Floats are converted via str().
        period: Number of periods for smoothing. Must be positive.

    Returns:
        ``len(prices) - period + 1`` EMA values, the last aligned with the
        last price. Empty list if fewer than ``period`` prices are given.
    """
    if period <= 0:
        raise ValueError(f"EMA period must be positive, got {period}")
    if len(prices) < period:
        return []

    prices = [to_decimal(p) for p in prices]

    k = Decimal("2") / (Decimal(period) + Decimal("1"))
    one_minus_k = Decimal("1") - k

    seed = sum(prices[:period], Decimal("0")) / Decimal(period)
    ema = [seed.quantize(_EMA_QUANTIZE)]
    for price in prices[period:]:
        ema.append((price * k + ema[-1] * one_minus_k).quantize(_EMA_QUANTIZE))

    return ema


def classify_trend(fast: Decimal, slow: Decimal) -> TrendLabel:
    """Map the last fast/slow EMA pair to a trend label."""
    if fast > slow * _STRONG_UPPER:
        return TrendLabel.STRONG_UPTREND
    if fast > slow:
        return TrendLabel.WEAK_UPTREND
    if fast < slow * _STRONG_LOWER:
        return TrendLabel.STRONG_DOWNTREND
    if fast < slow:
        return TrendLabel.WEAK_DOWNTREND
    return TrendLabel.NEUTRAL


def analyze_trend(
    prices: Sequence[Decimal | float],
    fast_period: int = 9,
    slow_period: int = 21,
) -> EMAResult:
    """Compute the fast and slow EMA and classify the trend.

    Raises:
        InsufficientDataError: fewer prices than the longer of the two periods.
    """
    required = max(fast_period, slow_period)
    if len(prices) < required:
        raise InsufficientDataError("EMA", required, len(prices))

    fast = compute_ema(prices, fast_period)[-1]
    slow = compute_ema(prices, slow_period)[-1]
    return EMAResult(fast=fast, slow=slow, trend=classify_trend(fast, slow))
