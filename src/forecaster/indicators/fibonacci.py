"""Fibonacci retracement levels and support/resistance reading.

Levels are measured down from the swing high of the lookback window:
    level = high - (high - low) * ratio

The current price is first compared against the nearest retracement level.
Within 0.5% of a level, the level itself decides the signal: levels priced
at or below the 50% retracement act as support, the ones above it as
resistance. Away from any level a coarse zone rule applies.

CRITICAL: All computations use Decimal. Never use float.
"""

from collections.abc import Sequence
from decimal import Decimal

from forecaster.exceptions import InsufficientDataError
from forecaster.models import FibonacciResult, FibonacciSignal, to_decimal

#: Retracement ladder, ordered high to low. Order is the tie-break order.
RETRACEMENT_RATIOS: tuple[tuple[str, str, Decimal], ...] = (
    ("level_0", "0% (High)", Decimal("0")),
    ("level_236", "23.6%", Decimal("0.236")),
    ("level_382", "38.2%", Decimal("0.382")),
    ("level_500", "50%", Decimal("0.5")),
    ("level_618", "61.8% (Golden)", Decimal("0.618")),
    ("level_786", "78.6%", Decimal("0.786")),
    ("level_1000", "100% (Low)", Decimal("1")),
)

#: Extension levels below the swing low (informational only).
EXTENSION_RATIOS: tuple[tuple[str, Decimal], ...] = (
    ("level_1272", Decimal("0.272")),
    ("level_1618", Decimal("0.618")),
    ("level_2618", Decimal("1.618")),
)

#: Relative distance under which the price counts as sitting on a level.
PROXIMITY_TOLERANCE = Decimal("0.005")

_SUPPORT_FROM_RATIO = Decimal("0.5")


def _classify_position(
    price: Decimal, levels: dict[str, Decimal]
) -> tuple[str, FibonacciSignal]:
    """Return (label, signal) for ``price`` against the retracement ladder."""
    nearest_key, nearest_name, nearest_ratio = RETRACEMENT_RATIOS[0]
    min_distance = abs(price - levels[nearest_key])
    for key, name, ratio in RETRACEMENT_RATIOS[1:]:
        distance = abs(price - levels[key])
        # Strict comparison keeps the first level on ties
        if distance < min_distance:
            min_distance = distance
            nearest_key, nearest_name, nearest_ratio = key, name, ratio

    if price > 0 and min_distance / price < PROXIMITY_TOLERANCE:
        if nearest_ratio >= _SUPPORT_FROM_RATIO:
            return f"Near {nearest_name}", FibonacciSignal.SUPPORT
        return f"Near {nearest_name}", FibonacciSignal.RESISTANCE

    if levels["level_618"] < price < levels["level_382"]:
        return "Between 38.2% and 61.8%", FibonacciSignal.NEUTRAL
    if price > levels["level_500"]:
        return "Above 50% retracement", FibonacciSignal.RESISTANCE
    return "Below 50% retracement", FibonacciSignal.SUPPORT


def compute_fibonacci(prices: Sequence[Decimal | float], lookback: int = 100) -> FibonacciResult:
    """Compute retracement/extension levels and classify the last price.

    Args:
        prices: Ordered prices (oldest first). Floats are converted via str().
        lookback: Number of most recent prices used to find the swing.

    Raises:
        InsufficientDataError: fewer than 2 prices.
    """
    if len(prices) < 2:
        raise InsufficientDataError("Fibonacci", 2, len(prices))

    prices = [to_decimal(p) for p in prices]
    recent = prices[-lookback:] if lookback > 0 else prices
    high = max(recent)
    low = min(recent)
    swing = high - low

    levels = {key: high - swing * ratio for key, _, ratio in RETRACEMENT_RATIOS}
    # Pin the endpoints so they are exactly the swing extremes
    levels["level_0"] = high
    levels["level_1000"] = low
    extensions = {key: low - swing * ratio for key, ratio in EXTENSION_RATIOS}

    current_level, signal = _classify_position(prices[-1], levels)

    return FibonacciResult(
        high=high,
        low=low,
        levels=levels,
        extensions=extensions,
        current_level=current_level,
        signal=signal,
    )
