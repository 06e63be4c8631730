"""Bollinger Bands over the most recent price window.

The band is the window mean plus/minus ``multiplier`` population standard
deviations. The last price's position inside the band is normalized so
that the band edges sit at -1 and +1, then clamped to that range.

CRITICAL: All computations use Decimal. Never use float.
"""

from collections.abc import Sequence
from decimal import Decimal

from forecaster.exceptions import InsufficientDataError
from forecaster.models import BollingerResult, BollingerSignal, to_decimal

#: |position| beyond this marks the price as stretched.
EXTREME_POSITION = Decimal("0.8")

_ONE = Decimal("1")


def _clamp(value: Decimal, low: Decimal = -_ONE, high: Decimal = _ONE) -> Decimal:
    return max(low, min(high, value))


def compute_bollinger(
    prices: Sequence[Decimal | float],
    period: int = 20,
    multiplier: Decimal | float = Decimal("2"),
) -> BollingerResult:
    """Compute Bollinger Bands and the normalized price position.

    A constant price window has zero deviation; the band collapses onto the
    mean and the position is defined as 0.

    Args:
        prices: Ordered prices (oldest first). Floats are converted via str().
        period: Window length taken from the end of ``prices``. Must be positive.
        multiplier: Band width in standard deviations.

    Returns:
        BollingerResult with position in [-1, 1].

    Raises:
        ValueError: ``period`` is not positive.
        InsufficientDataError: fewer than ``period`` prices.
    """
    if period <= 0:
        raise ValueError(f"Bollinger period must be positive, got {period}")
    if len(prices) < period:
        raise InsufficientDataError("Bollinger Bands", period, len(prices))

    window = [to_decimal(p) for p in prices[-period:]]
    count = Decimal(period)
    mean = sum(window, Decimal("0")) / count
    variance = sum(((p - mean) ** 2 for p in window), Decimal("0")) / count
    std_dev = variance.sqrt()

    width = std_dev * to_decimal(multiplier)
    upper = mean + width
    lower = mean - width

    if width == 0:
        position = Decimal("0")
    else:
        position = _clamp((window[-1] - mean) / width)

    if position > EXTREME_POSITION:
        signal = BollingerSignal.OVERBOUGHT
    elif position < -EXTREME_POSITION:
        signal = BollingerSignal.OVERSOLD
    else:
        signal = BollingerSignal.NEUTRAL

    return BollingerResult(
        upper=upper,
        middle=mean,
        lower=lower,
        position=position,
        signal=signal,
    )
