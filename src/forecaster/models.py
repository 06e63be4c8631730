"""Shared data models for the forecast engine.

CRITICAL: All prices, scores and confidences use Decimal. Never use float
for indicator math; upstream floats are converted with Decimal(str(x)).
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any


def to_decimal(value: Decimal | float | int | str) -> Decimal:
    """Return ``value`` as a Decimal, going through str() for floats."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class Signal(str, Enum):
    """Directional verdict shared by the sentiment scorer and the aggregator."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class TrendLabel(str, Enum):
    """EMA fast/slow relationship classification."""

    STRONG_UPTREND = "strong-uptrend"
    WEAK_UPTREND = "weak-uptrend"
    NEUTRAL = "neutral"
    WEAK_DOWNTREND = "weak-downtrend"
    STRONG_DOWNTREND = "strong-downtrend"


class BollingerSignal(str, Enum):
    """Price position relative to the Bollinger envelope."""

    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"
    NEUTRAL = "neutral"


class FibonacciSignal(str, Enum):
    """Support/resistance reading of the current price."""

    SUPPORT = "support"
    RESISTANCE = "resistance"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class Candle:
    """A single OHLCV candle. time is Unix milliseconds."""

    time: int
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal


@dataclass(frozen=True)
class MarketSnapshot:
    """Everything the engine needs to forecast one symbol.

    Candles are stored as a tuple ordered oldest-first. price is expected
    to match the last close but that is the producer's concern.
    """

    symbol: str
    price: Decimal
    volume_24h: Decimal
    price_change_24h: Decimal
    funding_rate: Decimal
    candles: tuple[Candle, ...]

    def __post_init__(self) -> None:
        # Accept any sequence but always store an immutable tuple
        object.__setattr__(self, "candles", tuple(self.candles))
        if not self.candles:
            raise ValueError(f"Snapshot for {self.symbol} has no candles")
        for prev, curr in zip(self.candles, self.candles[1:]):
            if curr.time <= prev.time:
                raise ValueError(
                    f"Candle times must be strictly increasing "
                    f"({prev.time} followed by {curr.time})"
                )

    @property
    def closes(self) -> list[Decimal]:
        """Close prices, oldest first."""
        return [c.close for c in self.candles]


@dataclass(frozen=True)
class EMAResult:
    fast: Decimal
    slow: Decimal
    trend: TrendLabel


@dataclass(frozen=True)
class BollingerResult:
    upper: Decimal
    middle: Decimal
    lower: Decimal
    position: Decimal  # clamped to [-1, 1]
    signal: BollingerSignal


@dataclass(frozen=True)
class FibonacciResult:
    """Retracement ladder plus a reading of where the last price sits.

    levels maps level_0 .. level_1000 (high to low); extensions maps
    level_1272, level_1618, level_2618 below the low and is informational.
    Both are stored as read-only mappings.
    """

    high: Decimal
    low: Decimal
    levels: Mapping[str, Decimal]
    extensions: Mapping[str, Decimal]
    current_level: str
    signal: FibonacciSignal

    def __post_init__(self) -> None:
        object.__setattr__(self, "levels", MappingProxyType(dict(self.levels)))
        object.__setattr__(self, "extensions", MappingProxyType(dict(self.extensions)))


@dataclass(frozen=True)
class SentimentFeatures:
    """Feature vector handed to the sentiment scorer."""

    ema9: Decimal
    ema21: Decimal
    funding_rate: Decimal
    bollinger_position: Decimal
    price: Decimal
    volume: Decimal


@dataclass(frozen=True)
class SentimentResult:
    signal: Signal
    confidence: Decimal  # 0-1
    reasoning: tuple[str, ...]
    used_fallback: bool = False


@dataclass(frozen=True)
class ForecastComponents:
    ema: EMAResult
    bollinger: BollingerResult
    fibonacci: FibonacciResult
    funding_rate: Decimal
    sentiment: SentimentResult


@dataclass(frozen=True)
class ForecastResult:
    """Final verdict for one forecast call. timestamp is Unix milliseconds."""

    symbol: str
    price: Decimal
    signal: Signal
    confidence: Decimal
    components: ForecastComponents
    recommendation: str
    timestamp: int
    votes: tuple[Signal, ...] = field(default=())


def _to_jsonable(obj: Any) -> Any:
    """Recursively convert Decimals to strings and enums to their values."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Mapping):
        return {k: _to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_jsonable(item) for item in obj]
    return obj


def forecast_to_dict(result: ForecastResult) -> dict[str, Any]:
    """Render a ForecastResult as a JSON-ready dict."""
    c = result.components
    return _to_jsonable({
        "symbol": result.symbol,
        "price": result.price,
        "signal": result.signal,
        "confidence": result.confidence,
        "components": {
            "ema": {"fast": c.ema.fast, "slow": c.ema.slow, "trend": c.ema.trend},
            "bollinger": {
                "upper": c.bollinger.upper,
                "middle": c.bollinger.middle,
                "lower": c.bollinger.lower,
                "position": c.bollinger.position,
                "signal": c.bollinger.signal,
            },
            "fibonacci": {
                "high": c.fibonacci.high,
                "low": c.fibonacci.low,
                "levels": c.fibonacci.levels,
                "extensions": c.fibonacci.extensions,
                "current_level": c.fibonacci.current_level,
                "signal": c.fibonacci.signal,
            },
            "funding_rate": c.funding_rate,
            "sentiment": {
                "signal": c.sentiment.signal,
                "confidence": c.sentiment.confidence,
                "reasoning": c.sentiment.reasoning,
                "used_fallback": c.sentiment.used_fallback,
            },
        },
        "votes": result.votes,
        "recommendation": result.recommendation,
        "timestamp": result.timestamp,
    })
