"""Forecast engine fusing indicators and sentiment into one verdict.

The ForecastEngine is the top-level coordinator that:
1. Extracts the close-price series from a MarketSnapshot
2. Computes EMA trend, Bollinger Bands and Fibonacci levels
3. Builds the sentiment feature vector and scores it
4. Tallies votes (sentiment, EMA, Bollinger) into a signal and confidence
5. Logs the breakdown at INFO level and returns a ForecastResult

InsufficientDataError from any indicator aborts the forecast and reaches
the caller untouched. Each call is independent, so concurrent forecasts
for different symbols share no state.

CRITICAL: All computations use Decimal. Never use float for signal scores.
"""

from __future__ import annotations

import time
from decimal import Decimal

from forecaster.config import IndicatorSettings
from forecaster.indicators.bollinger import compute_bollinger
from forecaster.indicators.ema import analyze_trend
from forecaster.indicators.fibonacci import compute_fibonacci
from forecaster.logging import forecast_context, get_logger
from forecaster.models import (
    BollingerResult,
    BollingerSignal,
    EMAResult,
    ForecastComponents,
    ForecastResult,
    MarketSnapshot,
    SentimentFeatures,
    Signal,
)
from forecaster.sentiment.scorer import SentimentScorer

logger = get_logger(__name__)

#: Below this confidence no direction is recommended.
MIN_ACTIONABLE_CONFIDENCE = Decimal("0.3")

_RECOMMENDATIONS: dict[Signal, str] = {
    Signal.BULLISH: "Consider long positions",
    Signal.BEARISH: "Consider short positions",
    Signal.NEUTRAL: "Hold current positions",
}


def generate_recommendation(signal: Signal, confidence: Decimal) -> str:
    """Recommendation text, a pure function of (signal, confidence)."""
    if confidence < MIN_ACTIONABLE_CONFIDENCE:
        return "Wait for clearer signals"
    return _RECOMMENDATIONS[signal]


def collect_votes(
    sentiment_signal: Signal, ema: EMAResult, bollinger: BollingerResult
) -> list[Signal]:
    """Build the vote list: sentiment first, then EMA, then Bollinger.

    Equal EMAs and a neutral Bollinger reading cast no vote.
    """
    votes = [sentiment_signal]

    if ema.fast > ema.slow:
        votes.append(Signal.BULLISH)
    elif ema.fast < ema.slow:
        votes.append(Signal.BEARISH)

    if bollinger.signal == BollingerSignal.OVERSOLD:
        votes.append(Signal.BULLISH)
    elif bollinger.signal == BollingerSignal.OVERBOUGHT:
        votes.append(Signal.BEARISH)

    return votes


def tally_votes(votes: list[Signal]) -> tuple[Signal, Decimal]:
    """Majority of bullish vs bearish votes; neutral on a tie.

    Confidence is |bullish - bearish| / total votes, neutral votes included
    in the total.
    """
    if not votes:
        return Signal.NEUTRAL, Decimal("0")

    bullish = sum(1 for v in votes if v == Signal.BULLISH)
    bearish = sum(1 for v in votes if v == Signal.BEARISH)

    if bullish > bearish:
        signal = Signal.BULLISH
    elif bearish > bullish:
        signal = Signal.BEARISH
    else:
        signal = Signal.NEUTRAL

    confidence = Decimal(abs(bullish - bearish)) / Decimal(len(votes))
    return signal, confidence


class ForecastEngine:
    """Produces a ForecastResult from a MarketSnapshot.

    Args:
        scorer: Sentiment scorer (owns the optional external classifier).
        settings: Indicator periods. Defaults to EMA 9/21, Bollinger 20x2,
            Fibonacci lookback 100.
    """

    def __init__(
        self,
        scorer: SentimentScorer,
        settings: IndicatorSettings | None = None,
    ) -> None:
        self._scorer = scorer
        self._settings = settings or IndicatorSettings()

    async def forecast(self, snapshot: MarketSnapshot) -> ForecastResult:
        """Run every indicator, score sentiment and vote.

        Raises:
            InsufficientDataError: the candle history is too short for an
                indicator period. No partial result is produced.
        """
        with forecast_context(snapshot.symbol):
            return await self._forecast(snapshot)

    async def _forecast(self, snapshot: MarketSnapshot) -> ForecastResult:
        prices = snapshot.closes

        ema = analyze_trend(
            prices,
            fast_period=self._settings.ema_fast,
            slow_period=self._settings.ema_slow,
        )
        bollinger = compute_bollinger(
            prices,
            period=self._settings.bollinger_period,
            multiplier=self._settings.bollinger_multiplier,
        )
        fibonacci = compute_fibonacci(prices, lookback=self._settings.fibonacci_lookback)

        features = SentimentFeatures(
            ema9=ema.fast,
            ema21=ema.slow,
            funding_rate=snapshot.funding_rate,
            bollinger_position=bollinger.position,
            price=snapshot.price,
            volume=snapshot.volume_24h,
        )
        sentiment = await self._scorer.score_sentiment(features)

        votes = collect_votes(sentiment.signal, ema, bollinger)
        signal, confidence = tally_votes(votes)

        result = ForecastResult(
            symbol=snapshot.symbol,
            price=snapshot.price,
            signal=signal,
            confidence=confidence,
            components=ForecastComponents(
                ema=ema,
                bollinger=bollinger,
                fibonacci=fibonacci,
                funding_rate=snapshot.funding_rate,
                sentiment=sentiment,
            ),
            recommendation=generate_recommendation(signal, confidence),
            timestamp=int(time.time() * 1000),
            votes=tuple(votes),
        )

        logger.info(
            "forecast_computed",
            signal=signal.value,
            confidence=str(confidence),
            ema_trend=ema.trend.value,
            bollinger=bollinger.signal.value,
            fibonacci=fibonacci.signal.value,
            sentiment=sentiment.signal.value,
            sentiment_fallback=sentiment.used_fallback,
            votes=[v.value for v in votes],
        )

        return result
