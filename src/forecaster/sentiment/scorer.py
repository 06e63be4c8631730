"""Hybrid rule-based / ML sentiment scoring.

The technical sub-score is always computed from the feature vector:
    EMA relation        +0.4 / -0.4 (0 when the EMAs are equal)
    funding rate        +0.3 below -1%, -0.3 above +1%
    Bollinger position  +0.3 below -0.8, -0.3 above +0.8
clamped to [-1, 1].

With a classifier configured, its verdict is blended in:
    final = external * 0.6 + technical * 0.4
and classified with a +/-0.2 band. Without one, or when the call fails or
times out, the technical score is classified alone with a +/-0.3 band.
The external call is made once, never retried, and its errors never leave
this module.

CRITICAL: All computations use Decimal. Never use float.
"""

import asyncio
from decimal import Decimal

from forecaster.config import SentimentSettings
from forecaster.logging import get_logger
from forecaster.models import SentimentFeatures, SentimentResult, Signal
from forecaster.sentiment.classifier import ClassifierVerdict, SentimentClassifier

logger = get_logger(__name__)

_ONE = Decimal("1")
_ZERO = Decimal("0")

EMA_WEIGHT = Decimal("0.4")
FUNDING_WEIGHT = Decimal("0.3")
BOLLINGER_WEIGHT = Decimal("0.3")

FUNDING_EXTREME = Decimal("0.01")
BOLLINGER_EXTREME = Decimal("0.8")

BLENDED_THRESHOLD = Decimal("0.2")
FALLBACK_THRESHOLD = Decimal("0.3")

FALLBACK_REASON = "Rule-based fallback (external classifier unavailable)"

_LABEL_DIRECTION: dict[str, Decimal] = {
    "positive": _ONE,
    "negative": -_ONE,
    "neutral": _ZERO,
}


def _clamp(value: Decimal) -> Decimal:
    return max(-_ONE, min(_ONE, value))


def compute_technical_score(features: SentimentFeatures) -> Decimal:
    """Rule-based sentiment score in [-1, 1]. Pure function."""
    score = _ZERO

    if features.ema9 > features.ema21:
        score += EMA_WEIGHT
    elif features.ema9 < features.ema21:
        score -= EMA_WEIGHT

    if features.funding_rate < -FUNDING_EXTREME:
        score += FUNDING_WEIGHT
    elif features.funding_rate > FUNDING_EXTREME:
        score -= FUNDING_WEIGHT

    if features.bollinger_position < -BOLLINGER_EXTREME:
        score += BOLLINGER_WEIGHT
    elif features.bollinger_position > BOLLINGER_EXTREME:
        score -= BOLLINGER_WEIGHT

    return _clamp(score)


def classify_score(score: Decimal, threshold: Decimal) -> Signal:
    """Bullish above ``threshold``, bearish below ``-threshold``, else neutral."""
    if score > threshold:
        return Signal.BULLISH
    if score < -threshold:
        return Signal.BEARISH
    return Signal.NEUTRAL


def build_reasoning(features: SentimentFeatures) -> list[str]:
    """Deterministic reasoning phrases for the technical conditions."""
    reasons: list[str] = []

    if features.ema9 > features.ema21:
        reasons.append("Bullish EMA crossover")
    elif features.ema9 < features.ema21:
        reasons.append("Bearish EMA trend")
    else:
        reasons.append("Flat EMA trend")

    if abs(features.funding_rate) > FUNDING_EXTREME:
        reasons.append("High funding" if features.funding_rate > 0 else "Negative funding")

    if abs(features.bollinger_position) > BOLLINGER_EXTREME:
        reasons.append("Overbought" if features.bollinger_position > 0 else "Oversold")

    return reasons


def describe_features(features: SentimentFeatures) -> str:
    """Short natural-language description sent to the classifier."""
    momentum = "positive" if features.ema9 > features.ema21 else "negative"
    funding_bias = "bullish" if features.funding_rate > 0 else "bearish"
    funding_pct = (features.funding_rate * 100).quantize(Decimal("0.001"))
    band = "upper band" if features.bollinger_position > 0 else "lower band"
    return (
        f"Price momentum: {momentum}. "
        f"Funding: {funding_bias} at {funding_pct}%. "
        f"Bollinger: {band}. "
        f"Price {features.price} on 24h volume {features.volume}."
    )


class SentimentScorer:
    """Scores market sentiment, optionally consulting an external classifier.

    Args:
        classifier: External classifier. None = technical score only.
        settings: Timeout and blend weight for the external call.
    """

    def __init__(
        self,
        classifier: SentimentClassifier | None = None,
        settings: SentimentSettings | None = None,
    ) -> None:
        self._classifier = classifier
        self._settings = settings or SentimentSettings()

    async def score_sentiment(self, features: SentimentFeatures) -> SentimentResult:
        """Score ``features``. Never raises on classifier failure."""
        technical = compute_technical_score(features)

        if self._classifier is None:
            return self._fallback(features, technical)

        try:
            verdict = await asyncio.wait_for(
                self._classifier.classify(describe_features(features)),
                timeout=self._settings.timeout_seconds,
            )
            external = _LABEL_DIRECTION[verdict.label] * verdict.score
        except asyncio.TimeoutError:
            logger.warning(
                "sentiment_fallback",
                reason="timeout",
                timeout_seconds=self._settings.timeout_seconds,
            )
            return self._fallback(features, technical)
        except Exception as e:
            logger.warning("sentiment_fallback", reason="classifier_error", error=str(e))
            return self._fallback(features, technical)

        return self._blend(features, technical, external, verdict)

    def _blend(
        self,
        features: SentimentFeatures,
        technical: Decimal,
        external: Decimal,
        verdict: ClassifierVerdict,
    ) -> SentimentResult:
        weight = self._settings.external_weight
        final = external * weight + technical * (_ONE - weight)

        reasoning = build_reasoning(features)
        reasoning.append(f"ML: {verdict.label}")

        return SentimentResult(
            signal=classify_score(final, BLENDED_THRESHOLD),
            confidence=min(_ONE, abs(final)),
            reasoning=tuple(reasoning),
        )

    @staticmethod
    def _fallback(features: SentimentFeatures, technical: Decimal) -> SentimentResult:
        reasoning = build_reasoning(features)
        reasoning.append(FALLBACK_REASON)

        return SentimentResult(
            signal=classify_score(technical, FALLBACK_THRESHOLD),
            confidence=abs(technical),
            reasoning=tuple(reasoning),
            used_fallback=True,
        )
