"""Chat-friendly rendering of a ForecastResult (Telegram-style HTML)."""

from decimal import ROUND_HALF_UP, Decimal

from forecaster.models import ForecastResult, Signal

_SIGNAL_EMOJI: dict[Signal, str] = {
    Signal.BULLISH: "🟢",
    Signal.BEARISH: "🔴",
    Signal.NEUTRAL: "⚪",
}


def _confidence_bar(confidence: Decimal) -> str:
    cells = int((confidence * 10).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return "█" * cells


def format_user_message(result: ForecastResult) -> str:
    """Render ``result`` as a multi-line HTML message for chat clients."""
    c = result.components
    percent = (result.confidence * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    funding_pct = (c.funding_rate * 100).quantize(Decimal("0.001"))

    lines = [
        f"📊 <b>{result.symbol} Forecast</b>",
        "",
        f"💰 Price: ${result.price:,}",
        f"{_SIGNAL_EMOJI[result.signal]} Signal: <b>{result.signal.value.upper()}</b>",
        f"📈 Confidence: {_confidence_bar(result.confidence)} {percent}%",
        "",
        "<b>Technical Analysis:</b>",
        f"📉 EMA: {c.ema.trend.value}",
        f"📊 Bollinger: {c.bollinger.signal.value}",
        f"🎯 Fibonacci: {c.fibonacci.current_level}",
        f"💸 Funding: {funding_pct}%",
        "",
        "🧠 <b>Sentiment:</b>",
        " • ".join(c.sentiment.reasoning),
        "",
        f"💡 <b>Recommendation:</b> {result.recommendation}",
        "",
        "<i>⚠️ Not financial advice. DYOR!</i>",
    ]
    return "\n".join(lines)
