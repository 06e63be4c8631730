"""Tests for Bollinger Bands computation."""

from decimal import Decimal

import pytest

from forecaster.exceptions import InsufficientDataError
from forecaster.indicators.bollinger import compute_bollinger
from forecaster.models import BollingerSignal


def _alternating(count: int = 20) -> list[Decimal]:
    """99, 101, 99, 101 ... -- mean 100, population std 1, ends on 101."""
    return [Decimal("99") if i % 2 == 0 else Decimal("101") for i in range(count)]


class TestComputeBollinger:
    """Tests for band values, position and signal."""

    def test_constant_prices_collapse_band(self) -> None:
        """Zero deviation: upper == middle == lower and position is 0."""
        result = compute_bollinger([Decimal("100")] * 25)

        assert result.upper == result.middle == result.lower == Decimal("100")
        assert result.position == Decimal("0")
        assert result.signal == BollingerSignal.NEUTRAL

    def test_known_band(self) -> None:
        result = compute_bollinger(_alternating())

        assert result.middle == Decimal("100")
        assert result.upper == Decimal("102")
        assert result.lower == Decimal("98")
        # (101 - 100) / (1 * 2)
        assert result.position == Decimal("0.5")
        assert result.signal == BollingerSignal.NEUTRAL

    def test_only_last_period_prices_used(self) -> None:
        prefixed = [Decimal("1000")] * 10 + _alternating()
        assert compute_bollinger(prefixed) == compute_bollinger(_alternating())

    def test_spike_is_overbought_and_clamped(self) -> None:
        prices = [Decimal("100")] * 19 + [Decimal("110")]
        result = compute_bollinger(prices)

        assert result.position == Decimal("1")
        assert result.signal == BollingerSignal.OVERBOUGHT

    def test_drop_is_oversold_and_clamped(self) -> None:
        prices = [Decimal("100")] * 19 + [Decimal("90")]
        result = compute_bollinger(prices)

        assert result.position == Decimal("-1")
        assert result.signal == BollingerSignal.OVERSOLD

    def test_custom_multiplier(self) -> None:
        """With a 1-sigma band the last price sits on the upper edge."""
        result = compute_bollinger(_alternating(), multiplier=Decimal("1"))

        assert result.position == Decimal("1")
        assert result.signal == BollingerSignal.OVERBOUGHT

    def test_custom_period(self) -> None:
        result = compute_bollinger(_alternating(6), period=6)
        assert result.middle == Decimal("100")

    def test_insufficient_data_raises(self) -> None:
        with pytest.raises(InsufficientDataError) as exc_info:
            compute_bollinger([Decimal("100")] * 10, period=20)
        assert exc_info.value.required == 20
        assert exc_info.value.available == 10

    @pytest.mark.parametrize("period", [0, -5])
    def test_non_positive_period_rejected(self, period: int) -> None:
        with pytest.raises(ValueError):
            compute_bollinger(_alternating(), period=period)

    def test_float_prices_accepted(self) -> None:
        floats = [100.0 + i * 0.5 for i in range(25)]

        result = compute_bollinger(floats)

        assert result == compute_bollinger([Decimal(str(p)) for p in floats])
        assert isinstance(result.middle, Decimal)

    def test_float_multiplier_converted_via_str(self) -> None:
        """2.1 is used as Decimal("2.1"), not its binary approximation."""
        assert compute_bollinger(_alternating(), multiplier=2.1) == compute_bollinger(
            _alternating(), multiplier=Decimal("2.1")
        )

    @pytest.mark.parametrize(
        "prices",
        [
            [Decimal(str(v)) for v in range(1, 41)],
            [Decimal(str(v)) for v in range(40, 0, -1)],
            [Decimal("100")] * 19 + [Decimal("1000000")],
            _alternating(30),
        ],
    )
    def test_position_always_within_unit_range(self, prices: list[Decimal]) -> None:
        result = compute_bollinger(prices)
        assert Decimal("-1") <= result.position <= Decimal("1")
