"""Tests for EMA computation and trend classification.

All test values use Decimal (project convention).
"""

from decimal import Decimal

import pytest

from forecaster.exceptions import InsufficientDataError
from forecaster.indicators.ema import analyze_trend, classify_trend, compute_ema
from forecaster.models import TrendLabel


def _prices(*values: float | str) -> list[Decimal]:
    return [Decimal(str(v)) for v in values]


class TestComputeEma:
    """Tests for EMA computation."""

    def test_fewer_prices_than_period_returns_empty(self) -> None:
        assert compute_ema(_prices(1, 2), period=3) == []

    def test_empty_list_returns_empty(self) -> None:
        assert compute_ema([], period=3) == []

    def test_non_positive_period_rejected(self) -> None:
        with pytest.raises(ValueError):
            compute_ema(_prices(1, 2, 3), period=0)

    def test_known_values_period_3(self) -> None:
        """Seed is the SMA of the first 3 prices.

        k = 2 / (3 + 1) = 0.5
        EMA[0] = (1 + 2 + 3) / 3 = 2
        EMA[1] = 4 * 0.5 + 2 * 0.5 = 3
        EMA[2] = 5 * 0.5 + 3 * 0.5 = 4
        """
        result = compute_ema(_prices(1, 2, 3, 4, 5), period=3)
        assert result == [Decimal("2"), Decimal("3"), Decimal("4")]

    def test_output_length(self) -> None:
        """One value per price from index period-1 onwards."""
        result = compute_ema(_prices(*range(1, 31)), period=9)
        assert len(result) == 22

    def test_constant_values_return_same(self) -> None:
        result = compute_ema([Decimal("100")] * 30, period=21)
        assert all(v == Decimal("100") for v in result)

    def test_values_are_quantized(self) -> None:
        result = compute_ema(_prices("0.3", "0.7", "0.1", "0.9"), period=3)
        for value in result:
            assert value.as_tuple().exponent == -12

    def test_float_prices_accepted(self) -> None:
        """Floats are converted via str(), matching the Decimal result."""
        floats = [100.0 + i * 0.5 for i in range(25)]

        result = compute_ema(floats, period=9)

        assert result == compute_ema(_prices(*floats), period=9)
        assert all(isinstance(v, Decimal) for v in result)


class TestClassifyTrend:
    """Tests for the five-way trend classification."""

    def test_strong_uptrend(self) -> None:
        assert classify_trend(Decimal("102"), Decimal("100")) == TrendLabel.STRONG_UPTREND

    def test_weak_uptrend(self) -> None:
        assert classify_trend(Decimal("100.5"), Decimal("100")) == TrendLabel.WEAK_UPTREND

    def test_boundary_one_percent_is_weak(self) -> None:
        """Exactly 1% above is not strictly greater than slow * 1.01."""
        assert classify_trend(Decimal("101"), Decimal("100")) == TrendLabel.WEAK_UPTREND

    def test_strong_downtrend(self) -> None:
        assert classify_trend(Decimal("98"), Decimal("100")) == TrendLabel.STRONG_DOWNTREND

    def test_weak_downtrend(self) -> None:
        assert classify_trend(Decimal("99.5"), Decimal("100")) == TrendLabel.WEAK_DOWNTREND

    def test_equal_is_neutral(self) -> None:
        assert classify_trend(Decimal("100"), Decimal("100")) == TrendLabel.NEUTRAL


class TestAnalyzeTrend:
    """Tests for analyze_trend over price series."""

    def test_rising_series_is_strong_uptrend(self) -> None:
        result = analyze_trend(_prices(*range(1, 31)))
        assert result.fast > result.slow
        assert result.trend == TrendLabel.STRONG_UPTREND

    def test_falling_series_is_strong_downtrend(self) -> None:
        result = analyze_trend(_prices(*range(30, 0, -1)))
        assert result.fast < result.slow
        assert result.trend == TrendLabel.STRONG_DOWNTREND

    def test_constant_series_is_neutral(self) -> None:
        """Flat prices give identical fast and slow EMAs."""
        result = analyze_trend([Decimal("100")] * 21)
        assert result.fast == result.slow
        assert result.trend == TrendLabel.NEUTRAL

    def test_small_uptick_is_weak_uptrend(self) -> None:
        """EMA9 = 100.1 and EMA21 ~= 100.045 after one uptick to 100.5."""
        prices = [Decimal("100")] * 29 + [Decimal("100.5")]
        result = analyze_trend(prices)
        assert result.fast == Decimal("100.1")
        assert result.trend == TrendLabel.WEAK_UPTREND

    def test_small_downtick_is_weak_downtrend(self) -> None:
        prices = [Decimal("100")] * 29 + [Decimal("99.5")]
        result = analyze_trend(prices)
        assert result.fast == Decimal("99.9")
        assert result.trend == TrendLabel.WEAK_DOWNTREND

    def test_insufficient_data_raises(self) -> None:
        with pytest.raises(InsufficientDataError) as exc_info:
            analyze_trend([Decimal("100")] * 20)
        assert exc_info.value.required == 21
        assert exc_info.value.available == 20

    def test_custom_periods(self) -> None:
        result = analyze_trend(_prices(*range(1, 11)), fast_period=3, slow_period=5)
        assert result.fast > result.slow
