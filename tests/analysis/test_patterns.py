"""Unit tests for historical pattern matching."""

from datetime import datetime
from unittest.mock import patch

import pytest

from stocklens.analysis.models import FuturePerformance, IndicatorSnapshot, SimilarPattern
from stocklens.analysis.patterns import (
    FEATURE_WEIGHTS,
    bollinger_position,
    calculate_prediction,
    find_similar_patterns,
    future_performance,
    generate_summary,
    moving_average_trend,
    overall_similarity,
    recency_bonus,
    rsi_zone,
    value_similarity,
)
from stocklens.analysis.technical_indicators import compute_indicators
from stocklens.config.schemas import PatternConfig
from stocklens.utils.errors import InvalidSeriesError


def make_snapshot(**values) -> IndicatorSnapshot:
    """Snapshot with every feature defined unless overridden."""
    defaults = dict(
        date=datetime(2024, 1, 1),
        price=100.0,
        rsi=55.0,
        macd=1.2,
        macd_signal=1.0,
        macd_histogram=0.2,
        sma5=101.0,
        sma20=99.0,
        sma50=97.0,
        ema12=100.5,
        ema26=99.5,
        bollinger_upper=105.0,
        bollinger_middle=100.0,
        bollinger_lower=95.0,
    )
    defaults.update(values)
    return IndicatorSnapshot(**defaults)


def make_pattern(similarity: float, returns: dict[int, float], volatility: float = 1.0):
    return SimilarPattern(
        date=datetime(2024, 1, 1),
        similarity=similarity,
        indicators=make_snapshot(),
        future_performance=[
            FuturePerformance(
                days=days,
                price_change=change,
                price_change_percent=change,
                highest_price=100 + max(change, 0),
                lowest_price=100 + min(change, 0),
                volatility=volatility,
            )
            for days, change in returns.items()
        ],
    )


@pytest.mark.unit
class TestFeatureHelpers:
    """Test suite for the similarity building blocks."""

    def test_weights_sum_to_one(self):
        """Test that feature weights are normalized."""
        assert sum(FEATURE_WEIGHTS.values()) == pytest.approx(1.0)

    def test_value_similarity(self):
        """Test relative-difference similarity."""
        assert value_similarity(50, 50) == 100
        assert value_similarity(0, 0) == 100
        assert value_similarity(None, 5) == 0
        assert value_similarity(100, 110, 0.15) == pytest.approx(100 * (1 - (10 / 105) / 0.15))
        assert value_similarity(100, 200, 0.15) == 0

    @pytest.mark.parametrize(
        "rsi,zone", [(75, "overbought"), (70, "overbought"), (55, "bullish"), (35, "bearish"), (20, "oversold")]
    )
    def test_rsi_zone(self, rsi, zone):
        """Test RSI zone boundaries."""
        assert rsi_zone(rsi) == zone

    @pytest.mark.parametrize(
        "smas,trend",
        [
            ((3, 2, 1), "strong_uptrend"),
            ((1, 2, 3), "strong_downtrend"),
            ((3, 2, 2), "uptrend"),
            ((2, 2, 3), "downtrend"),
            ((2, 2, 2), "neutral"),
        ],
    )
    def test_moving_average_trend(self, smas, trend):
        """Test moving average trend classes."""
        assert moving_average_trend(*smas) == trend

    def test_bollinger_position(self):
        """Test band position, clamping and the zero-width fallback."""
        assert bollinger_position(100, 110, 90) == 50
        assert bollinger_position(120, 110, 90) == 100
        assert bollinger_position(80, 110, 90) == 0
        assert bollinger_position(100, 100, 100) == 50

    @pytest.mark.parametrize(
        "days,bonus", [(1, 0.10), (7, 0.10), (10, 0.07), (30, 0.05), (45, 0.03), (61, 0.0)]
    )
    def test_recency_bonus(self, days, bonus):
        """Test recency bonus tiers."""
        assert recency_bonus(days) == bonus


@pytest.mark.unit
class TestOverallSimilarity:
    """Test suite for overall_similarity."""

    def test_identical_snapshots(self):
        """Test that identical snapshots are 100% similar."""
        snapshot = make_snapshot()

        assert overall_similarity(snapshot, snapshot) == pytest.approx(100)

    def test_absent_features_excluded(self):
        """Test that features missing on one side do not dilute the score."""
        bare = dict(
            macd=None,
            macd_signal=None,
            macd_histogram=None,
            sma5=None,
            sma20=None,
            sma50=None,
            ema12=None,
            ema26=None,
            bollinger_upper=None,
            bollinger_middle=None,
            bollinger_lower=None,
        )
        current = make_snapshot(rsi=50.0, **bare)
        other = make_snapshot(rsi=55.0, **bare)

        rsi_part = value_similarity(50, 55, 0.15) * FEATURE_WEIGHTS["rsi"]
        zone_part = 100 * FEATURE_WEIGHTS["rsi_zone"]
        expected = (rsi_part + zone_part) / (FEATURE_WEIGHTS["rsi"] + FEATURE_WEIGHTS["rsi_zone"])

        assert overall_similarity(current, other) == pytest.approx(expected)

    def test_nothing_comparable(self):
        """Test that snapshots without shared features score 0."""
        empty = make_snapshot(
            rsi=None,
            macd=None,
            macd_signal=None,
            macd_histogram=None,
            sma5=None,
            sma20=None,
            sma50=None,
            ema12=None,
            ema26=None,
            bollinger_upper=None,
            bollinger_middle=None,
            bollinger_lower=None,
        )

        assert overall_similarity(empty, make_snapshot()) == 0

    def test_opposite_crossover_lowers_similarity(self):
        """Test that a different MACD crossover state reduces similarity."""
        current = make_snapshot()
        crossed = make_snapshot(macd=1.0, macd_signal=1.2)

        assert overall_similarity(current, crossed) < 100


@pytest.mark.unit
class TestFuturePerformance:
    """Test suite for forward performance."""

    def test_horizon_statistics(self, price_factory):
        """Test change, extremes and volatility over a horizon."""
        prices = price_factory([100.0, 102.0, 104.0, 106.0])
        result = future_performance(prices, 0, [1])

        assert len(result) == 1
        perf = result[0]
        assert perf.days == 1
        assert perf.price_change == pytest.approx(2.0)
        assert perf.price_change_percent == pytest.approx(2.0)
        assert perf.highest_price == pytest.approx(102.0 * 1.01)
        assert perf.lowest_price == pytest.approx(99.0)
        assert perf.volatility == pytest.approx(1.0)

    def test_horizons_past_end_skipped(self, price_factory):
        """Test that horizons running off the series are dropped."""
        prices = price_factory([100.0, 101.0, 102.0])

        result = future_performance(prices, 0, [1, 3, 5])

        assert [p.days for p in result] == [1]


@pytest.mark.unit
class TestPrediction:
    """Test suite for aggregated forward statistics."""

    def test_empty(self):
        """Test that no matches give a zero prediction."""
        prediction = calculate_prediction([])

        assert prediction.average_returns == {1: 0.0, 3: 0.0, 5: 0.0, 7: 0.0}
        assert prediction.success_rate == 0
        assert prediction.confidence == 0

    def test_averages_and_success_rate(self):
        """Test per-horizon means and the 7-day success rate."""
        patterns = [
            make_pattern(80, {1: 1.0, 7: 4.0}, volatility=2.0),
            make_pattern(70, {1: -1.0, 7: -2.0}, volatility=4.0),
        ]

        prediction = calculate_prediction(patterns)

        assert prediction.average_returns[1] == pytest.approx(0.0)
        assert prediction.average_returns[7] == pytest.approx(1.0)
        assert prediction.average_returns[3] == 0.0
        assert prediction.success_rate == pytest.approx(50.0)
        assert prediction.confidence == pytest.approx(20.0)
        assert prediction.volatility_expectation == pytest.approx(3.0)

    def test_confidence_caps_at_100(self):
        """Test confidence saturation at ten matches."""
        patterns = [make_pattern(60, {7: 1.0}) for _ in range(15)]

        assert calculate_prediction(patterns).confidence == 100

    def test_summary_mentions_relaxed_threshold(self):
        """Test summary wording for a lowered threshold."""
        patterns = [make_pattern(60, {7: 3.0}) for _ in range(3)]
        prediction = calculate_prediction(patterns)

        summary = generate_summary(patterns, prediction, used_similarity=35)

        assert "Found 3 similar patterns" in summary
        assert "lowered to 35%" in summary
        assert "+3.00%" in summary

    def test_summary_without_matches(self):
        """Test summary when nothing matched."""
        assert "No historical patterns" in generate_summary([], calculate_prediction([]), 30)


@pytest.mark.unit
class TestFindSimilarPatterns:
    """Test suite for find_similar_patterns."""

    def test_result_structure(self, sample_prices):
        """Test ordering, truncation and candidate range."""
        result = find_similar_patterns(sample_prices)
        cutoff = sample_prices[len(sample_prices) - 1 - 7].date

        assert result.current_indicators.date == sample_prices[-1].date
        assert len(result.similar_patterns) <= 10
        assert result.total_matches >= len(result.similar_patterns)
        similarities = [p.similarity for p in result.similar_patterns]
        assert similarities == sorted(similarities, reverse=True)
        for pattern in result.similar_patterns:
            assert pattern.date < cutoff
            assert pattern.similarity >= result.used_similarity
            assert [p.days for p in pattern.future_performance] == [1, 3, 5, 7]
            assert pattern.indicators.rsi is not None

    def test_precomputed_indicators(self, sample_prices):
        """Test that passing indicators gives the same result."""
        indicators = compute_indicators(sample_prices)

        with_indicators = find_similar_patterns(sample_prices, indicators)
        without = find_similar_patterns(sample_prices)

        assert with_indicators.total_matches == without.total_matches

    def test_recency_bonus_not_capped(self, price_factory):
        """Test that a perfect recent match is reported above 100."""
        prices = price_factory([100.0 + (i % 5) for i in range(60)])

        with patch("stocklens.analysis.patterns.overall_similarity", return_value=100.0):
            result = find_similar_patterns(prices)

        # newest candidate is 8 days back
        assert result.similar_patterns[0].similarity == pytest.approx(107.0)
        assert result.used_similarity == 55

    def test_threshold_relaxation_from_unreachable(self, sample_prices):
        """Test that an unreachable threshold is lowered until matches appear."""
        result = find_similar_patterns(sample_prices, min_similarity=100)

        assert result.requested_similarity == 100
        assert result.threshold_relaxed is True
        assert result.used_similarity < 100
        assert result.total_matches > 0

    def test_relaxation_stops_at_floor(self, price_factory):
        """Test that a series without candidates relaxes down to the floor."""
        prices = price_factory([100.0 + i for i in range(12)])

        result = find_similar_patterns(prices)

        assert result.similar_patterns == []
        assert result.total_matches == 0
        assert result.used_similarity == 30
        assert result.threshold_relaxed is True
        assert "No historical patterns" in result.summary

    def test_lookback_days(self, sample_prices):
        """Test that candidates are restricted to the lookback window."""
        config = PatternConfig(lookback_days=30, min_similarity=0)
        earliest = sample_prices[len(sample_prices) - 1 - 30].date

        result = find_similar_patterns(sample_prices, config=config)

        assert result.total_matches > 0
        assert all(p.date >= earliest for p in result.similar_patterns)

    def test_top_n(self, sample_prices):
        """Test the number of returned patterns."""
        config = PatternConfig(top_n=3, min_similarity=0)

        result = find_similar_patterns(sample_prices, config=config)

        assert len(result.similar_patterns) == 3

    def test_empty_series_rejected(self):
        """Test that an empty series is invalid."""
        with pytest.raises(InvalidSeriesError):
            find_similar_patterns([])

    def test_indicator_length_mismatch(self, sample_prices):
        """Test that indicators for a different series are rejected."""
        indicators = compute_indicators(sample_prices[:100])

        with pytest.raises(InvalidSeriesError, match="does not match"):
            find_similar_patterns(sample_prices, indicators)
