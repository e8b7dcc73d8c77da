"""Unit tests for the composite signal scorer."""

import pytest

from stocklens.analysis.models import LatestIndicators, RiskLevel, Signal
from stocklens.analysis.signals import (
    band_position,
    classify,
    round_half_up,
    score_bollinger,
    score_macd,
    score_moving_average,
    score_rsi,
    score_signal,
)
from stocklens.analysis.technical_indicators import compute_indicators, latest_indicators
from stocklens.config.schemas import SignalConfig, SignalWeights


@pytest.fixture
def bullish_indicators():
    """Snapshot where every indicator points up."""
    return LatestIndicators(
        rsi=15.0,
        macd=1.0,
        macd_signal=0.5,
        macd_histogram=0.6,
        sma5=90.0,
        sma20=85.0,
        sma50=80.0,
        bollinger_upper=110.0,
        bollinger_middle=100.0,
        bollinger_lower=90.0,
    )


@pytest.mark.unit
class TestSubScores:
    """Test suite for the per-indicator ladders."""

    @pytest.mark.parametrize(
        "rsi,expected",
        [(15, 25), (20, 25), (25, 15), (35, 5), (50, 0), (65, -5), (75, -15), (85, -25)],
    )
    def test_rsi_ladder(self, rsi, expected):
        """Test RSI buckets."""
        assert score_rsi(rsi).score == expected

    def test_rsi_missing(self):
        """Test that a missing RSI is neutral and flagged unavailable."""
        result = score_rsi(None)

        assert result.score == 0
        assert result.available is False

    @pytest.mark.parametrize(
        "macd,signal,histogram,expected",
        [
            (1.0, 0.5, 0.6, 25),
            (1.0, 0.5, 0.3, 18),
            (0.0, 1.0, -0.3, -18),
            (0.0, 1.0, -1.0, -25),
            (1.0, 0.5, -0.6, -5),
        ],
    )
    def test_macd(self, macd, signal, histogram, expected):
        """Test MACD crossover and histogram contributions."""
        assert score_macd(macd, signal, histogram).score == expected

    def test_moving_average_full(self):
        """Test all three moving average comparisons."""
        assert score_moving_average(110, 105, 100, 95).score == 25
        assert score_moving_average(90, 95, 100, 105).score == -25

    def test_moving_average_without_sma50(self):
        """Test that SMA50 is optional."""
        result = score_moving_average(110, 105, 100, None)

        assert result.score == 18
        assert "SMA50" not in result.reason

    def test_moving_average_needs_sma20(self):
        """Test that SMA5 and SMA20 are required."""
        result = score_moving_average(110, 105, None, None)

        assert result.score == 0
        assert result.available is False

    @pytest.mark.parametrize(
        "price,expected",
        [(91, 20), (93, 15), (96, 5), (100, 0), (104, -5), (107, -15), (109, -20)],
    )
    def test_bollinger_ladder(self, price, expected):
        """Test Bollinger position buckets."""
        assert score_bollinger(price, 110, 100, 90).score == expected

    def test_bollinger_zero_width(self):
        """Test the zero-width band tie-break."""
        assert band_position(100, 100, 100) == 0.5
        assert score_bollinger(100, 100, 100, 100).score == 0
        assert score_bollinger(99, 100, 100, 100).score == 20
        assert score_bollinger(101, 100, 100, 100).score == -20


@pytest.mark.unit
class TestClassify:
    """Test suite for score classification."""

    @pytest.mark.parametrize(
        "score,signal,confidence,risk",
        [
            (15, Signal.STRONG_BUY, 70, RiskLevel.MEDIUM),
            (20, Signal.STRONG_BUY, 80, RiskLevel.MEDIUM),
            (100, Signal.STRONG_BUY, 95, RiskLevel.MEDIUM),
            (5, Signal.BUY, 60, RiskLevel.MEDIUM),
            (0, Signal.HOLD, 50, RiskLevel.LOW),
            (-5, Signal.HOLD, 60, RiskLevel.LOW),
            (-10, Signal.SELL, 70, RiskLevel.MEDIUM),
            (-20, Signal.STRONG_SELL, 80, RiskLevel.HIGH),
        ],
    )
    def test_thresholds(self, score, signal, confidence, risk):
        """Test signal, confidence and risk per threshold band."""
        assert classify(score) == (signal, confidence, risk)

    def test_custom_thresholds(self):
        """Test that thresholds come from the config."""
        config = SignalConfig(strong_buy_threshold=30, buy_threshold=20)

        assert classify(20, config)[0] == Signal.BUY
        assert classify(15, config)[0] == Signal.HOLD


@pytest.mark.unit
class TestScoreSignal:
    """Test suite for score_signal."""

    def test_all_missing_is_neutral_hold(self):
        """Test that an empty snapshot degrades to HOLD with only the moving average reason."""
        result = score_signal(100.0, LatestIndicators())

        assert result.overall_score == 0
        assert result.signal == Signal.HOLD
        assert result.confidence == 50
        assert result.reasons == ["Not enough moving average data"]

    def test_bullish_snapshot(self, bullish_indicators):
        """Test the weighted average of strongly bullish sub-scores."""
        result = score_signal(91.0, bullish_indicators)

        # (25*1.0 + 25*1.2 + 25*1.1 + 20*0.9) / 4.2
        assert result.overall_score == 23.93
        assert result.signal == Signal.STRONG_BUY
        assert result.confidence == 88
        assert result.risk_level == RiskLevel.MEDIUM
        assert len(result.reasons) == 4
        assert result.recommendation

    def test_missing_indicator_keeps_weight(self, bullish_indicators):
        """Test that a missing sub-score still counts in the denominator."""
        partial = bullish_indicators.model_copy(update={"rsi": None})
        result = score_signal(91.0, partial)

        assert result.overall_score == round_half_up((25 * 1.2 + 25 * 1.1 + 20 * 0.9) / 4.2, 2)
        assert len(result.reasons) == 3
        assert result.individual_scores.rsi.available is False

    def test_short_moving_averages_reported(self, bullish_indicators):
        """Test that too-short moving averages stay in the reasons."""
        partial = bullish_indicators.model_copy(update={"sma20": None})
        result = score_signal(91.0, partial)

        assert result.individual_scores.moving_average.available is False
        assert result.individual_scores.moving_average.score == 0
        assert "Not enough moving average data" in result.reasons
        assert len(result.reasons) == 4

    def test_custom_weights(self, bullish_indicators):
        """Test that only weighted indicators contribute."""
        config = SignalConfig(
            weights=SignalWeights(rsi=1.0, macd=0.0, moving_average=0.0, bollinger_bands=0.0)
        )

        assert score_signal(91.0, bullish_indicators, config).overall_score == 25

    def test_score_bounds(self, sample_prices):
        """Test that scores stay within their ranges over a whole series."""
        indicators = compute_indicators(sample_prices)
        for i in range(0, len(sample_prices), 10):
            result = score_signal(sample_prices[i].close, indicators.snapshot_at(i))
            scores = result.individual_scores

            assert -25 <= result.overall_score <= 25
            assert -25 <= scores.rsi.score <= 25
            assert -25 <= scores.macd.score <= 25
            assert -25 <= scores.moving_average.score <= 25
            assert -20 <= scores.bollinger_bands.score <= 20
            assert 0 <= result.confidence <= 100

    def test_latest_on_real_series(self, sample_prices):
        """Test scoring the latest snapshot of a full series."""
        latest = latest_indicators(compute_indicators(sample_prices))
        result = score_signal(sample_prices[-1].close, latest)

        assert result.signal in [s.value for s in Signal]
        assert len(result.reasons) == 4


@pytest.mark.unit
def test_round_half_up():
    """Test halves round towards positive infinity."""
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(23.928571, 2) == 23.93
