"""Unit tests for the technical indicator engine."""

import math
from datetime import datetime

import numpy as np
import pandas as pd
import pytest

from stocklens.analysis.models import LatestIndicators
from stocklens.analysis.technical_indicators import (
    compute_indicators,
    extract_closes,
    latest_indicators,
    validate_price_series,
)
from stocklens.config.schemas import IndicatorSettings
from stocklens.data.models import PricePoint
from stocklens.utils.errors import InvalidSeriesError


@pytest.mark.unit
class TestComputeIndicators:
    """Test suite for compute_indicators."""

    def test_every_array_matches_input_length(self, sample_prices):
        """Test that all indicator arrays align with the prices."""
        indicators = compute_indicators(sample_prices)

        assert len(indicators) == len(sample_prices)
        for name, values in indicators._arrays().items():
            assert len(values) == len(sample_prices), name

    def test_sma_warm_up(self, sample_prices):
        """Test SMA undefined entries and window means."""
        indicators = compute_indicators(sample_prices)
        closes = [p.close for p in sample_prices]

        assert all(math.isnan(v) for v in indicators.sma.sma20[:19])
        assert indicators.sma.sma20[19] == pytest.approx(np.mean(closes[:20]))
        assert indicators.sma.sma50[-1] == pytest.approx(np.mean(closes[-50:]))

    def test_ema_seeded_with_first_close(self, sample_prices):
        """Test that both EMAs start at the first close."""
        indicators = compute_indicators(sample_prices)

        assert indicators.ema.ema12[0] == sample_prices[0].close
        assert indicators.ema.ema26[0] == sample_prices[0].close

    def test_short_series_does_not_raise(self, price_factory):
        """Test that a short series yields undefined indicators."""
        prices = price_factory([100.0, 101.0, 102.0])
        indicators = compute_indicators(prices)
        latest = latest_indicators(indicators)

        assert latest.rsi is None
        assert latest.sma5 is None
        assert latest.bollinger_upper is None
        assert latest.macd is not None
        assert latest.ema12 is not None

    def test_empty_series(self):
        """Test that an empty series gives empty arrays and no values."""
        indicators = compute_indicators([])

        assert len(indicators) == 0
        assert latest_indicators(indicators) == LatestIndicators()

    def test_accepts_dataframe(self, sample_prices):
        """Test that a DataFrame with a Close column gives the same result."""
        df = pd.DataFrame({"Close": [p.close for p in sample_prices]})

        from_frame = compute_indicators(df)
        from_points = compute_indicators(sample_prices)

        assert from_frame.rsi[-1] == pytest.approx(from_points.rsi[-1])
        assert from_frame.macd.signal[-1] == pytest.approx(from_points.macd.signal[-1])

    def test_custom_settings(self, sample_prices):
        """Test that settings change the periods."""
        settings = IndicatorSettings(rsi_period=7, bollinger_period=10)
        indicators = compute_indicators(sample_prices, settings)

        assert not math.isnan(indicators.rsi[7])
        assert math.isnan(indicators.rsi[6])
        assert not math.isnan(indicators.bollinger.middle[9])

    def test_textbook_ema_setting(self, sample_prices):
        """Test that the textbook flag leaves the EMA warm-up undefined."""
        indicators = compute_indicators(sample_prices, IndicatorSettings(textbook_ema=True))

        assert math.isnan(indicators.ema.ema12[0])
        assert not math.isnan(indicators.ema.ema12[11])

    def test_prefix_consistency(self, sample_prices):
        """Test that the snapshot at i equals running on prices[0..i]."""
        full = compute_indicators(sample_prices)
        index = 120

        prefix = latest_indicators(compute_indicators(sample_prices[: index + 1]))
        snapshot = full.snapshot_at(index)

        for field, value in prefix.model_dump().items():
            assert getattr(snapshot, field) == pytest.approx(value), field

    def test_arrays_converted_once(self, sample_prices):
        """Test that repeated snapshots reuse the same numpy arrays."""
        indicators = compute_indicators(sample_prices)
        first = indicators._arrays()

        for i in range(0, len(sample_prices), 25):
            indicators.snapshot_at(i)
            indicators.values_at(i)

        assert indicators._arrays() is first
        assert all(isinstance(values, np.ndarray) for values in first.values())
        assert indicators.snapshot_at(len(sample_prices) - 1) == indicators.latest()

    def test_to_frame(self, sample_prices):
        """Test the tabular view."""
        indicators = compute_indicators(sample_prices)
        df = indicators.to_frame([p.date for p in sample_prices])

        assert len(df) == len(sample_prices)
        assert "rsi" in df.columns
        assert df.index[0] == pd.Timestamp(sample_prices[0].date)


@pytest.mark.unit
class TestLatestIndicators:
    """Test suite for latest value extraction."""

    def test_latest_matches_last_entry(self, sample_prices):
        """Test that latest values equal the last array entries."""
        indicators = compute_indicators(sample_prices)
        latest = latest_indicators(indicators)

        assert latest.rsi == pytest.approx(indicators.rsi[-1])
        assert latest.sma50 == pytest.approx(indicators.sma.sma50[-1])
        assert latest.bollinger_lower == pytest.approx(indicators.bollinger.lower[-1])


@pytest.mark.unit
class TestValidation:
    """Test suite for price series validation."""

    def test_unordered_dates_rejected(self):
        """Test that dates must strictly increase."""
        prices = [
            PricePoint(date=datetime(2024, 1, 2), open=1, high=1, low=1, close=1),
            PricePoint(date=datetime(2024, 1, 1), open=1, high=1, low=1, close=1),
        ]

        with pytest.raises(InvalidSeriesError, match="strictly increasing"):
            validate_price_series(prices)

    def test_duplicate_dates_rejected(self):
        """Test that repeated dates are rejected."""
        day = datetime(2024, 1, 1)
        prices = [PricePoint(date=day, open=1, high=1, low=1, close=1)] * 2

        with pytest.raises(InvalidSeriesError):
            validate_price_series(prices)

    def test_empty_series(self):
        """Test empty handling with and without allow_empty."""
        validate_price_series([])

        with pytest.raises(InvalidSeriesError, match="empty"):
            validate_price_series([], allow_empty=False)

    def test_extract_closes_requires_close_column(self):
        """Test that a frame without closes is rejected."""
        with pytest.raises(InvalidSeriesError):
            extract_closes(pd.DataFrame({"open": [1.0, 2.0]}))
