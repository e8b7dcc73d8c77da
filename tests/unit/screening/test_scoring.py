"""Tests for fundamental scoring and screening."""

import pytest

from stocklens.screening.models import MACDTrend, ScreenerFilters, StockFundamentals
from stocklens.screening.scoring import (
    CATEGORY_CAPS,
    PRESET_FILTERS,
    dividend_score,
    financial_score,
    growth_score,
    has_sufficient_data,
    matches_filters,
    score_fundamentals,
    score_rating,
    screen_stocks,
    stock_strengths,
    technical_score,
    value_score,
)


@pytest.fixture
def strong_stock():
    """Stock that maxes out every category."""
    return StockFundamentals(
        symbol="GOOD",
        name="Good Corp",
        sector="Technology",
        market_cap=5e10,
        price=100.0,
        per=8.0,
        pbr=0.8,
        peg=0.4,
        roe=30.0,
        eps_growth_3y=25.0,
        eps_growth_5y=20.0,
        revenue_growth=25.0,
        operating_margin=30.0,
        equity_ratio=60.0,
        current_ratio=2.5,
        debt_ratio=20.0,
        operating_cf=1e9,
        dividend_yield=5.0,
        consecutive_dividend_years=30,
        payout_ratio=40.0,
        sma50=95.0,
        sma200=90.0,
        rsi=50.0,
        macd_signal=MACDTrend.BULLISH,
    )


@pytest.fixture
def bare_stock():
    """Stock with identity data only."""
    return StockFundamentals(symbol="BARE", name="Bare Inc", market_cap=1e9, price=10.0)


@pytest.mark.unit
class TestScoreFundamentals:
    """Test suite for the category scores."""

    def test_maximum_scores(self, strong_stock):
        """Test that a strong stock reaches every cap."""
        score = score_fundamentals(strong_stock)

        assert score.growth == CATEGORY_CAPS["growth"]
        assert score.value == CATEGORY_CAPS["value"]
        assert score.financial == CATEGORY_CAPS["financial"]
        assert score.dividend == CATEGORY_CAPS["dividend"]
        assert score.technical == CATEGORY_CAPS["technical"]
        assert score.total == 100

    def test_missing_fields_add_nothing(self, bare_stock):
        """Test that absent metrics neither add nor subtract points."""
        score = score_fundamentals(bare_stock)

        assert score.growth == 0
        assert score.value == 0
        assert score.financial == 0
        assert score.dividend == 0
        # Neutral MACD is the default state
        assert score.technical == 2
        assert score.total == 2

    def test_growth_ladders(self, bare_stock):
        """Test intermediate growth buckets."""
        stock = bare_stock.model_copy(
            update={"eps_growth_3y": 12.0, "eps_growth_5y": 5.0, "revenue_growth": 16.0, "roe": 10.0}
        )

        assert growth_score(stock) == 4 + 2 + 6 + 2

    def test_value_ignores_non_positive_multiples(self, bare_stock):
        """Test that negative PER/PBR/PEG earn no value points."""
        stock = bare_stock.model_copy(update={"per": -5.0, "pbr": 0.0, "peg": -1.0})

        assert value_score(stock) == 0

    def test_value_ladders(self, bare_stock):
        """Test intermediate value buckets."""
        stock = bare_stock.model_copy(
            update={"per": 18.0, "pbr": 2.5, "peg": 1.2, "operating_margin": 12.0}
        )

        assert value_score(stock) == 4 + 2 + 4 + 1

    def test_financial_debt_ratio(self, bare_stock):
        """Test debt ratio buckets including negative values."""
        assert financial_score(bare_stock.model_copy(update={"debt_ratio": -10.0})) == 5
        assert financial_score(bare_stock.model_copy(update={"debt_ratio": 60.0})) == 1
        assert financial_score(bare_stock.model_copy(update={"debt_ratio": 90.0})) == 0

    def test_payout_sweet_spot(self, bare_stock):
        """Test that a 30-60% payout scores higher than the extremes."""
        sweet = dividend_score(bare_stock.model_copy(update={"payout_ratio": 45.0}))
        edge = dividend_score(bare_stock.model_copy(update={"payout_ratio": 75.0}))
        extreme = dividend_score(bare_stock.model_copy(update={"payout_ratio": 95.0}))

        assert (sweet, edge, extreme) == (2, 1, 0)

    def test_technical(self, bare_stock):
        """Test technical buckets."""
        stock = bare_stock.model_copy(
            update={"sma200": 12.0, "sma50": 9.0, "rsi": 65.0, "macd_signal": MACDTrend.BEARISH}
        )

        assert technical_score(stock) == 3 + 2

    def test_monotonic_in_growth(self, bare_stock):
        """Test that raising a metric never lowers the score."""
        totals = [
            score_fundamentals(bare_stock.model_copy(update={"eps_growth_3y": g})).total
            for g in (0, 5, 10, 15, 20, 40)
        ]

        assert totals == sorted(totals)


@pytest.mark.unit
class TestMatchesFilters:
    """Test suite for filter matching."""

    def test_empty_filters_pass(self, bare_stock):
        """Test that unspecified constraints are vacuously true."""
        assert matches_filters(bare_stock, ScreenerFilters())

    def test_missing_field_fails_specified_filter(self, bare_stock):
        """Test fail-closed behaviour on missing data."""
        assert not matches_filters(bare_stock, ScreenerFilters(per_max=20))
        assert not matches_filters(bare_stock, ScreenerFilters(operating_cf_positive=True))
        assert not matches_filters(bare_stock, ScreenerFilters(above_sma200=True))

    def test_range_bounds_inclusive(self, strong_stock):
        """Test min/max bounds."""
        assert matches_filters(strong_stock, ScreenerFilters(per_min=8, per_max=8))
        assert not matches_filters(strong_stock, ScreenerFilters(per_max=7.9))
        assert not matches_filters(strong_stock, ScreenerFilters(roe_min=31))

    def test_boolean_filters(self, strong_stock):
        """Test boolean constraints on a qualifying stock."""
        filters = ScreenerFilters(
            operating_cf_positive=True, above_sma50=True, above_sma200=True, macd_bullish=True
        )

        assert matches_filters(strong_stock, filters)
        bearish = strong_stock.model_copy(update={"macd_signal": MACDTrend.BEARISH})
        assert not matches_filters(bearish, filters)

    def test_sectors(self, strong_stock):
        """Test the sector set constraint."""
        assert matches_filters(strong_stock, ScreenerFilters(sectors=["Technology", "Energy"]))
        assert not matches_filters(strong_stock, ScreenerFilters(sectors=["Energy"]))

    def test_market_cap(self, strong_stock):
        """Test market cap bounds."""
        assert matches_filters(strong_stock, ScreenerFilters(market_cap_min=1e10))
        assert not matches_filters(strong_stock, ScreenerFilters(market_cap_max=1e10))

    @pytest.mark.parametrize("preset", list(PRESET_FILTERS))
    def test_presets_match_strong_stock(self, strong_stock, preset):
        """Test that the strong stock passes every preset."""
        assert matches_filters(strong_stock, PRESET_FILTERS[preset].filters)


@pytest.mark.unit
class TestScreenStocks:
    """Test suite for screen_stocks and ratings."""

    @pytest.mark.parametrize(
        "total,rating",
        [(80, "Excellent"), (65, "Good"), (50, "Fair"), (35, "Caution"), (34, "Warning")],
    )
    def test_score_rating(self, total, rating):
        """Test rating boundaries."""
        assert score_rating(total).rating == rating

    def test_strengths(self, strong_stock):
        """Test strength labels for a maxed-out stock."""
        strengths = stock_strengths(score_fundamentals(strong_stock))

        assert strengths == [
            "High growth",
            "Undervalued",
            "Strong financials",
            "High dividend",
            "Uptrend",
        ]

    def test_sufficient_data(self, bare_stock):
        """Test the identity and size data requirement."""
        assert has_sufficient_data(bare_stock)
        assert not has_sufficient_data(bare_stock.model_copy(update={"market_cap": None}))
        assert not has_sufficient_data(bare_stock.model_copy(update={"price": 0.0}))
        assert not has_sufficient_data(bare_stock.model_copy(update={"name": ""}))

    def test_screen_sorted_and_filtered(self, strong_stock, bare_stock):
        """Test ordering by score and exclusion of incomplete records."""
        incomplete = StockFundamentals(symbol="NOCAP", name="No Cap", price=5.0, per=5.0)

        results = screen_stocks([bare_stock, incomplete, strong_stock])

        assert [r.stock.symbol for r in results] == ["GOOD", "BARE"]
        assert results[0].rating.rating == "Excellent"
        assert results[0].score.total == 100

    def test_screen_with_filters(self, strong_stock, bare_stock):
        """Test that filters remove non-matching stocks."""
        results = screen_stocks([bare_stock, strong_stock], PRESET_FILTERS["value"].filters)

        assert [r.stock.symbol for r in results] == ["GOOD"]
