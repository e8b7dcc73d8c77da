"""Fundamental scoring and screening.

Each category sums discrete bucket awards per field and is capped. Missing
fields never add points and never subtract them.
"""

import operator
from typing import Callable, Iterable

from stocklens.screening.models import (
    FilterPreset,
    MACDTrend,
    ScoreBreakdown,
    ScoreRating,
    ScreenerFilters,
    ScreenerResult,
    StockFundamentals,
)
from stocklens.utils.logging import get_logger

logger = get_logger(__name__)

CATEGORY_CAPS = {
    "growth": 30,
    "value": 25,
    "financial": 20,
    "dividend": 10,
    "technical": 15,
}

SECTORS = [
    "Technology",
    "Healthcare",
    "Financial Services",
    "Consumer Cyclical",
    "Consumer Defensive",
    "Industrials",
    "Energy",
    "Basic Materials",
    "Real Estate",
    "Utilities",
    "Communication Services",
]

PRESET_FILTERS = {
    "growth": FilterPreset(
        name="Growth",
        description="High growth and high ROE",
        filters=ScreenerFilters(
            roe_min=15, eps_growth_3y_min=10, revenue_growth_min=10, above_sma200=True
        ),
    ),
    "value": FilterPreset(
        name="Value",
        description="Low PER and low PBR",
        filters=ScreenerFilters(per_max=15, pbr_max=2, peg_max=1.5),
    ),
    "dividend": FilterPreset(
        name="Dividend",
        description="High yield with a dividend growth record",
        filters=ScreenerFilters(
            dividend_yield_min=3, consecutive_dividend_years_min=5, payout_ratio_max=80
        ),
    ),
    "quality": FilterPreset(
        name="Quality",
        description="Strong balance sheet and low debt",
        filters=ScreenerFilters(
            equity_ratio_min=40, current_ratio_min=1.5, debt_ratio_max=50, operating_cf_positive=True
        ),
    ),
}


def _at_least(value: float | None, ladder: list[tuple[float, int]]) -> int:
    """Points of the first ``(threshold, points)`` step with ``value >= threshold``."""
    if value is None:
        return 0
    for threshold, points in ladder:
        if value >= threshold:
            return points
    return 0


def _at_most(value: float | None, ladder: list[tuple[float, int]]) -> int:
    """Points of the first step with ``0 < value <= threshold``."""
    if value is None or value <= 0:
        return 0
    for threshold, points in ladder:
        if value <= threshold:
            return points
    return 0


def growth_score(stock: StockFundamentals) -> int:
    score = (
        _at_least(stock.eps_growth_3y, [(20, 8), (15, 6), (10, 4), (5, 2)])
        + _at_least(stock.eps_growth_5y, [(15, 6), (10, 4), (5, 2)])
        + _at_least(stock.revenue_growth, [(20, 8), (15, 6), (10, 4), (5, 2)])
        + _at_least(stock.roe, [(25, 8), (20, 6), (15, 4), (10, 2)])
    )
    return min(score, CATEGORY_CAPS["growth"])


def value_score(stock: StockFundamentals) -> int:
    score = (
        _at_most(stock.per, [(10, 8), (15, 6), (20, 4), (25, 2)])
        + _at_most(stock.pbr, [(1, 6), (2, 4), (3, 2)])
        + _at_most(stock.peg, [(0.5, 8), (1, 6), (1.5, 4), (2, 2)])
        + _at_least(stock.operating_margin, [(25, 3), (15, 2), (10, 1)])
    )
    return min(score, CATEGORY_CAPS["value"])


def financial_score(stock: StockFundamentals) -> int:
    score = _at_least(stock.equity_ratio, [(50, 6), (40, 4), (30, 2)])
    score += _at_least(stock.current_ratio, [(2, 5), (1.5, 3), (1, 1)])
    if stock.debt_ratio is not None:
        # Negative debt ratios are still "low debt"
        for threshold, points in [(30, 5), (50, 3), (70, 1)]:
            if stock.debt_ratio <= threshold:
                score += points
                break
    if stock.operating_cf is not None and stock.operating_cf > 0:
        score += 4
    return min(score, CATEGORY_CAPS["financial"])


def dividend_score(stock: StockFundamentals) -> int:
    score = _at_least(stock.dividend_yield, [(4, 4), (3, 3), (2, 2), (1, 1)])
    score += _at_least(stock.consecutive_dividend_years, [(25, 4), (10, 3), (5, 2), (1, 1)])
    if stock.payout_ratio is not None:
        if 30 <= stock.payout_ratio <= 60:
            score += 2
        elif 20 <= stock.payout_ratio <= 80:
            score += 1
    return min(score, CATEGORY_CAPS["dividend"])


def technical_score(stock: StockFundamentals) -> int:
    score = 0
    if stock.sma200 is not None and stock.price > stock.sma200:
        score += 4
    if stock.sma50 is not None and stock.price > stock.sma50:
        score += 3
    if stock.rsi is not None:
        if 40 <= stock.rsi <= 60:
            score += 4
        elif 30 <= stock.rsi <= 70:
            score += 2
    if stock.macd_signal == MACDTrend.BULLISH:
        score += 4
    elif stock.macd_signal == MACDTrend.NEUTRAL:
        score += 2
    return min(score, CATEGORY_CAPS["technical"])


def score_fundamentals(stock: StockFundamentals) -> ScoreBreakdown:
    """Score a stock on growth, value, financial health, dividend and technicals.

    Args:
        stock: Fundamentals record

    Returns:
        ScoreBreakdown whose total is the sum of the capped categories
    """
    growth = growth_score(stock)
    value = value_score(stock)
    financial = financial_score(stock)
    dividend = dividend_score(stock)
    technical = technical_score(stock)
    return ScoreBreakdown(
        growth=growth,
        value=value,
        financial=financial,
        dividend=dividend,
        technical=technical,
        total=growth + value + financial + dividend + technical,
    )


# (filter field, stock field, comparison that must hold)
_RANGE_FILTERS: list[tuple[str, str, Callable[[float, float], bool]]] = [
    ("per_min", "per", operator.ge),
    ("per_max", "per", operator.le),
    ("pbr_min", "pbr", operator.ge),
    ("pbr_max", "pbr", operator.le),
    ("peg_min", "peg", operator.ge),
    ("peg_max", "peg", operator.le),
    ("roe_min", "roe", operator.ge),
    ("eps_growth_3y_min", "eps_growth_3y", operator.ge),
    ("eps_growth_5y_min", "eps_growth_5y", operator.ge),
    ("revenue_growth_min", "revenue_growth", operator.ge),
    ("operating_margin_min", "operating_margin", operator.ge),
    ("equity_ratio_min", "equity_ratio", operator.ge),
    ("current_ratio_min", "current_ratio", operator.ge),
    ("debt_ratio_max", "debt_ratio", operator.le),
    ("dividend_yield_min", "dividend_yield", operator.ge),
    ("dividend_yield_max", "dividend_yield", operator.le),
    ("consecutive_dividend_years_min", "consecutive_dividend_years", operator.ge),
    ("payout_ratio_max", "payout_ratio", operator.le),
    ("rsi_min", "rsi", operator.ge),
    ("rsi_max", "rsi", operator.le),
    ("volume_increase_percent", "volume_change", operator.ge),
    ("market_cap_min", "market_cap", operator.ge),
    ("market_cap_max", "market_cap", operator.le),
]


def matches_filters(stock: StockFundamentals, filters: ScreenerFilters) -> bool:
    """Check a stock against every specified constraint.

    A specified constraint on a missing field fails. Boolean constraints only
    apply when true and the sector list only when non-empty.

    Args:
        stock: Fundamentals record
        filters: Constraints

    Returns:
        True if all specified constraints hold
    """
    for filter_field, stock_field, holds in _RANGE_FILTERS:
        bound = getattr(filters, filter_field)
        if bound is None:
            continue
        value = getattr(stock, stock_field)
        if value is None or not holds(value, bound):
            return False

    if filters.operating_cf_positive and (stock.operating_cf is None or stock.operating_cf <= 0):
        return False
    if filters.above_sma50 and (stock.sma50 is None or stock.price <= stock.sma50):
        return False
    if filters.above_sma200 and (stock.sma200 is None or stock.price <= stock.sma200):
        return False
    if filters.macd_bullish and stock.macd_signal != MACDTrend.BULLISH:
        return False
    if filters.sectors and stock.sector not in filters.sectors:
        return False

    return True


def score_rating(total: int) -> ScoreRating:
    """Qualitative rating of a total score."""
    if total >= 80:
        return ScoreRating(rating="Excellent", description="Very attractive investment candidate")
    if total >= 65:
        return ScoreRating(rating="Good", description="Worth considering")
    if total >= 50:
        return ScoreRating(rating="Fair", description="Investable depending on conditions")
    if total >= 35:
        return ScoreRating(rating="Caution", description="Risks should be weighed")
    return ScoreRating(rating="Warning", description="Invest with great care")


def stock_strengths(score: ScoreBreakdown) -> list[str]:
    """Labels for the categories a stock is strong in."""
    strengths = []
    if score.growth >= 22:
        strengths.append("High growth")
    if score.value >= 18:
        strengths.append("Undervalued")
    if score.financial >= 15:
        strengths.append("Strong financials")
    if score.dividend >= 7:
        strengths.append("High dividend")
    if score.technical >= 11:
        strengths.append("Uptrend")
    return strengths


def has_sufficient_data(stock: StockFundamentals) -> bool:
    """Whether a record has the identity and size data needed for screening."""
    return bool(
        stock.symbol
        and stock.name
        and stock.price > 0
        and stock.market_cap is not None
        and stock.market_cap > 0
    )


def screen_stocks(
    stocks: Iterable[StockFundamentals], filters: ScreenerFilters | None = None
) -> list[ScreenerResult]:
    """Filter and score stocks.

    Args:
        stocks: Candidate records
        filters: Constraints. If None, every stock with sufficient data passes.

    Returns:
        Matching stocks sorted by total score, best first
    """
    filters = filters or ScreenerFilters()
    results = []
    skipped = 0
    for stock in stocks:
        if not has_sufficient_data(stock):
            skipped += 1
            continue
        if not matches_filters(stock, filters):
            continue
        score = score_fundamentals(stock)
        results.append(
            ScreenerResult(
                stock=stock,
                score=score,
                rating=score_rating(score.total),
                strengths=stock_strengths(score),
            )
        )

    if skipped:
        logger.debug(f"Skipped {skipped} stocks with insufficient data")
    results.sort(key=lambda r: r.score.total, reverse=True)
    return results
