"""Fundamental stock screening and scoring."""

from stocklens.screening.models import (
    FilterPreset,
    MACDTrend,
    ScoreBreakdown,
    ScreenerFilters,
    ScreenerResult,
    StockFundamentals,
)
from stocklens.screening.scoring import (
    PRESET_FILTERS,
    SECTORS,
    has_sufficient_data,
    matches_filters,
    score_fundamentals,
    score_rating,
    screen_stocks,
    stock_strengths,
)

__all__ = [
    "FilterPreset",
    "MACDTrend",
    "PRESET_FILTERS",
    "SECTORS",
    "ScoreBreakdown",
    "ScreenerFilters",
    "ScreenerResult",
    "StockFundamentals",
    "has_sufficient_data",
    "matches_filters",
    "score_fundamentals",
    "score_rating",
    "screen_stocks",
    "stock_strengths",
]
