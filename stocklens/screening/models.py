"""Pydantic models for fundamental screening."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MACDTrend(str, Enum):
    """MACD state as reported by a fundamentals provider."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class StockFundamentals(BaseModel):
    """Fundamental, dividend and technical fields of one stock.

    Percentages are expressed in percent (15 means 15%). Any metric may be
    missing.
    """

    symbol: str = Field(description="Ticker symbol")
    name: str = Field(default="", description="Company name")
    sector: str | None = Field(default=None, description="Business sector")
    industry: str | None = Field(default=None, description="Industry classification")
    market_cap: float | None = Field(default=None, description="Market capitalization")
    price: float = Field(default=0.0, ge=0, description="Latest price")
    change: float = Field(default=0.0, description="Price change")
    change_percent: float = Field(default=0.0, description="Price change in %")

    per: float | None = Field(default=None, description="Price/earnings ratio")
    pbr: float | None = Field(default=None, description="Price/book ratio")
    peg: float | None = Field(default=None, description="PEG ratio")
    ps_ratio: float | None = Field(default=None, description="Price/sales ratio")

    roe: float | None = Field(default=None, description="Return on equity in %")
    eps_growth_3y: float | None = Field(default=None, description="3-year EPS growth in %")
    eps_growth_5y: float | None = Field(default=None, description="5-year EPS growth in %")
    revenue_growth: float | None = Field(default=None, description="Revenue growth in %")
    operating_margin: float | None = Field(default=None, description="Operating margin in %")

    equity_ratio: float | None = Field(default=None, description="Equity ratio in %")
    current_ratio: float | None = Field(default=None, description="Current ratio")
    debt_ratio: float | None = Field(default=None, description="Debt ratio in %")
    operating_cf: float | None = Field(default=None, description="Operating cash flow")

    dividend_yield: float | None = Field(default=None, description="Dividend yield in %")
    consecutive_dividend_years: int | None = Field(
        default=None, ge=0, description="Years of consecutive dividend growth"
    )
    payout_ratio: float | None = Field(default=None, description="Payout ratio in %")

    sma50: float | None = Field(default=None, description="50-day simple moving average")
    sma200: float | None = Field(default=None, description="200-day simple moving average")
    rsi: float | None = Field(default=None, description="14-day RSI")
    macd_signal: MACDTrend = Field(default=MACDTrend.NEUTRAL, description="MACD state")
    volume_change: float | None = Field(default=None, description="Volume change in %")

    model_config = ConfigDict(use_enum_values=True)


class ScreenerFilters(BaseModel):
    """Screening constraints. Unset constraints always pass."""

    per_min: float | None = None
    per_max: float | None = None
    pbr_min: float | None = None
    pbr_max: float | None = None
    peg_min: float | None = None
    peg_max: float | None = None
    roe_min: float | None = None
    eps_growth_3y_min: float | None = None
    eps_growth_5y_min: float | None = None
    revenue_growth_min: float | None = None
    operating_margin_min: float | None = None

    equity_ratio_min: float | None = None
    current_ratio_min: float | None = None
    debt_ratio_max: float | None = None
    operating_cf_positive: bool = False

    dividend_yield_min: float | None = None
    dividend_yield_max: float | None = None
    consecutive_dividend_years_min: int | None = None
    payout_ratio_max: float | None = None

    above_sma50: bool = False
    above_sma200: bool = False
    rsi_min: float | None = None
    rsi_max: float | None = None
    macd_bullish: bool = False
    volume_increase_percent: float | None = None

    market_cap_min: float | None = None
    market_cap_max: float | None = None
    sectors: list[str] = Field(default_factory=list)


class ScoreBreakdown(BaseModel):
    """Fundamental score split into capped categories."""

    growth: int = Field(ge=0, le=30)
    value: int = Field(ge=0, le=25)
    financial: int = Field(ge=0, le=20)
    dividend: int = Field(ge=0, le=10)
    technical: int = Field(ge=0, le=15)
    total: int = Field(ge=0, le=100)


class ScoreRating(BaseModel):
    """Qualitative rating of a total score."""

    rating: str
    description: str


class ScreenerResult(BaseModel):
    """A stock that passed the filters, with its score."""

    stock: StockFundamentals
    score: ScoreBreakdown
    rating: ScoreRating
    strengths: list[str] = Field(default_factory=list)


class FilterPreset(BaseModel):
    """Named set of screening constraints."""

    name: str
    description: str
    filters: ScreenerFilters
