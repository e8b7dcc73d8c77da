"""Pydantic models for indicators, signals and historical patterns."""

import math
from datetime import datetime
from enum import Enum

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from stocklens.analysis.series import last_valid


class MACDSeries(BaseModel):
    """MACD line, signal line and histogram."""

    macd: list[float] = Field(default_factory=list)
    signal: list[float] = Field(default_factory=list)
    histogram: list[float] = Field(default_factory=list)


class SMASeries(BaseModel):
    """Simple moving averages over 5, 20 and 50 days."""

    sma5: list[float] = Field(default_factory=list)
    sma20: list[float] = Field(default_factory=list)
    sma50: list[float] = Field(default_factory=list)


class EMASeries(BaseModel):
    """Exponential moving averages over 12 and 26 days."""

    ema12: list[float] = Field(default_factory=list)
    ema26: list[float] = Field(default_factory=list)


class BollingerSeries(BaseModel):
    """Bollinger band arrays."""

    upper: list[float] = Field(default_factory=list)
    middle: list[float] = Field(default_factory=list)
    lower: list[float] = Field(default_factory=list)


class LatestIndicators(BaseModel):
    """Indicator values at one point in time. None marks an absent value."""

    rsi: float | None = None
    macd: float | None = None
    macd_signal: float | None = None
    macd_histogram: float | None = None
    sma5: float | None = None
    sma20: float | None = None
    sma50: float | None = None
    ema12: float | None = None
    ema26: float | None = None
    bollinger_upper: float | None = None
    bollinger_middle: float | None = None
    bollinger_lower: float | None = None


class IndicatorSnapshot(LatestIndicators):
    """Indicator values together with the date and close they belong to."""

    date: datetime = Field(description="Date of the snapshot")
    price: float = Field(description="Close price on that date")


class IndicatorSeries(BaseModel):
    """Aligned indicator arrays for one price series.

    Every array has the length of the input series. Undefined entries are
    NaN and ``array[i]`` depends only on prices up to ``i``.
    The lists are converted to numpy arrays on first access and cached, so
    treat a series as read-only once it has been queried.
    """

    rsi: list[float] = Field(default_factory=list)
    macd: MACDSeries = Field(default_factory=MACDSeries)
    sma: SMASeries = Field(default_factory=SMASeries)
    ema: EMASeries = Field(default_factory=EMASeries)
    bollinger: BollingerSeries = Field(default_factory=BollingerSeries)

    _array_cache: dict[str, np.ndarray] | None = PrivateAttr(default=None)

    def __len__(self) -> int:
        return len(self.rsi)

    def _arrays(self) -> dict[str, np.ndarray]:
        if self._array_cache is None:
            self._array_cache = {
                name: np.asarray(values, dtype=float) for name, values in self._lists().items()
            }
        return self._array_cache

    def _lists(self) -> dict[str, list[float]]:
        return {
            "rsi": self.rsi,
            "macd": self.macd.macd,
            "macd_signal": self.macd.signal,
            "macd_histogram": self.macd.histogram,
            "sma5": self.sma.sma5,
            "sma20": self.sma.sma20,
            "sma50": self.sma.sma50,
            "ema12": self.ema.ema12,
            "ema26": self.ema.ema26,
            "bollinger_upper": self.bollinger.upper,
            "bollinger_middle": self.bollinger.middle,
            "bollinger_lower": self.bollinger.lower,
        }

    def snapshot_at(self, index: int) -> LatestIndicators:
        """Latest defined value of each indicator up to and including ``index``.

        Since no entry looks ahead, this equals running the indicator engine
        on the prefix ``prices[0..index]`` and taking its latest values.

        Args:
            index: Inclusive end index

        Returns:
            LatestIndicators with None where nothing is defined yet
        """
        return LatestIndicators(
            **{name: last_valid(values, index) for name, values in self._arrays().items()}
        )

    def latest(self) -> LatestIndicators:
        """Latest defined value of each indicator over the whole series."""
        return self.snapshot_at(len(self) - 1)

    def values_at(self, index: int) -> LatestIndicators:
        """Exact indicator values at ``index``, None where NaN."""
        values = {}
        for name, array in self._arrays().items():
            value = array[index]
            values[name] = None if math.isnan(value) else float(value)
        return LatestIndicators(**values)

    def to_frame(self, dates: list[datetime] | None = None) -> pd.DataFrame:
        """Tabular view with one column per indicator.

        Args:
            dates: Optional index labels, one per row

        Returns:
            DataFrame of indicator values
        """
        df = pd.DataFrame(self._arrays())
        if dates is not None:
            df.index = pd.DatetimeIndex(dates, name="date")
        return df


class Signal(str, Enum):
    """Five-level trading signal."""

    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    STRONG_SELL = "STRONG_SELL"


class RiskLevel(str, Enum):
    """Risk classification of a signal."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class IndicatorScore(BaseModel):
    """Bounded score of one indicator and its rationale."""

    score: float = Field(description="Sub-score")
    reason: str = Field(description="Human-readable rationale")
    available: bool = Field(default=True, description="False when the inputs were missing")


class IndividualScores(BaseModel):
    """Sub-scores feeding the composite signal."""

    rsi: IndicatorScore
    macd: IndicatorScore
    moving_average: IndicatorScore
    bollinger_bands: IndicatorScore


class SignalAnalysis(BaseModel):
    """Composite signal derived from one indicator snapshot."""

    overall_score: float = Field(description="Weighted average of the sub-scores")
    signal: Signal = Field(description="Five-level signal")
    confidence: int = Field(ge=0, le=100, description="Confidence 0-100")
    risk_level: RiskLevel = Field(description="Risk classification")
    individual_scores: IndividualScores
    reasons: list[str] = Field(default_factory=list, description="Rationales with data")
    recommendation: str = Field(description="Canned advice for the signal")

    model_config = ConfigDict(use_enum_values=True)


class FuturePerformance(BaseModel):
    """Price behaviour after a historical match."""

    days: int = Field(description="Horizon in trading days")
    price_change: float = Field(description="Close at horizon minus base close")
    price_change_percent: float = Field(description="Change relative to base close in %")
    highest_price: float = Field(description="Highest high over the horizon")
    lowest_price: float = Field(description="Lowest low over the horizon")
    volatility: float = Field(description="Std dev of closes as % of base close")


class SimilarPattern(BaseModel):
    """Historical date whose indicators resemble the current ones."""

    date: datetime
    similarity: float = Field(description="Similarity including the recency bonus")
    indicators: IndicatorSnapshot
    future_performance: list[FuturePerformance] = Field(default_factory=list)


class PatternPrediction(BaseModel):
    """Forward statistics aggregated over all matches."""

    average_returns: dict[int, float] = Field(
        default_factory=dict, description="Mean % return per horizon"
    )
    success_rate: float = Field(default=0.0, description="% of 7-day returns above zero")
    confidence: float = Field(default=0.0, description="Confidence from the number of matches")
    volatility_expectation: float = Field(default=0.0, description="Mean horizon volatility")


class PatternAnalysisResult(BaseModel):
    """Outcome of a historical pattern search."""

    current_indicators: IndicatorSnapshot
    similar_patterns: list[SimilarPattern] = Field(default_factory=list)
    total_matches: int = Field(default=0, description="Matches before truncation")
    prediction: PatternPrediction = Field(default_factory=PatternPrediction)
    summary: str = ""
    requested_similarity: float = Field(description="Threshold asked for")
    used_similarity: float = Field(description="Threshold the result was found at")
    threshold_relaxed: bool = Field(default=False)
