"""Technical analysis: indicators, signals and historical patterns."""

from stocklens.analysis.models import (
    IndicatorSeries,
    IndicatorSnapshot,
    LatestIndicators,
    PatternAnalysisResult,
    RiskLevel,
    Signal,
    SignalAnalysis,
    SimilarPattern,
)
from stocklens.analysis.patterns import find_similar_patterns
from stocklens.analysis.signals import score_signal
from stocklens.analysis.technical_indicators import compute_indicators, latest_indicators

__all__ = [
    "IndicatorSeries",
    "IndicatorSnapshot",
    "LatestIndicators",
    "PatternAnalysisResult",
    "RiskLevel",
    "Signal",
    "SignalAnalysis",
    "SimilarPattern",
    "compute_indicators",
    "find_similar_patterns",
    "latest_indicators",
    "score_signal",
]
