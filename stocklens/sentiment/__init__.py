"""Social media sentiment and crash risk analysis."""

from stocklens.sentiment.analyzer import (
    aggregate_sentiment,
    analyze_sentiment,
    analyze_tweets,
    classify_sentiment,
    evaluate_crash_risk,
    has_negative_keywords,
)
from stocklens.sentiment.crash import (
    integrate_with_technical_analysis,
    predict_crash,
    technical_score_from_signal,
)
from stocklens.sentiment.models import (
    CrashPrediction,
    CrashRiskEvaluation,
    CrashRiskLevel,
    IntegratedSignal,
    OverallSentiment,
    SentimentAggregation,
    SentimentResult,
    TweetSentiment,
    TweetSentimentSummary,
)

__all__ = [
    "CrashPrediction",
    "CrashRiskEvaluation",
    "CrashRiskLevel",
    "IntegratedSignal",
    "OverallSentiment",
    "SentimentAggregation",
    "SentimentResult",
    "TweetSentiment",
    "TweetSentimentSummary",
    "aggregate_sentiment",
    "analyze_sentiment",
    "analyze_tweets",
    "classify_sentiment",
    "evaluate_crash_risk",
    "has_negative_keywords",
    "integrate_with_technical_analysis",
    "predict_crash",
    "technical_score_from_signal",
]
