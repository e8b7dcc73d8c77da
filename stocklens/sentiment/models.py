"""Pydantic models for sentiment analysis and crash risk."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from stocklens.analysis.models import Signal


class Language(str, Enum):
    """Detected text language."""

    JA = "ja"
    EN = "en"
    MIXED = "mixed"


class TweetSentiment(str, Enum):
    """Keyword-based classification of a single post."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class OverallSentiment(str, Enum):
    """Sentiment of a batch of posts."""

    VERY_NEGATIVE = "very_negative"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    POSITIVE = "positive"


class CrashRiskLevel(str, Enum):
    """Crash risk classification."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SentimentResult(BaseModel):
    """Negative-word analysis of one text."""

    negative_score: int = Field(ge=0, le=100, description="0-100, higher is more negative")
    negative_words: list[str] = Field(default_factory=list, description="Unique words detected")
    total_words: int = Field(ge=0, description="CJK runs plus ASCII words")
    negative_ratio: float = Field(ge=0, description="Negative occurrences per word")
    language: Language

    model_config = ConfigDict(use_enum_values=True)


class WordCount(BaseModel):
    """Number of posts a word appeared in."""

    word: str
    count: int


class TweetSentimentSummary(BaseModel):
    """Negative-word analysis of a batch of posts."""

    average_negative_score: int = Field(default=0, description="Rounded mean negative score")
    total_negative_words: int = Field(default=0, description="Sum of per-post unique words")
    most_common_negative_words: list[WordCount] = Field(default_factory=list)
    overall_sentiment: OverallSentiment = OverallSentiment.NEUTRAL
    risk_level: CrashRiskLevel = CrashRiskLevel.LOW

    model_config = ConfigDict(use_enum_values=True)


class SampleTweet(BaseModel):
    """High-engagement post kept as an example."""

    text: str
    sentiment: TweetSentiment
    created_at: datetime | None = None

    model_config = ConfigDict(use_enum_values=True)


class SentimentAggregation(BaseModel):
    """Positive/neutral/negative tallies over a batch of posts."""

    tweet_count: int = 0
    positive_count: int = 0
    neutral_count: int = 0
    negative_count: int = 0
    negative_keyword_count: int = Field(default=0, description="Posts with red-flag keywords")
    sentiment_score: int = Field(default=0, ge=-100, le=100, description="(pos - neg) / n * 100")
    sample_tweets: list[SampleTweet] = Field(default_factory=list)


class CrashRiskEvaluation(BaseModel):
    """Crash risk derived from sentiment and post volume."""

    risk_score: int = Field(ge=0, le=100)
    risk_level: CrashRiskLevel
    message: str

    model_config = ConfigDict(use_enum_values=True)


class TweetActivity(BaseModel):
    """Volume and engagement statistics of a batch of posts."""

    total_tweets: int = 0
    recent_tweets: int = Field(default=0, description="Posts in the last hour")
    viral_tweets: int = Field(default=0, description="Posts above the engagement threshold")
    average_engagement: int = 0


class TimelinePoint(BaseModel):
    """Risk score of the posts in one 5-minute bucket."""

    timestamp: datetime
    risk_score: int


class CrashPrediction(BaseModel):
    """Crash risk assessment of a batch of posts."""

    risk_score: int = 0
    risk_level: CrashRiskLevel = CrashRiskLevel.LOW
    prediction: str
    sentiment: TweetSentimentSummary = Field(default_factory=TweetSentimentSummary)
    tweet_analysis: TweetActivity = Field(default_factory=TweetActivity)
    timeline: list[TimelinePoint] = Field(default_factory=list)
    recommendation: str
    warnings: list[str] = Field(default_factory=list)

    model_config = ConfigDict(use_enum_values=True)


class IntegratedSignal(BaseModel):
    """Technical signal blended with crash risk."""

    final_score: int
    final_signal: Signal
    reasoning: str

    model_config = ConfigDict(use_enum_values=True)
