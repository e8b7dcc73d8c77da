"""Crash prediction from social media posts.

Combines batch sentiment, post volume and engagement into a crash risk
assessment and blends it with the technical signal.
"""

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Sequence

from stocklens.analysis.models import Signal, SignalAnalysis
from stocklens.analysis.signals import round_half_up
from stocklens.config.schemas import SentimentConfig
from stocklens.data.models import Tweet
from stocklens.sentiment.analyzer import analyze_tweets, evaluate_crash_risk
from stocklens.sentiment.models import (
    CrashPrediction,
    CrashRiskLevel,
    IntegratedSignal,
    TimelinePoint,
    TweetActivity,
)
from stocklens.utils.logging import get_logger

logger = get_logger(__name__)

SENTIMENT_WEIGHT = 0.4
TECHNICAL_WEIGHT = 0.6
BUCKET_MINUTES = 5
VIRAL_WARNING_COUNT = 3
RECENT_WARNING_COUNT = 20
NEGATIVE_WARNING_SCORE = 70

RECOMMENDATIONS = {
    CrashRiskLevel.CRITICAL: (
        "Consider reducing positions, setting stop-losses and shifting to defensive names. "
        "Hold off on new investments until the market calms down."
    ),
    CrashRiskLevel.HIGH: (
        "Tighten risk management and consider rebalancing. "
        "Define clear stop-loss levels and monitor the market closely."
    ),
    CrashRiskLevel.MEDIUM: (
        "Stay cautious and weigh technical indicators as well. "
        "Be prepared for sudden market moves."
    ),
    CrashRiskLevel.LOW: (
        "The usual strategy can continue. Keep checking sentiment and technical "
        "indicators regularly."
    ),
}


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _engagement(tweet: Tweet, include_quotes: bool = False) -> int:
    total = tweet.engagement
    if include_quotes:
        total += tweet.metrics.quote_count
    return total


def generate_timeline(
    tweets: Sequence[Tweet], volume_saturation: int = 100
) -> list[TimelinePoint]:
    """Risk score of the posts in each 5-minute bucket, oldest first.

    Args:
        tweets: Posts
        volume_saturation: Passed on to ``evaluate_crash_risk``

    Returns:
        One point per non-empty bucket
    """
    buckets: dict[datetime, list[str]] = defaultdict(list)
    for tweet in sorted(tweets, key=lambda t: _as_utc(t.created_at)):
        created = _as_utc(tweet.created_at)
        bucket = created.replace(
            minute=created.minute // BUCKET_MINUTES * BUCKET_MINUTES, second=0, microsecond=0
        )
        buckets[bucket].append(tweet.text)

    timeline = []
    for bucket in sorted(buckets):
        texts = buckets[bucket]
        summary = analyze_tweets(texts)
        risk = evaluate_crash_risk(summary.average_negative_score, len(texts), volume_saturation)
        timeline.append(TimelinePoint(timestamp=bucket, risk_score=risk.risk_score))
    return timeline


def _prediction_text(level: CrashRiskLevel, negative_score: int, tweets: int, viral: int) -> str:
    if level == CrashRiskLevel.CRITICAL:
        return (
            f"Extreme crash risk detected. A flood of negative posts ({tweets} posts, "
            f"{viral} viral) points to possible market panic. Act promptly."
        )
    if level == CrashRiskLevel.HIGH:
        return (
            f"High crash risk detected. Negative sentiment (score {negative_score}/100) is "
            "spreading and may weigh on the price. Monitor closely."
        )
    if level == CrashRiskLevel.MEDIUM:
        return (
            "Moderate crash risk detected. Some negative reactions are visible but remain "
            "limited for now. Keep an eye on the market."
        )
    return (
        "Crash risk currently looks low. Sentiment is relatively stable with no major "
        "concerns. Normal investment decisions can continue."
    )


def _warnings(level: CrashRiskLevel, negative_score: int, viral: int, recent: int) -> list[str]:
    warnings = []
    if level in (CrashRiskLevel.CRITICAL, CrashRiskLevel.HIGH):
        warnings.append("Strongly negative sentiment detected")
    if viral > VIRAL_WARNING_COUNT:
        warnings.append(f"{viral} negative posts have gone viral")
    if recent > RECENT_WARNING_COUNT:
        warnings.append(f"{recent} related posts in the last hour; the topic is spreading fast")
    if negative_score >= NEGATIVE_WARNING_SCORE:
        warnings.append("Extremely high negative score recorded")
    if not warnings:
        warnings.append("No serious warnings at this time")
    return warnings


def predict_crash(
    tweets: Sequence[Tweet],
    now: datetime | None = None,
    config: SentimentConfig | None = None,
) -> CrashPrediction:
    """Assess crash risk from a batch of posts.

    Args:
        tweets: Posts about a ticker or the market
        now: Reference time for "recent" posts. If None, current UTC time.
        config: Sentiment settings. If None, uses defaults.

    Returns:
        CrashPrediction, zero risk for an empty batch
    """
    config = config or SentimentConfig()
    if not tweets:
        return CrashPrediction(
            prediction="Not enough data to make a prediction.",
            recommendation="Collect more posts before drawing conclusions.",
        )

    sentiment = analyze_tweets([t.text for t in tweets])

    now = _as_utc(now or datetime.now(timezone.utc))
    hour_ago = now - timedelta(hours=1)
    recent = sum(1 for t in tweets if _as_utc(t.created_at) > hour_ago)
    viral = sum(1 for t in tweets if _engagement(t) >= config.viral_engagement_threshold)
    average_engagement = sum(_engagement(t, include_quotes=True) for t in tweets) / len(tweets)

    risk = evaluate_crash_risk(
        sentiment.average_negative_score, len(tweets), config.volume_saturation
    )
    level = CrashRiskLevel(risk.risk_level)
    logger.debug(
        f"Crash risk {risk.risk_score} ({level.value}) from {len(tweets)} posts, "
        f"{recent} recent, {viral} viral"
    )

    return CrashPrediction(
        risk_score=risk.risk_score,
        risk_level=level,
        prediction=_prediction_text(level, sentiment.average_negative_score, len(tweets), viral),
        sentiment=sentiment,
        tweet_analysis=TweetActivity(
            total_tweets=len(tweets),
            recent_tweets=recent,
            viral_tweets=viral,
            average_engagement=int(round_half_up(average_engagement)),
        ),
        timeline=generate_timeline(tweets, config.volume_saturation),
        recommendation=RECOMMENDATIONS[level],
        warnings=_warnings(level, sentiment.average_negative_score, viral, recent),
    )


def technical_score_from_signal(analysis: SignalAnalysis) -> float:
    """Map a composite signal score from [-25, 25] onto [0, 100]."""
    clamped = max(-25.0, min(25.0, analysis.overall_score))
    return (clamped + 25.0) * 2


def integrate_with_technical_analysis(
    prediction: CrashPrediction, technical_signal: str, technical_score: float
) -> IntegratedSignal:
    """Blend crash risk with a technical score.

    ``final = round((100 - risk) * 0.4 + technical * 0.6)``. Critical risk
    always yields STRONG_SELL and high risk at most SELL.

    Args:
        prediction: Crash prediction
        technical_signal: Technical signal label, for the reasoning text
        technical_score: Technical score on a 0-100 scale

    Returns:
        IntegratedSignal
    """
    level = CrashRiskLevel(prediction.risk_level)
    final = int(
        round_half_up(
            (100 - prediction.risk_score) * SENTIMENT_WEIGHT + technical_score * TECHNICAL_WEIGHT
        )
    )

    if level == CrashRiskLevel.CRITICAL:
        signal = Signal.STRONG_SELL
    elif level == CrashRiskLevel.HIGH or final < 30:
        signal = Signal.SELL
    elif final < 45:
        signal = Signal.HOLD
    elif final >= 70 and level == CrashRiskLevel.LOW:
        signal = Signal.STRONG_BUY
    elif final >= 55:
        signal = Signal.BUY
    else:
        signal = Signal.HOLD

    reasoning = (
        f"Technical: {technical_signal} ({technical_score:g} pts), "
        f"sentiment: {level.value} risk ({prediction.risk_score} pts). "
        f"Combined score {final} gives {signal.value}."
    )
    return IntegratedSignal(final_score=final, final_signal=signal, reasoning=reasoning)
