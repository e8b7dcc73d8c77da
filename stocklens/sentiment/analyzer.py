"""Keyword-based sentiment analysis of social media posts.

Japanese keywords are counted by substring occurrence, English keywords as
whole words. Scores rise with the share of negative words in the text.
"""

import re
from collections import Counter
from typing import Iterable, Sequence

from stocklens.analysis.signals import round_half_up
from stocklens.data.models import Tweet
from stocklens.sentiment.keywords import (
    ENGLISH_NEGATIVE_WORDS,
    JAPANESE_NEGATIVE_WORDS,
    NEGATIVE_KEYWORDS,
    POSITIVE_KEYWORDS,
)
from stocklens.sentiment.models import (
    CrashRiskEvaluation,
    CrashRiskLevel,
    Language,
    OverallSentiment,
    SampleTweet,
    SentimentAggregation,
    SentimentResult,
    TweetSentiment,
    TweetSentimentSummary,
    WordCount,
)
from stocklens.utils.logging import get_logger

logger = get_logger(__name__)

# ASCII word boundaries so that CJK characters next to a word still separate it
_ENGLISH_PATTERNS = [
    (word, re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE | re.ASCII))
    for word in ENGLISH_NEGATIVE_WORDS
]
_CJK_CHAR = re.compile(r"[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF]")
_CJK_RUN = re.compile(r"[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF]+")
_LATIN_CHAR = re.compile(r"[a-zA-Z]")
_LATIN_WORD = re.compile(r"\b[a-zA-Z]+\b", re.ASCII)

SCORE_SCALE = 1000
TOP_WORDS = 10
SAMPLE_SIZE = 5


def detect_language(text: str) -> Language:
    has_japanese = bool(_CJK_CHAR.search(text))
    has_english = bool(_LATIN_CHAR.search(text))
    if has_japanese and has_english:
        return Language.MIXED
    if has_japanese:
        return Language.JA
    return Language.EN


def count_words(text: str) -> int:
    """Approximate word count: CJK character runs plus ASCII word runs."""
    return len(_CJK_RUN.findall(text)) + len(_LATIN_WORD.findall(text))


def analyze_sentiment(text: str) -> SentimentResult:
    """Score the negativity of a text.

    ``negative_score = round(min(100, 1000 * negative occurrences / words))``,
    so a text where one word in ten is negative already scores 100.

    Args:
        text: Post text

    Returns:
        SentimentResult, all zeros for blank text
    """
    if not text or not text.strip():
        return SentimentResult(
            negative_score=0,
            negative_words=[],
            total_words=0,
            negative_ratio=0.0,
            language=Language.MIXED,
        )

    detected: list[str] = []
    occurrences = 0

    for word in JAPANESE_NEGATIVE_WORDS:
        count = text.count(word)
        if count:
            detected.append(word)
            occurrences += count

    for word, pattern in _ENGLISH_PATTERNS:
        matches = pattern.findall(text)
        if matches:
            detected.append(word)
            occurrences += len(matches)

    total_words = count_words(text)
    ratio = occurrences / total_words if total_words > 0 else 0.0

    return SentimentResult(
        negative_score=int(round_half_up(min(100.0, ratio * SCORE_SCALE))),
        negative_words=list(dict.fromkeys(detected)),
        total_words=total_words,
        negative_ratio=ratio,
        language=detect_language(text),
    )


def analyze_tweets(texts: Sequence[str]) -> TweetSentimentSummary:
    """Aggregate negative-word analysis over a batch of posts.

    Word frequency counts each word at most once per post.

    Args:
        texts: Post texts

    Returns:
        TweetSentimentSummary, neutral and low risk for an empty batch
    """
    if not texts:
        return TweetSentimentSummary()

    results = [analyze_sentiment(text) for text in texts]
    average = sum(r.negative_score for r in results) / len(results)

    frequency: Counter[str] = Counter()
    for result in results:
        frequency.update(result.negative_words)
    total_words = sum(frequency.values())

    if average >= 70:
        overall = OverallSentiment.VERY_NEGATIVE
    elif average >= 40:
        overall = OverallSentiment.NEGATIVE
    elif average >= 20:
        overall = OverallSentiment.NEUTRAL
    else:
        overall = OverallSentiment.POSITIVE

    if average >= 60 or total_words >= len(texts) * 2:
        risk = CrashRiskLevel.HIGH
    elif average >= 30 or total_words >= len(texts):
        risk = CrashRiskLevel.MEDIUM
    else:
        risk = CrashRiskLevel.LOW

    return TweetSentimentSummary(
        average_negative_score=int(round_half_up(average)),
        total_negative_words=total_words,
        most_common_negative_words=[
            WordCount(word=word, count=count) for word, count in frequency.most_common(TOP_WORDS)
        ],
        overall_sentiment=overall,
        risk_level=risk,
    )


def has_negative_keywords(text: str) -> bool:
    """Whether a text contains any red-flag keyword."""
    lower = text.lower()
    return any(keyword.lower() in lower for keyword in NEGATIVE_KEYWORDS)


def classify_sentiment(text: str) -> TweetSentiment:
    """Classify a post by the number of distinct positive and negative keywords."""
    lower = text.lower()
    positive = sum(1 for keyword in POSITIVE_KEYWORDS if keyword.lower() in lower)
    negative = sum(1 for keyword in NEGATIVE_KEYWORDS if keyword.lower() in lower)
    if negative > positive:
        return TweetSentiment.NEGATIVE
    if positive > negative:
        return TweetSentiment.POSITIVE
    return TweetSentiment.NEUTRAL


def aggregate_sentiment(tweets: Iterable[Tweet | str]) -> SentimentAggregation:
    """Tally post classifications into a -100..100 score.

    Args:
        tweets: Tweet records or plain texts

    Returns:
        SentimentAggregation with the top posts by likes plus retweets
    """
    items = list(tweets)
    counts: Counter[TweetSentiment] = Counter()
    keyword_hits = 0
    ranked: list[tuple[int, SampleTweet]] = []

    for item in items:
        text = item.text if isinstance(item, Tweet) else item
        sentiment = classify_sentiment(text)
        counts[sentiment] += 1
        if has_negative_keywords(text):
            keyword_hits += 1

        if isinstance(item, Tweet):
            engagement = item.metrics.like_count + item.metrics.retweet_count
            sample = SampleTweet(text=text, sentiment=sentiment, created_at=item.created_at)
        else:
            engagement = 0
            sample = SampleTweet(text=text, sentiment=sentiment)
        ranked.append((engagement, sample))

    total = len(items)
    positive = counts[TweetSentiment.POSITIVE]
    negative = counts[TweetSentiment.NEGATIVE]
    score = int(round_half_up((positive - negative) / total * 100)) if total else 0

    ranked.sort(key=lambda pair: pair[0], reverse=True)
    return SentimentAggregation(
        tweet_count=total,
        positive_count=positive,
        neutral_count=counts[TweetSentiment.NEUTRAL],
        negative_count=negative,
        negative_keyword_count=keyword_hits,
        sentiment_score=score,
        sample_tweets=[sample for _, sample in ranked[:SAMPLE_SIZE]],
    )


CRASH_MESSAGES = {
    CrashRiskLevel.CRITICAL: "Extreme crash risk: a flood of negative posts was detected.",
    CrashRiskLevel.HIGH: "High crash risk: negative sentiment is spreading.",
    CrashRiskLevel.MEDIUM: "Moderate crash risk: some negative reactions are visible.",
    CrashRiskLevel.LOW: "Low crash risk: sentiment is relatively stable.",
}


def evaluate_crash_risk(
    sentiment_score: float, tweet_count: int, volume_saturation: int = 100
) -> CrashRiskEvaluation:
    """Combine negativity and post volume into a crash risk score.

    ``risk = round((score / 100 * 0.7 + min(1, count / saturation) * 0.3) * 100)``

    Args:
        sentiment_score: Average negative score, 0-100
        tweet_count: Number of posts
        volume_saturation: Post count at which volume stops adding risk

    Returns:
        CrashRiskEvaluation
    """
    volume_factor = min(1.0, tweet_count / volume_saturation)
    sentiment_factor = sentiment_score / 100
    risk_score = int(round_half_up((sentiment_factor * 0.7 + volume_factor * 0.3) * 100))

    if risk_score >= 75:
        level = CrashRiskLevel.CRITICAL
    elif risk_score >= 50:
        level = CrashRiskLevel.HIGH
    elif risk_score >= 30:
        level = CrashRiskLevel.MEDIUM
    else:
        level = CrashRiskLevel.LOW

    return CrashRiskEvaluation(risk_score=risk_score, risk_level=level, message=CRASH_MESSAGES[level])
