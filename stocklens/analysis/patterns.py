"""Historical pattern matching.

Scores every historical indicator snapshot against the current one with a
weighted multi-feature similarity, keeps the matches above a threshold and
aggregates what prices did afterwards.
"""

import math
from typing import Sequence

import numpy as np

from stocklens.analysis.models import (
    FuturePerformance,
    IndicatorSeries,
    IndicatorSnapshot,
    PatternAnalysisResult,
    PatternPrediction,
    SimilarPattern,
)
from stocklens.analysis.technical_indicators import compute_indicators, validate_price_series
from stocklens.config.schemas import PatternConfig
from stocklens.data.models import PricePoint
from stocklens.utils.errors import InvalidSeriesError
from stocklens.utils.logging import get_logger

logger = get_logger(__name__)

FEATURE_WEIGHTS = {
    "rsi": 0.15,
    "rsi_zone": 0.05,
    "macd": 0.12,
    "macd_histogram": 0.12,
    "macd_cross": 0.06,
    "sma_ratios": 0.15,
    "sma_trend": 0.10,
    "ema_ratio": 0.15,
    "bollinger_position": 0.10,
}

RSI_TOLERANCE = 0.15
MACD_TOLERANCE = 0.25
RATIO_TOLERANCE = 0.08
BOLLINGER_TOLERANCE = 0.15

RECENCY_BONUSES = [(7, 0.10), (14, 0.07), (30, 0.05), (60, 0.03)]


def value_similarity(a: float | None, b: float | None, tolerance: float = 0.1) -> float:
    """Similarity of two numbers on a 0-100 scale.

    ``max(0, 100 * (1 - (|a - b| / mean(|a|, |b|)) / tolerance))``; two zeros
    are identical, an absent value scores 0.
    """
    if a is None or b is None or math.isnan(a) or math.isnan(b):
        return 0.0
    avg = (abs(a) + abs(b)) / 2
    if avg == 0:
        return 100.0
    relative_diff = abs(a - b) / avg
    return max(0.0, 100 * (1 - relative_diff / tolerance))


def rsi_zone(rsi: float) -> str:
    if rsi >= 70:
        return "overbought"
    if rsi >= 50:
        return "bullish"
    if rsi >= 30:
        return "bearish"
    return "oversold"


def moving_average_trend(sma5: float, sma20: float, sma50: float) -> str:
    if sma5 > sma20 and sma20 > sma50:
        return "strong_uptrend"
    if sma5 > sma20 or sma20 > sma50:
        return "uptrend"
    if sma5 < sma20 and sma20 < sma50:
        return "strong_downtrend"
    if sma5 < sma20 or sma20 < sma50:
        return "downtrend"
    return "neutral"


def bollinger_position(price: float, upper: float, lower: float) -> float:
    """Price position inside the band on a 0-100 scale, 50 for a zero-width band."""
    if upper == lower:
        return 50.0
    position = (price - lower) / (upper - lower) * 100
    return max(0.0, min(100.0, position))


def recency_bonus(days_ago: int) -> float:
    for limit, bonus in RECENCY_BONUSES:
        if days_ago <= limit:
            return bonus
    return 0.0


def _defined(*values: float | None) -> bool:
    return all(v is not None for v in values)


def _nonzero(*values: float | None) -> bool:
    return all(v is not None and v != 0 for v in values)


def overall_similarity(current: IndicatorSnapshot, other: IndicatorSnapshot) -> float:
    """Weighted similarity of two snapshots on a 0-100 scale.

    Features that are absent on either side are left out of both the
    weighted sum and the total weight.

    Args:
        current: Snapshot being matched
        other: Historical snapshot

    Returns:
        Similarity, 0 when no feature can be compared
    """
    weights = FEATURE_WEIGHTS
    total = 0.0
    total_weight = 0.0

    if _defined(current.rsi, other.rsi):
        total += value_similarity(current.rsi, other.rsi, RSI_TOLERANCE) * weights["rsi"]
        if rsi_zone(current.rsi) == rsi_zone(other.rsi):
            total += 100 * weights["rsi_zone"]
        total_weight += weights["rsi"] + weights["rsi_zone"]

    if _defined(current.macd, other.macd):
        total += value_similarity(current.macd, other.macd, MACD_TOLERANCE) * weights["macd"]
        total_weight += weights["macd"]

    if _defined(current.macd_histogram, other.macd_histogram):
        total += (
            value_similarity(current.macd_histogram, other.macd_histogram, MACD_TOLERANCE)
            * weights["macd_histogram"]
        )
        total_weight += weights["macd_histogram"]

        if _defined(current.macd, current.macd_signal, other.macd, other.macd_signal):
            current_cross = current.macd > current.macd_signal
            other_cross = other.macd > other.macd_signal
            if current_cross == other_cross:
                total += 100 * weights["macd_cross"]
            total_weight += weights["macd_cross"]

    ratio_scores = []
    for short, long in (("sma5", "sma20"), ("sma20", "sma50"), ("sma5", "sma50")):
        values = (getattr(current, short), getattr(current, long))
        other_values = (getattr(other, short), getattr(other, long))
        if _nonzero(*values, *other_values):
            ratio_scores.append(
                value_similarity(
                    values[0] / values[1], other_values[0] / other_values[1], RATIO_TOLERANCE
                )
            )
    if ratio_scores:
        total += sum(ratio_scores) / len(ratio_scores) * weights["sma_ratios"]
        total_weight += weights["sma_ratios"]

    if _nonzero(current.sma5, current.sma20, current.sma50, other.sma5, other.sma20, other.sma50):
        current_trend = moving_average_trend(current.sma5, current.sma20, current.sma50)
        other_trend = moving_average_trend(other.sma5, other.sma20, other.sma50)
        if current_trend == other_trend:
            total += 100 * weights["sma_trend"]
        total_weight += weights["sma_trend"]

    if _nonzero(current.ema12, current.ema26, other.ema12, other.ema26):
        total += (
            value_similarity(
                current.ema12 / current.ema26, other.ema12 / other.ema26, RATIO_TOLERANCE
            )
            * weights["ema_ratio"]
        )
        total_weight += weights["ema_ratio"]

    bands = ("bollinger_upper", "bollinger_middle", "bollinger_lower")
    if _nonzero(current.price, *(getattr(current, b) for b in bands)) and _nonzero(
        other.price, *(getattr(other, b) for b in bands)
    ):
        total += (
            value_similarity(
                bollinger_position(current.price, current.bollinger_upper, current.bollinger_lower),
                bollinger_position(other.price, other.bollinger_upper, other.bollinger_lower),
                BOLLINGER_TOLERANCE,
            )
            * weights["bollinger_position"]
        )
        total_weight += weights["bollinger_position"]

    return total / total_weight if total_weight > 0 else 0.0


def future_performance(
    prices: Sequence[PricePoint], index: int, horizons: Sequence[int] = (1, 3, 5, 7)
) -> list[FuturePerformance]:
    """Price behaviour over each horizon after ``index``.

    Horizons running past the end of the series are skipped.

    Args:
        prices: Price series
        index: Base index
        horizons: Horizons in trading days

    Returns:
        One entry per available horizon
    """
    base = prices[index].close
    results = []
    for days in horizons:
        end = index + days
        if end >= len(prices):
            continue

        window = prices[index : end + 1]
        closes = np.array([p.close for p in window])
        change = prices[end].close - base
        results.append(
            FuturePerformance(
                days=days,
                price_change=change,
                price_change_percent=change / base * 100,
                highest_price=max(base, *(p.high for p in window)),
                lowest_price=min(base, *(p.low for p in window)),
                volatility=float(closes.std(ddof=0)) / base * 100,
            )
        )
    return results


def snapshot(prices: Sequence[PricePoint], indicators: IndicatorSeries, index: int) -> IndicatorSnapshot:
    """Indicator values, date and close at ``index``."""
    values = indicators.values_at(index)
    return IndicatorSnapshot(date=prices[index].date, price=prices[index].close, **values.model_dump())


def calculate_prediction(
    patterns: list[SimilarPattern], horizons: Sequence[int] = (1, 3, 5, 7)
) -> PatternPrediction:
    """Aggregate forward statistics over all matches.

    Args:
        patterns: Every match found, not just the top ones
        horizons: Horizons to average; the longest one drives the success rate

    Returns:
        PatternPrediction, all zeros when there are no matches
    """
    if not patterns:
        return PatternPrediction(average_returns={days: 0.0 for days in horizons})

    returns: dict[int, list[float]] = {days: [] for days in horizons}
    volatilities = []
    for pattern in patterns:
        for perf in pattern.future_performance:
            if perf.days in returns:
                returns[perf.days].append(perf.price_change_percent)
            volatilities.append(perf.volatility)

    def average(values: list[float]) -> float:
        return sum(values) / len(values) if values else 0.0

    final_returns = returns[max(horizons)]
    success_rate = (
        sum(1 for r in final_returns if r > 0) / len(final_returns) * 100 if final_returns else 0.0
    )

    return PatternPrediction(
        average_returns={days: average(values) for days, values in returns.items()},
        success_rate=success_rate,
        confidence=min(100.0, len(patterns) / 10 * 100),
        volatility_expectation=average(volatilities),
    )


def _signed(value: float) -> str:
    return f"{'+' if value > 0 else ''}{value:.2f}%"


def generate_summary(
    patterns: list[SimilarPattern],
    prediction: PatternPrediction,
    used_similarity: float,
    horizon: int = 7,
) -> str:
    """Human-readable summary of a pattern search."""
    if not patterns:
        return (
            "No historical patterns similar to the current indicators were found. "
            "The price history may be too short or the current market situation unusual."
        )

    average_return = prediction.average_returns.get(horizon, 0.0)
    success = prediction.success_rate
    confidence = prediction.confidence

    summary = f"Found {len(patterns)} similar patterns"
    if used_similarity < 50:
        summary += f" (similarity >= {used_similarity:.0f}%, confidence: {confidence:.0f}%).\n\n"
        summary += (
            f"The similarity threshold was lowered to {used_similarity:.0f}%. "
            "Use these results as a rough reference only.\n\n"
        )
    else:
        summary += f" (confidence: {confidence:.0f}%).\n\n"

    if success >= 70:
        summary += (
            f"After similar patterns the price was up {horizon} days later "
            f"{success:.0f}% of the time (average {_signed(average_return)})."
        )
        if confidence >= 70:
            summary += " An upward move is likely with high confidence."
    elif success >= 50:
        summary += (
            f"After similar patterns the price was up {horizon} days later "
            f"{success:.0f}% of the time, with an average return of {_signed(average_return)}."
        )
        summary += " Waiting for confirmation is advised."
    else:
        summary += (
            f"After similar patterns the price was down {horizon} days later "
            f"{100 - success:.0f}% of the time (average {_signed(average_return)})."
        )
        if confidence >= 70:
            summary += " Downside risk is high with high confidence; be cautious."

    if prediction.volatility_expectation > 5:
        summary += (
            f"\n\nExpected volatility is high at {prediction.volatility_expectation:.1f}%. "
            "Watch for large price swings."
        )

    return summary


def find_similar_patterns(
    prices: Sequence[PricePoint],
    indicators: IndicatorSeries | None = None,
    min_similarity: float | None = None,
    config: PatternConfig | None = None,
) -> PatternAnalysisResult:
    """Find historical dates whose indicators resemble the latest ones.

    Candidates end early enough that the longest forward horizon fits in the
    series. The threshold applies to the raw similarity; reported
    similarities include the recency bonus. When nothing passes, the
    threshold is lowered step by step down to the configured floor.

    Args:
        prices: Price series, ascending by date
        indicators: Precomputed indicators for ``prices``. If None, computed here.
        min_similarity: Initial threshold. If None, taken from config.
        config: Pattern settings. If None, uses defaults.

    Returns:
        PatternAnalysisResult

    Raises:
        InvalidSeriesError: If the series is empty, unordered, or does not
            match the indicator length
    """
    config = config or PatternConfig()
    validate_price_series(prices, allow_empty=False)
    if indicators is None:
        indicators = compute_indicators(prices)
    if len(indicators) != len(prices):
        raise InvalidSeriesError(
            f"Indicator length {len(indicators)} does not match price length {len(prices)}"
        )

    horizons = sorted(config.forward_horizons)
    requested = config.min_similarity if min_similarity is None else min_similarity
    current_index = len(prices) - 1
    current = snapshot(prices, indicators, current_index)

    end = max(0, current_index - max(horizons))
    start = 0
    if config.lookback_days is not None:
        start = max(0, current_index - config.lookback_days)

    candidates: list[tuple[float, SimilarPattern]] = []
    for i in range(start, end):
        historical = snapshot(prices, indicators, i)
        if historical.rsi is None or historical.macd is None or historical.sma20 is None:
            continue

        performance = future_performance(prices, i, horizons)
        if not performance:
            continue

        raw = overall_similarity(current, historical)
        pattern = SimilarPattern(
            date=historical.date,
            similarity=raw * (1 + recency_bonus(current_index - i)),
            indicators=historical,
            future_performance=performance,
        )
        candidates.append((raw, pattern))

    threshold = requested
    while True:
        matches = [pattern for raw, pattern in candidates if raw >= threshold]
        if matches or threshold <= config.similarity_floor:
            break
        lowered = max(config.similarity_floor, threshold - config.relaxation_step)
        logger.debug(f"No patterns at similarity {threshold}, retrying at {lowered}")
        threshold = lowered

    matches.sort(key=lambda p: p.similarity, reverse=True)
    prediction = calculate_prediction(matches, horizons)
    logger.debug(
        f"Pattern search: {len(matches)} matches from {len(candidates)} candidates "
        f"at threshold {threshold}"
    )

    return PatternAnalysisResult(
        current_indicators=current,
        similar_patterns=matches[: config.top_n],
        total_matches=len(matches),
        prediction=prediction,
        summary=generate_summary(matches, prediction, threshold, horizons[-1]),
        requested_similarity=requested,
        used_similarity=threshold,
        threshold_relaxed=threshold != requested,
    )
