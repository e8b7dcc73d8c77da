"""Composite buy/sell signal from technical indicators.

Each indicator is mapped to a bounded sub-score through fixed threshold
ladders. The weighted average of the sub-scores is classified into a
five-level signal with a confidence and a risk level.
"""

import math

from stocklens.analysis.models import (
    IndicatorScore,
    IndividualScores,
    LatestIndicators,
    RiskLevel,
    Signal,
    SignalAnalysis,
)
from stocklens.config.schemas import SignalConfig
from stocklens.utils.logging import get_logger

logger = get_logger(__name__)

RECOMMENDATIONS = {
    Signal.STRONG_BUY: "Consider building an aggressive long position, with risk management in place.",
    Signal.BUY: "Consider a long position, preferably entered in stages.",
    Signal.HOLD: "Keep the current position and keep watching the market.",
    Signal.SELL: "Consider selling to take profits or cut losses.",
    Signal.STRONG_SELL: "Consider exiting promptly; risk is elevated.",
}


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to ``digits`` decimals with halves rounded up."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _no_data(reason: str) -> IndicatorScore:
    return IndicatorScore(score=0, reason=reason, available=False)


def score_rsi(rsi: float | None) -> IndicatorScore:
    """RSI sub-score in [-25, 25]."""
    if rsi is None:
        return _no_data("No RSI data")

    if rsi <= 20:
        return IndicatorScore(score=25, reason="RSI extremely oversold (strong buy)")
    if rsi <= 30:
        return IndicatorScore(score=15, reason="RSI oversold (buy)")
    if rsi <= 40:
        return IndicatorScore(score=5, reason="RSI weak buy")
    if rsi >= 80:
        return IndicatorScore(score=-25, reason="RSI extremely overbought (strong sell)")
    if rsi >= 70:
        return IndicatorScore(score=-15, reason="RSI overbought (sell)")
    if rsi >= 60:
        return IndicatorScore(score=-5, reason="RSI weak sell")
    return IndicatorScore(score=0, reason="RSI neutral")


def score_macd(
    macd: float | None, signal: float | None, histogram: float | None
) -> IndicatorScore:
    """MACD sub-score in [-25, 25]."""
    if macd is None or signal is None or histogram is None:
        return _no_data("No MACD data")

    score = 0
    reasons = []
    if macd > signal:
        score += 10
        reasons.append("MACD > signal (bullish)")
    else:
        score -= 10
        reasons.append("MACD < signal (bearish)")

    if histogram > 0:
        score += 15 if histogram > 0.5 else 8
        reasons.append("MACD histogram positive (rising momentum)")
    else:
        score -= 15 if histogram < -0.5 else 8
        reasons.append("MACD histogram negative (falling momentum)")

    return IndicatorScore(score=_clamp(score, -25, 25), reason=", ".join(reasons))


def score_moving_average(
    price: float, sma5: float | None, sma20: float | None, sma50: float | None
) -> IndicatorScore:
    """Moving average sub-score in [-25, 25]. Needs SMA5 and SMA20."""
    if sma5 is None or sma20 is None:
        return _no_data("Not enough moving average data")

    score = 0
    reasons = []
    if sma5 > sma20:
        score += 10
        reasons.append("SMA5 > SMA20 (uptrend)")
    else:
        score -= 10
        reasons.append("SMA5 < SMA20 (downtrend)")

    if price > sma5:
        score += 8
        reasons.append("Price > SMA5 (short-term strength)")
    else:
        score -= 8
        reasons.append("Price < SMA5 (short-term weakness)")

    if sma50 is not None:
        if sma20 > sma50:
            score += 7
            reasons.append("SMA20 > SMA50 (medium-term uptrend)")
        else:
            score -= 7
            reasons.append("SMA20 < SMA50 (medium-term downtrend)")

    return IndicatorScore(score=_clamp(score, -25, 25), reason=", ".join(reasons))


def band_position(price: float, upper: float, lower: float) -> float:
    """Position of the price inside the band, 0 at the lower and 1 at the upper edge.

    A zero-width band gives 0 for a price below it, 1 above it and 0.5 on it.
    """
    width = upper - lower
    if width == 0:
        if price < lower:
            return 0.0
        if price > upper:
            return 1.0
        return 0.5
    return (price - lower) / width


def score_bollinger(
    price: float, upper: float | None, middle: float | None, lower: float | None
) -> IndicatorScore:
    """Bollinger band sub-score in [-20, 20]."""
    if upper is None or middle is None or lower is None:
        return _no_data("No Bollinger band data")

    position = band_position(price, upper, lower)
    if position <= 0.1:
        return IndicatorScore(score=20, reason="Near lower Bollinger band (strong buy)")
    if position <= 0.2:
        return IndicatorScore(score=15, reason="Lower Bollinger zone (buy)")
    if position >= 0.9:
        return IndicatorScore(score=-20, reason="Near upper Bollinger band (strong sell)")
    if position >= 0.8:
        return IndicatorScore(score=-15, reason="Upper Bollinger zone (sell)")
    if 0.4 <= position <= 0.6:
        return IndicatorScore(score=0, reason="Middle of Bollinger bands (neutral)")
    if position < 0.4:
        return IndicatorScore(score=5, reason="Lower half of Bollinger bands (weak buy)")
    return IndicatorScore(score=-5, reason="Upper half of Bollinger bands (weak sell)")


def classify(score: float, config: SignalConfig | None = None) -> tuple[Signal, int, RiskLevel]:
    """Classify a composite score.

    Args:
        score: Composite score
        config: Thresholds. If None, uses defaults.

    Returns:
        Tuple of (signal, confidence, risk level)
    """
    config = config or SignalConfig()

    if score >= config.strong_buy_threshold:
        signal = Signal.STRONG_BUY
        confidence = min(95, 70 + abs(score - config.strong_buy_threshold) * 2)
        risk = RiskLevel.MEDIUM
    elif score >= config.buy_threshold:
        signal = Signal.BUY
        confidence = min(85, 60 + abs(score - config.buy_threshold) * 2)
        risk = RiskLevel.MEDIUM
    elif score >= config.hold_threshold:
        signal = Signal.HOLD
        confidence = 50 + abs(score) * 2
        risk = RiskLevel.LOW
    elif score >= config.sell_threshold:
        signal = Signal.SELL
        confidence = min(85, 60 + abs(score - config.hold_threshold) * 2)
        risk = RiskLevel.MEDIUM
    else:
        signal = Signal.STRONG_SELL
        confidence = min(95, 70 + abs(score - config.sell_threshold) * 2)
        risk = RiskLevel.HIGH

    return signal, int(round_half_up(confidence)), risk


def score_signal(
    price: float, indicators: LatestIndicators, config: SignalConfig | None = None
) -> SignalAnalysis:
    """Score the current indicator snapshot.

    Missing indicators score 0 but keep their weight in the denominator.
    Their reasons are left out, except when moving averages are too short.
    Never raises on missing data.

    Args:
        price: Current close
        indicators: Latest indicator values
        config: Weights and thresholds. If None, uses defaults.

    Returns:
        SignalAnalysis
    """
    config = config or SignalConfig()
    weights = config.weights

    scores = IndividualScores(
        rsi=score_rsi(indicators.rsi),
        macd=score_macd(indicators.macd, indicators.macd_signal, indicators.macd_histogram),
        moving_average=score_moving_average(
            price, indicators.sma5, indicators.sma20, indicators.sma50
        ),
        bollinger_bands=score_bollinger(
            price, indicators.bollinger_upper, indicators.bollinger_middle, indicators.bollinger_lower
        ),
    )

    weighted = (
        scores.rsi.score * weights.rsi
        + scores.macd.score * weights.macd
        + scores.moving_average.score * weights.moving_average
        + scores.bollinger_bands.score * weights.bollinger_bands
    )
    total_weight = weights.rsi + weights.macd + weights.moving_average + weights.bollinger_bands
    overall = round_half_up(weighted / total_weight, 2)

    signal, confidence, risk = classify(overall, config)
    # Insufficient moving averages are reported; other missing indicators are not.
    reasons = [
        s.reason
        for s in (scores.rsi, scores.macd, scores.moving_average, scores.bollinger_bands)
        if s.available or s is scores.moving_average
    ]

    logger.debug(f"Signal {signal.value} (score={overall}, confidence={confidence})")
    return SignalAnalysis(
        overall_score=overall,
        signal=signal,
        confidence=confidence,
        risk_level=risk,
        individual_scores=scores,
        reasons=reasons,
        recommendation=RECOMMENDATIONS[signal],
    )
