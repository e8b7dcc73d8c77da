"""Configuration schemas."""

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Minimum log level"
    )
    format: str | None = Field(default=None, description="loguru format string override")
    file: str | None = Field(default=None, description="Optional log file path")
    rotation: str = Field(default="10 MB", description="Log file rotation policy")
    retention: str = Field(default="14 days", description="Log file retention policy")


class IndicatorSettings(BaseModel):
    """Periods used by the indicator engine."""

    rsi_period: int = Field(default=14, ge=2, description="RSI lookback")
    macd_fast: int = Field(default=12, ge=1, description="MACD fast EMA period")
    macd_slow: int = Field(default=26, ge=1, description="MACD slow EMA period")
    macd_signal: int = Field(default=9, ge=1, description="MACD signal EMA period")
    bollinger_period: int = Field(default=20, ge=2, description="Bollinger band window")
    bollinger_std_dev: float = Field(default=2.0, gt=0, description="Band width in std devs")
    textbook_ema: bool = Field(
        default=False,
        description=(
            "Seed EMA with an SMA and leave the warm-up undefined. "
            "Off keeps the seed-at-first-price behaviour the signal thresholds were tuned on."
        ),
    )

    @model_validator(mode="after")
    def _check_macd_periods(self) -> "IndicatorSettings":
        if self.macd_fast >= self.macd_slow:
            raise ValueError("macd_fast must be smaller than macd_slow")
        return self


class SignalWeights(BaseModel):
    """Weights of the sub-scores in the composite signal score."""

    rsi: float = Field(default=1.0, ge=0)
    macd: float = Field(default=1.2, ge=0)
    moving_average: float = Field(default=1.1, ge=0)
    bollinger_bands: float = Field(default=0.9, ge=0)

    @model_validator(mode="after")
    def _check_total(self) -> "SignalWeights":
        if self.rsi + self.macd + self.moving_average + self.bollinger_bands <= 0:
            raise ValueError("At least one signal weight must be positive")
        return self


class SignalConfig(BaseModel):
    """Signal classification settings."""

    weights: SignalWeights = Field(default_factory=SignalWeights)
    strong_buy_threshold: float = Field(default=15.0, description="Score at or above: STRONG_BUY")
    buy_threshold: float = Field(default=5.0, description="Score at or above: BUY")
    sell_threshold: float = Field(default=-15.0, description="Score at or above: SELL")
    hold_threshold: float = Field(default=-5.0, description="Score at or above: HOLD")


class PatternConfig(BaseModel):
    """Historical pattern matching settings."""

    min_similarity: float = Field(default=55.0, ge=0, le=100, description="Initial threshold")
    similarity_floor: float = Field(default=30.0, ge=0, le=100, description="Relaxation floor")
    relaxation_step: float = Field(default=10.0, gt=0, description="Threshold decrement")
    forward_horizons: list[int] = Field(
        default_factory=lambda: [1, 3, 5, 7],
        min_length=1,
        description="Forward return horizons in days",
    )
    top_n: int = Field(default=10, ge=1, description="Number of patterns returned")
    lookback_days: int | None = Field(
        default=None, ge=1, description="Restrict candidates to the most recent N days"
    )


class SentimentConfig(BaseModel):
    """Social sentiment settings."""

    max_tweets: int = Field(default=100, ge=1, description="Tweets fetched per query")
    volume_saturation: int = Field(
        default=100, ge=1, description="Tweet count at which the volume factor saturates"
    )
    viral_engagement_threshold: int = Field(default=100, ge=1)


class DataConfig(BaseModel):
    """Price data settings."""

    default_period: str = Field(default="1y", description="yfinance period for price history")
    rate_limit_per_minute: int = Field(default=60, ge=1, description="Provider calls per minute")


class Config(BaseModel):
    """Root configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    indicators: IndicatorSettings = Field(default_factory=IndicatorSettings)
    signals: SignalConfig = Field(default_factory=SignalConfig)
    patterns: PatternConfig = Field(default_factory=PatternConfig)
    sentiment: SentimentConfig = Field(default_factory=SentimentConfig)
    backtesting: dict[str, Any] = Field(
        default_factory=dict, description="Overrides for BacktestConfig"
    )
