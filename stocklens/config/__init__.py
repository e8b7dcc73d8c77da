"""Configuration management."""

from .loader import ConfigLoader, get_config, load_config, reset_config
from .schemas import (
    Config,
    DataConfig,
    IndicatorSettings,
    LoggingConfig,
    PatternConfig,
    SentimentConfig,
    SignalConfig,
    SignalWeights,
)

__all__ = [
    "Config",
    "ConfigLoader",
    "DataConfig",
    "IndicatorSettings",
    "LoggingConfig",
    "PatternConfig",
    "SentimentConfig",
    "SignalConfig",
    "SignalWeights",
    "get_config",
    "load_config",
    "reset_config",
]
