"""StockLens: technical indicators, signals, screening, backtests and sentiment."""

__version__ = "0.1.0"
