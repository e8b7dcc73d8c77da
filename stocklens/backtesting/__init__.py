"""Backtesting of the composite signal over historical prices.

This module provides tools for:
- Walk-forward simulation with stop-loss, take-profit and commissions
- Performance statistics against a buy-and-hold baseline
- Grid search over exit and sizing parameters

Example usage:
    from stocklens.backtesting import BacktestConfig, run_backtest

    result = run_backtest(prices, BacktestConfig(stop_loss_percent=0.05))
    print(result.performance.total_return)
"""

from stocklens.backtesting.config import BacktestConfig
from stocklens.backtesting.engine import BacktestEngine, optimize_parameters, run_backtest
from stocklens.backtesting.models import (
    BacktestPerformance,
    BacktestResult,
    OptimizationResult,
    PortfolioSnapshot,
    Trade,
    TradePair,
    TradeType,
)

__all__ = [
    "BacktestConfig",
    "BacktestEngine",
    "BacktestPerformance",
    "BacktestResult",
    "OptimizationResult",
    "PortfolioSnapshot",
    "Trade",
    "TradePair",
    "TradeType",
    "optimize_parameters",
    "run_backtest",
]
