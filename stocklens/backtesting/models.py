"""Data models for backtest trades, performance and results."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from stocklens.analysis.models import Signal
from stocklens.backtesting.config import BacktestConfig


class TradeType(str, Enum):
    """Side of a trade."""

    BUY = "BUY"
    SELL = "SELL"


class Trade(BaseModel):
    """One executed trade in the backtest log."""

    date: datetime = Field(description="Execution date")
    type: TradeType = Field(description="BUY or SELL")
    price: float = Field(description="Execution price")
    signal: Signal = Field(description="Signal behind the trade (HOLD marks a forced exit)")
    confidence: int = Field(description="Signal confidence at execution")
    shares: int = Field(ge=0, description="Whole shares traded")
    value: float = Field(description="Cost including commission for BUY, gross proceeds for SELL")
    commission: float = Field(default=0.0, ge=0, description="Commission paid")

    model_config = ConfigDict(use_enum_values=True)


class TradePair(BaseModel):
    """A BUY followed by the SELL that closed it."""

    buy: Trade
    sell: Trade
    profit: float = Field(description="Sell value minus buy value")


def pair_trades(trades: list[Trade]) -> list[TradePair]:
    """Pair trades two at a time in log order.

    Relies on the log strictly alternating BUY and SELL.

    Args:
        trades: Trade log

    Returns:
        Pairs whose first trade is a BUY and second a SELL
    """
    pairs = []
    for buy, sell in zip(trades[::2], trades[1::2]):
        if buy.type == TradeType.BUY and sell.type == TradeType.SELL:
            pairs.append(TradePair(buy=buy, sell=sell, profit=sell.value - buy.value))
    return pairs


class PortfolioSnapshot(BaseModel):
    """Portfolio value on one day, next to the buy-and-hold baseline."""

    date: datetime
    value: float = Field(description="Cash plus marked-to-market position")
    buy_and_hold_value: float = Field(description="Value of holding from day 0")


class BacktestPerformance(BaseModel):
    """Aggregate statistics of a backtest run."""

    total_return: float = Field(description="(final - initial) / initial")
    annualized_return: float = Field(description="(1 + total) ^ (252 / days) - 1")
    win_rate: float = Field(description="Winning pairs / all pairs")
    total_trades: int = Field(description="Number of BUY/SELL pairs")
    winning_trades: int
    losing_trades: int
    average_win: float = Field(description="Mean profit of winning pairs")
    average_loss: float = Field(description="Mean loss of losing pairs, reported positive")
    max_drawdown: float = Field(description="Largest peak-to-trough fall as a fraction")
    sharpe_ratio: float = Field(description="Mean over std of daily returns")
    final_value: float = Field(description="Cash after the final liquidation")
    buy_and_hold_return: float = Field(description="Return of holding from the first close")
    total_commissions: float = Field(default=0.0, description="Sum of all commissions paid")


class BacktestResult(BaseModel):
    """Trade log, statistics and equity curve of one backtest run."""

    config: BacktestConfig
    trades: list[Trade] = Field(default_factory=list)
    performance: BacktestPerformance
    portfolio_value: list[PortfolioSnapshot] = Field(default_factory=list)

    def trade_pairs(self) -> list[TradePair]:
        """Round trips of this run, see ``pair_trades``."""
        return pair_trades(self.trades)

    def summary(self) -> str:
        """One-line summary for logs."""
        perf = self.performance
        return (
            f"return {perf.total_return:.2%} (buy & hold {perf.buy_and_hold_return:.2%}), "
            f"{perf.total_trades} round trips, win rate {perf.win_rate:.0%}, "
            f"max drawdown {perf.max_drawdown:.2%}, final value {perf.final_value:,.2f}"
        )


class OptimizationResult(BaseModel):
    """Backtest outcome for one parameter combination."""

    config: BacktestConfig
    result: BacktestResult
