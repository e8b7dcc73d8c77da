"""Backtesting configuration schema and validation."""

from pydantic import BaseModel, Field


class BacktestConfig(BaseModel):
    """Configuration of a signal-driven backtest.

    Defines capital, costs, position sizing and exit rules for replaying the
    signal scorer over a price history.
    """

    # Capital and costs
    initial_capital: float = Field(
        default=10000.0,
        gt=0,
        description="Starting cash",
    )
    commission_rate: float = Field(
        default=0.001,
        ge=0,
        lt=1,
        description="Commission as a fraction of traded value (0.001 = 0.1%)",
    )

    # Position sizing
    risk_per_trade: float = Field(
        default=0.1,
        gt=0,
        le=1,
        description="Fraction of current cash committed to each entry",
    )

    # Exit rules
    stop_loss_percent: float = Field(
        default=0.08,
        gt=0,
        lt=1,
        description="Exit when price falls this fraction below the entry",
    )
    take_profit_percent: float = Field(
        default=0.12,
        gt=0,
        description="Exit when price rises this fraction above the entry",
    )

    # Signal gating
    min_confidence: int = Field(
        default=60,
        ge=0,
        le=100,
        description="Minimum signal confidence required to trade",
    )
    warmup_days: int = Field(
        default=15,
        ge=0,
        description="Number of leading days skipped while indicators warm up",
    )
