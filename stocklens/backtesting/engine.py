"""Signal-driven backtest engine.

Replays the signal scorer day by day over a price history with a single
long-only position, stop-loss and take-profit exits and commission
accounting.
"""

import math
from itertools import product
from typing import Sequence

import numpy as np
from loguru import logger

from stocklens.analysis.models import IndicatorSeries, Signal
from stocklens.analysis.signals import score_signal
from stocklens.analysis.technical_indicators import compute_indicators, validate_price_series
from stocklens.backtesting.config import BacktestConfig
from stocklens.backtesting.models import (
    BacktestPerformance,
    BacktestResult,
    OptimizationResult,
    PortfolioSnapshot,
    Trade,
    TradeType,
    pair_trades,
)
from stocklens.config.schemas import IndicatorSettings, SignalConfig
from stocklens.data.models import PricePoint
from stocklens.utils.errors import InvalidSeriesError

BUY_SIGNALS = (Signal.STRONG_BUY, Signal.BUY)
SELL_SIGNALS = (Signal.STRONG_SELL, Signal.SELL)

STOP_LOSS_CONFIDENCE = 90
FORCED_EXIT_CONFIDENCE = 50

STOP_LOSS_GRID = [0.03, 0.05, 0.07]
TAKE_PROFIT_GRID = [0.10, 0.15, 0.20]
RISK_GRID = [0.01, 0.02, 0.03]


class BacktestEngine:
    """Walks forward over a price series and trades on composite signals.

    Only one position is held at a time: BUY is only possible while flat and
    SELL only while long, so the trade log strictly alternates.

    Example:
        engine = BacktestEngine(BacktestConfig(stop_loss_percent=0.05))
        result = engine.run(prices)
        print(result.summary())
    """

    def __init__(
        self,
        config: BacktestConfig | None = None,
        indicator_settings: IndicatorSettings | None = None,
        signal_config: SignalConfig | None = None,
    ):
        """Initialize backtest engine.

        Args:
            config: Backtest parameters. If None, uses defaults.
            indicator_settings: Indicator periods. If None, uses defaults.
            signal_config: Signal weights and thresholds. If None, uses defaults.
        """
        self.config = config or BacktestConfig()
        self.indicator_settings = indicator_settings or IndicatorSettings()
        self.signal_config = signal_config or SignalConfig()

    def run(
        self, prices: Sequence[PricePoint], indicators: IndicatorSeries | None = None
    ) -> BacktestResult:
        """Run the backtest.

        Indicators are computed once; the snapshot used on day ``i`` only
        contains values derived from prices up to ``i``.

        Args:
            prices: Price series, ascending by date
            indicators: Indicators already computed for ``prices`` with this
                engine's settings. If None, they are computed here.

        Returns:
            BacktestResult with trade log, performance and equity curve

        Raises:
            InvalidSeriesError: If the series is empty or dates are not increasing
        """
        validate_price_series(prices, allow_empty=False)
        config = self.config
        logger.debug(f"Starting backtest over {len(prices)} days with {config.model_dump()}")

        if indicators is None:
            indicators = compute_indicators(prices, self.indicator_settings)
        elif len(indicators) != len(prices):
            raise InvalidSeriesError("Indicators do not match the price series length")

        trades: list[Trade] = []
        portfolio_value: list[PortfolioSnapshot] = []

        cash = config.initial_capital
        shares = 0
        entry_price = 0.0
        total_commissions = 0.0

        initial_price = prices[0].close
        buy_and_hold_shares = config.initial_capital / initial_price

        def sell(point: PricePoint, signal: Signal, confidence: int) -> None:
            nonlocal cash, shares, entry_price, total_commissions
            proceeds = shares * point.close
            commission = proceeds * config.commission_rate
            cash += proceeds - commission
            total_commissions += commission
            trades.append(
                Trade(
                    date=point.date,
                    type=TradeType.SELL,
                    price=point.close,
                    signal=signal,
                    confidence=confidence,
                    shares=shares,
                    value=proceeds,
                    commission=commission,
                )
            )
            shares = 0
            entry_price = 0.0

        for i in range(config.warmup_days, len(prices)):
            point = prices[i]
            price = point.close
            analysis = score_signal(price, indicators.snapshot_at(i), self.signal_config)

            portfolio_value.append(
                PortfolioSnapshot(
                    date=point.date,
                    value=cash + shares * price,
                    buy_and_hold_value=buy_and_hold_shares * price,
                )
            )

            if shares > 0:
                change = (price - entry_price) / entry_price
                if change <= -config.stop_loss_percent:
                    sell(point, Signal.SELL, STOP_LOSS_CONFIDENCE)
                    continue
                if change >= config.take_profit_percent:
                    sell(point, Signal.SELL, analysis.confidence)
                    continue

            if analysis.confidence < config.min_confidence:
                continue

            if analysis.signal in BUY_SIGNALS and shares == 0:
                investment = cash * config.risk_per_trade
                commission = investment * config.commission_rate
                to_buy = math.floor((investment - commission) / price)
                if to_buy > 0 and cash >= investment:
                    cost = to_buy * price + commission
                    cash -= cost
                    shares = to_buy
                    entry_price = price
                    total_commissions += commission
                    trades.append(
                        Trade(
                            date=point.date,
                            type=TradeType.BUY,
                            price=price,
                            signal=analysis.signal,
                            confidence=analysis.confidence,
                            shares=to_buy,
                            value=cost,
                            commission=commission,
                        )
                    )
            elif analysis.signal in SELL_SIGNALS and shares > 0:
                sell(point, analysis.signal, analysis.confidence)

        if shares > 0:
            sell(prices[-1], Signal.HOLD, FORCED_EXIT_CONFIDENCE)

        result = BacktestResult(
            config=config,
            trades=trades,
            performance=self._calculate_performance(
                trades, portfolio_value, prices, cash, total_commissions
            ),
            portfolio_value=portfolio_value,
        )

        logger.info(f"Backtest finished: {result.summary()}")
        return result

    def _calculate_performance(
        self,
        trades: list[Trade],
        portfolio_value: list[PortfolioSnapshot],
        prices: Sequence[PricePoint],
        final_value: float,
        total_commissions: float,
    ) -> BacktestPerformance:
        """Compute aggregate statistics from the trade log and equity curve."""
        initial_capital = self.config.initial_capital
        total_return = (final_value - initial_capital) / initial_capital
        annualized_return = (1 + total_return) ** (252 / len(prices)) - 1

        pairs = pair_trades(trades)
        wins = [p.profit for p in pairs if p.profit > 0]
        losses = [p.profit for p in pairs if p.profit <= 0]

        max_drawdown = 0.0
        peak = initial_capital
        for snapshot in portfolio_value:
            peak = max(peak, snapshot.value)
            max_drawdown = max(max_drawdown, (peak - snapshot.value) / peak)

        values = np.array([s.value for s in portfolio_value])
        sharpe_ratio = 0.0
        if len(values) > 1:
            returns = np.diff(values) / values[:-1]
            std = returns.std(ddof=0)
            if std > 0:
                sharpe_ratio = float(returns.mean() / std)

        initial_price = prices[0].close
        return BacktestPerformance(
            total_return=total_return,
            annualized_return=annualized_return,
            win_rate=len(wins) / len(pairs) if pairs else 0.0,
            total_trades=len(pairs),
            winning_trades=len(wins),
            losing_trades=len(losses),
            average_win=sum(wins) / len(wins) if wins else 0.0,
            average_loss=abs(sum(losses) / len(losses)) if losses else 0.0,
            max_drawdown=max_drawdown,
            sharpe_ratio=sharpe_ratio,
            final_value=final_value,
            buy_and_hold_return=(prices[-1].close - initial_price) / initial_price,
            total_commissions=total_commissions,
        )


def run_backtest(
    prices: Sequence[PricePoint],
    config: BacktestConfig | None = None,
    indicator_settings: IndicatorSettings | None = None,
    signal_config: SignalConfig | None = None,
) -> BacktestResult:
    """Convenience function to run a single backtest.

    Args:
        prices: Price series, ascending by date
        config: Backtest parameters. If None, uses defaults.
        indicator_settings: Indicator periods. If None, uses defaults.
        signal_config: Signal weights and thresholds. If None, uses defaults.

    Returns:
        BacktestResult
    """
    return BacktestEngine(config, indicator_settings, signal_config).run(prices)


def optimize_parameters(
    prices: Sequence[PricePoint], base_config: BacktestConfig | None = None
) -> list[OptimizationResult]:
    """Backtest a grid of stop-loss, take-profit and risk settings.

    Args:
        prices: Price series, ascending by date
        base_config: Settings shared by every run. If None, uses defaults.

    Returns:
        One result per combination, best total return first
    """
    base_config = base_config or BacktestConfig()
    validate_price_series(prices, allow_empty=False)
    indicators = compute_indicators(prices)
    results = []
    for stop_loss, take_profit, risk in product(STOP_LOSS_GRID, TAKE_PROFIT_GRID, RISK_GRID):
        config = base_config.model_copy(
            update={
                "stop_loss_percent": stop_loss,
                "take_profit_percent": take_profit,
                "risk_per_trade": risk,
            }
        )
        result = BacktestEngine(config).run(prices, indicators)
        results.append(OptimizationResult(config=config, result=result))

    results.sort(key=lambda r: r.result.performance.total_return, reverse=True)
    logger.info(
        f"Optimized {len(results)} parameter sets, best return "
        f"{results[0].result.performance.total_return:.2%}"
    )
    return results
