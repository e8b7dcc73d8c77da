"""Backtesting command for validating the composite signal on history."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from stocklens.backtesting import BacktestConfig, BacktestEngine, optimize_parameters
from stocklens.cli.app import app
from stocklens.cli.loading import check_price_source, load_price_series, source_label
from stocklens.config import load_config
from stocklens.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

TOP_RESULTS = 5


@app.command()
def backtest(
    ticker: str = typer.Option(
        None,
        "--ticker",
        "-t",
        help="Ticker symbol to fetch from Yahoo Finance",
    ),
    csv: Path = typer.Option(  # noqa: B008
        None,
        "--csv",
        help="CSV file with date and OHLCV columns",
        exists=True,
    ),
    period: str = typer.Option(
        None,
        "--period",
        "-p",
        help="History period for Yahoo Finance (e.g. 2y, 5y)",
    ),
    initial_capital: float = typer.Option(
        None,
        "--capital",
        help="Starting cash",
    ),
    stop_loss: float = typer.Option(
        None,
        "--stop-loss",
        help="Stop-loss as a fraction of the entry price (0.05 = 5%)",
    ),
    take_profit: float = typer.Option(
        None,
        "--take-profit",
        help="Take-profit as a fraction of the entry price (0.10 = 10%)",
    ),
    risk_per_trade: float = typer.Option(
        None,
        "--risk",
        help="Fraction of cash committed per entry",
    ),
    min_confidence: int = typer.Option(
        None,
        "--min-confidence",
        help="Minimum signal confidence required to trade (0-100)",
    ),
    optimize: bool = typer.Option(
        False,
        "--optimize",
        help="Grid search stop-loss, take-profit and risk instead of a single run",
    ),
    config: Path = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
    ),
) -> None:
    """Replay the composite signal over a price history.

    Examples:
        backtest --ticker AAPL --period 2y
        backtest --csv data/aapl.csv --stop-loss 0.05 --take-profit 0.15
        backtest --csv data/aapl.csv --optimize
    """
    check_price_source(csv, ticker)
    try:
        config_obj = load_config(config)
        setup_logging(config_obj.logging)
        logger.info("Starting backtest command")

        overrides = {
            "initial_capital": initial_capital,
            "stop_loss_percent": stop_loss,
            "take_profit_percent": take_profit,
            "risk_per_trade": risk_per_trade,
            "min_confidence": min_confidence,
        }
        backtest_config = BacktestConfig(
            **{
                **config_obj.backtesting,
                **{key: value for key, value in overrides.items() if value is not None},
            }
        )

        prices = load_price_series(config_obj, csv, ticker, period)
        label = source_label(csv, ticker)
        console = Console()

        if optimize:
            results = optimize_parameters(prices, backtest_config)
            table = Table(title=f"Best parameter sets for {label}")
            table.add_column("Stop-loss", justify="right")
            table.add_column("Take-profit", justify="right")
            table.add_column("Risk", justify="right")
            table.add_column("Return", style="green", justify="right")
            table.add_column("Trades", justify="right")
            table.add_column("Max drawdown", justify="right")
            for item in results[:TOP_RESULTS]:
                perf = item.result.performance
                table.add_row(
                    f"{item.config.stop_loss_percent:.0%}",
                    f"{item.config.take_profit_percent:.0%}",
                    f"{item.config.risk_per_trade:.0%}",
                    f"{perf.total_return:+.2%}",
                    str(perf.total_trades),
                    f"{perf.max_drawdown:.2%}",
                )
            console.print(table)
            typer.echo(f"\n✅ Evaluated {len(results)} parameter sets")
            return

        engine = BacktestEngine(backtest_config, config_obj.indicators, config_obj.signals)
        result = engine.run(prices)
        perf = result.performance

        summary_table = Table(title=f"Backtest for {label}", show_header=False)
        summary_table.add_column("Metric", style="cyan")
        summary_table.add_column("Value", style="green")
        summary_table.add_row("Initial capital", f"{backtest_config.initial_capital:,.2f}")
        summary_table.add_row("Final value", f"{perf.final_value:,.2f}")
        summary_table.add_row("Total return", f"{perf.total_return:+.2%}")
        summary_table.add_row("Annualized return", f"{perf.annualized_return:+.2%}")
        summary_table.add_row("Buy & hold return", f"{perf.buy_and_hold_return:+.2%}")
        summary_table.add_row("Round trips", str(perf.total_trades))
        summary_table.add_row("Win rate", f"{perf.win_rate:.0%}")
        summary_table.add_row("Max drawdown", f"{perf.max_drawdown:.2%}")
        summary_table.add_row("Sharpe ratio", f"{perf.sharpe_ratio:.3f}")
        summary_table.add_row("Commissions", f"{perf.total_commissions:,.2f}")
        console.print(summary_table)

        typer.echo(f"\nTotal trades: {len(result.trades)}")
        typer.echo(f"Total return: {perf.total_return:+.2%}")
        logger.info("Backtest command completed successfully")

    except typer.Exit:
        raise
    except Exception as e:
        logger.opt(exception=True).error("Error in backtest command: {}", e)
        typer.echo(f"❌ Error: {e}", err=True)
        raise typer.Exit(code=1) from e
