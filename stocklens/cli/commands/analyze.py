"""Signal and pattern commands for a single price series."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from stocklens.analysis import compute_indicators, find_similar_patterns, latest_indicators, score_signal
from stocklens.cli.app import app
from stocklens.cli.loading import check_price_source, load_price_series, source_label
from stocklens.config import load_config
from stocklens.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

INDICATOR_LABELS = [
    ("rsi", "RSI"),
    ("macd", "MACD"),
    ("macd_signal", "MACD signal"),
    ("macd_histogram", "MACD histogram"),
    ("sma5", "SMA 5"),
    ("sma20", "SMA 20"),
    ("sma50", "SMA 50"),
    ("ema12", "EMA 12"),
    ("ema26", "EMA 26"),
    ("bollinger_upper", "Bollinger upper"),
    ("bollinger_middle", "Bollinger middle"),
    ("bollinger_lower", "Bollinger lower"),
]


def _format(value: float | None) -> str:
    return "n/a" if value is None else f"{value:.2f}"


@app.command()
def signal(
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
        help="History period for Yahoo Finance (e.g. 6mo, 1y)",
    ),
    config: Path = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
    ),
) -> None:
    """Show the latest indicators and the composite trading signal.

    Examples:
        signal --ticker AAPL --period 6mo
        signal --csv data/aapl.csv
    """
    check_price_source(csv, ticker)
    try:
        config_obj = load_config(config)
        setup_logging(config_obj.logging)

        prices = load_price_series(config_obj, csv, ticker, period)
        if not prices:
            typer.echo("❌ Error: No price data", err=True)
            raise typer.Exit(code=1)

        indicators = compute_indicators(prices, config_obj.indicators)
        latest = latest_indicators(indicators)
        analysis = score_signal(prices[-1].close, latest, config_obj.signals)

        console = Console()
        table = Table(title=f"Indicators for {source_label(csv, ticker)}")
        table.add_column("Indicator", style="cyan")
        table.add_column("Value", style="green", justify="right")
        table.add_row("Close", _format(prices[-1].close))
        for field, label in INDICATOR_LABELS:
            table.add_row(label, _format(getattr(latest, field)))
        console.print(table)

        typer.echo(f"\nSignal: {analysis.signal}")
        typer.echo(f"Score: {analysis.overall_score:+.2f}")
        typer.echo(f"Confidence: {analysis.confidence}%")
        typer.echo(f"Risk level: {analysis.risk_level}")
        for reason in analysis.reasons:
            typer.echo(f"  • {reason}")
        typer.echo(f"\n💡 {analysis.recommendation}")

        logger.info(f"Signal command completed: {analysis.signal}")

    except typer.Exit:
        raise
    except Exception as e:
        logger.opt(exception=True).error("Error in signal command: {}", e)
        typer.echo(f"❌ Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def patterns(
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
    min_similarity: float = typer.Option(
        None,
        "--min-similarity",
        "-s",
        help="Initial similarity threshold (0-100)",
        min=0,
        max=100,
    ),
    lookback_days: int = typer.Option(
        None,
        "--lookback-days",
        help="Only match against the most recent N days",
        min=1,
    ),
    config: Path = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
    ),
) -> None:
    """Find historical dates with indicators similar to today's.

    Examples:
        patterns --ticker MSFT --period 5y
        patterns --csv data/msft.csv --min-similarity 70 --lookback-days 500
    """
    check_price_source(csv, ticker)
    try:
        config_obj = load_config(config)
        setup_logging(config_obj.logging)

        pattern_config = config_obj.patterns
        if lookback_days is not None:
            pattern_config = pattern_config.model_copy(update={"lookback_days": lookback_days})

        prices = load_price_series(config_obj, csv, ticker, period)
        indicators = compute_indicators(prices, config_obj.indicators)
        result = find_similar_patterns(prices, indicators, min_similarity, pattern_config)

        if result.similar_patterns:
            console = Console()
            horizons = sorted(pattern_config.forward_horizons)
            table = Table(title=f"Similar patterns for {source_label(csv, ticker)}")
            table.add_column("Date", style="cyan")
            table.add_column("Similarity", justify="right")
            for days in horizons:
                table.add_column(f"{days}d", justify="right")

            for pattern in result.similar_patterns:
                changes = {p.days: p.price_change_percent for p in pattern.future_performance}
                table.add_row(
                    pattern.date.strftime("%Y-%m-%d"),
                    f"{pattern.similarity:.1f}",
                    *(f"{changes[d]:+.2f}%" if d in changes else "-" for d in horizons),
                )
            console.print(table)

        typer.echo(f"\nMatches: {result.total_matches} (threshold {result.used_similarity:.0f})")
        if result.threshold_relaxed:
            typer.echo(
                f"⚠️  Threshold relaxed from {result.requested_similarity:.0f} "
                f"to {result.used_similarity:.0f}"
            )
        typer.echo(f"\n{result.summary}")

        logger.info(f"Pattern command completed with {result.total_matches} matches")

    except typer.Exit:
        raise
    except Exception as e:
        logger.opt(exception=True).error("Error in patterns command: {}", e)
        typer.echo(f"❌ Error: {e}", err=True)
        raise typer.Exit(code=1) from e
