"""Price series input shared by the CLI commands."""

from pathlib import Path

import typer

from stocklens.config.schemas import Config
from stocklens.data.loader import load_prices_csv
from stocklens.data.models import PricePoint
from stocklens.data.yahoo_finance import YahooFinanceProvider
from stocklens.utils.logging import get_logger
from stocklens.utils.resilience import RateLimiter

logger = get_logger(__name__)


def check_price_source(csv: Path | None, ticker: str | None) -> None:
    """Exit unless exactly one of ``--csv`` and ``--ticker`` is given."""
    if csv is None and not ticker:
        typer.echo("❌ Error: Either --csv or --ticker must be provided", err=True)
        raise typer.Exit(code=1)
    if csv is not None and ticker:
        typer.echo("❌ Error: Cannot specify both --csv and --ticker", err=True)
        raise typer.Exit(code=1)


def load_price_series(
    config: Config, csv: Path | None, ticker: str | None, period: str | None
) -> list[PricePoint]:
    """Read prices from a CSV file or fetch them from Yahoo Finance.

    Args:
        config: Loaded configuration
        csv: CSV file with date and OHLCV columns
        ticker: Ticker symbol to fetch when no CSV is given
        period: yfinance period, defaults to ``config.data.default_period``

    Returns:
        Price points sorted by date
    """
    if csv is not None:
        logger.debug(f"Loading prices from {csv}")
        return load_prices_csv(csv)

    limiter = RateLimiter(rate=config.data.rate_limit_per_minute, period=60.0)
    provider = YahooFinanceProvider(rate_limiter=limiter)
    return provider.get_price_series(ticker.upper(), period=period or config.data.default_period)


def source_label(csv: Path | None, ticker: str | None) -> str:
    return ticker.upper() if ticker else csv.stem
