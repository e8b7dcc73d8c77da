"""Fundamental screening command."""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from stocklens.cli.app import app
from stocklens.config import load_config
from stocklens.screening import PRESET_FILTERS, ScreenerFilters, StockFundamentals, screen_stocks
from stocklens.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def _load_fundamentals(path: Path) -> list[StockFundamentals]:
    with open(path, "r") as f:
        records = json.load(f)
    if isinstance(records, dict):
        records = records.get("stocks", [])
    return [StockFundamentals(**record) for record in records]


@app.command()
def screen(
    file: Path = typer.Argument(  # noqa: B008
        ...,
        help="JSON file with a list of fundamentals records",
        exists=True,
    ),
    preset: str = typer.Option(
        None,
        "--preset",
        help=f"Filter preset: {', '.join(PRESET_FILTERS)}",
    ),
    sector: list[str] = typer.Option(  # noqa: B008
        None,
        "--sector",
        help="Restrict to a sector (repeatable)",
    ),
    per_max: float = typer.Option(None, "--per-max", help="Maximum PER"),
    pbr_max: float = typer.Option(None, "--pbr-max", help="Maximum PBR"),
    roe_min: float = typer.Option(None, "--roe-min", help="Minimum ROE in %"),
    dividend_yield_min: float = typer.Option(
        None, "--dividend-yield-min", help="Minimum dividend yield in %"
    ),
    market_cap_min: float = typer.Option(None, "--market-cap-min", help="Minimum market cap"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of results to show", min=1),
    config: Path = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
    ),
) -> None:
    """Filter and rank stocks by fundamental score.

    Explicit filter options override the preset's values.

    Examples:
        screen data/fundamentals.json --preset value
        screen data/fundamentals.json --roe-min 15 --sector Technology
    """
    if preset and preset not in PRESET_FILTERS:
        typer.echo(
            f"❌ Invalid preset: {preset}. Must be one of {', '.join(PRESET_FILTERS)}",
            err=True,
        )
        raise typer.Exit(code=1)

    try:
        config_obj = load_config(config)
        setup_logging(config_obj.logging)

        filters = PRESET_FILTERS[preset].filters if preset else ScreenerFilters()
        overrides = {
            "per_max": per_max,
            "pbr_max": pbr_max,
            "roe_min": roe_min,
            "dividend_yield_min": dividend_yield_min,
            "market_cap_min": market_cap_min,
            "sectors": sector or None,
        }
        filters = filters.model_copy(
            update={key: value for key, value in overrides.items() if value is not None}
        )

        stocks = _load_fundamentals(file)
        results = screen_stocks(stocks, filters)

        if not results:
            typer.echo(f"No stocks matched out of {len(stocks)}")
            return

        console = Console()
        table = Table(title=f"Screening results ({len(results)} of {len(stocks)})")
        table.add_column("Symbol", style="cyan")
        table.add_column("Name")
        table.add_column("Score", style="green", justify="right")
        table.add_column("Rating")
        table.add_column("G/V/F/D/T", justify="right")
        table.add_column("Strengths")
        for item in results[:limit]:
            s = item.score
            table.add_row(
                item.stock.symbol,
                item.stock.name,
                str(s.total),
                item.rating.rating,
                f"{s.growth}/{s.value}/{s.financial}/{s.dividend}/{s.technical}",
                ", ".join(item.strengths),
            )
        console.print(table)

        typer.echo(f"\nMatched: {', '.join(r.stock.symbol for r in results[:limit])}")
        logger.info(f"Screen command matched {len(results)} of {len(stocks)} stocks")

    except typer.Exit:
        raise
    except Exception as e:
        logger.opt(exception=True).error("Error in screen command: {}", e)
        typer.echo(f"❌ Error: {e}", err=True)
        raise typer.Exit(code=1) from e
