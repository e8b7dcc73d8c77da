"""Sentiment and crash risk command."""

import json
from datetime import datetime, timezone
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from stocklens.analysis import compute_indicators, latest_indicators, score_signal
from stocklens.cli.app import app
from stocklens.cli.loading import load_price_series
from stocklens.config import load_config
from stocklens.data.models import Tweet
from stocklens.sentiment import (
    aggregate_sentiment,
    integrate_with_technical_analysis,
    predict_crash,
    technical_score_from_signal,
)
from stocklens.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def _load_tweets(path: Path) -> list[Tweet]:
    """Read posts from a JSON list of tweet records or a text file, one post per line.

    Plain-text posts get sequential ids and the current time as timestamp.
    """
    if path.suffix.lower() == ".json":
        with open(path, "r") as f:
            return [Tweet(**record) for record in json.load(f)]

    now = datetime.now(timezone.utc)
    with open(path, "r", encoding="utf-8") as f:
        lines = [line.strip() for line in f]
    return [
        Tweet(id=str(i), text=line, created_at=now)
        for i, line in enumerate(filter(None, lines), start=1)
    ]


@app.command()
def sentiment(
    file: Path = typer.Argument(  # noqa: B008
        ...,
        help="Posts as a JSON list of tweet records or a text file with one post per line",
        exists=True,
    ),
    ticker: str = typer.Option(
        None,
        "--ticker",
        "-t",
        help="Ticker whose technical signal is combined with the crash risk",
    ),
    csv: Path = typer.Option(  # noqa: B008
        None,
        "--csv",
        help="Price CSV whose technical signal is combined with the crash risk",
        exists=True,
    ),
    config: Path = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
    ),
) -> None:
    """Score the negativity of social posts and estimate crash risk.

    Examples:
        sentiment data/tweets.txt
        sentiment data/tweets.json --csv data/aapl.csv
    """
    try:
        config_obj = load_config(config)
        setup_logging(config_obj.logging)

        tweets = _load_tweets(file)
        prediction = predict_crash(tweets, config=config_obj.sentiment)
        aggregation = aggregate_sentiment(tweets)

        console = Console()
        table = Table(title="Sentiment", show_header=False)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Posts", str(len(tweets)))
        table.add_row("Average negative score", str(prediction.sentiment.average_negative_score))
        table.add_row("Overall sentiment", str(prediction.sentiment.overall_sentiment))
        table.add_row(
            "Positive / neutral / negative",
            f"{aggregation.positive_count} / {aggregation.neutral_count} / "
            f"{aggregation.negative_count}",
        )
        table.add_row("Sentiment score", str(aggregation.sentiment_score))
        table.add_row(
            "Top negative words",
            ", ".join(f"{w.word} ({w.count})" for w in prediction.sentiment.most_common_negative_words),
        )
        console.print(table)

        typer.echo(f"\nCrash risk: {prediction.risk_score} ({prediction.risk_level})")
        typer.echo(prediction.prediction)
        for warning in prediction.warnings:
            typer.echo(f"  ⚠️  {warning}")
        typer.echo(f"\n💡 {prediction.recommendation}")

        if csv is not None or ticker:
            prices = load_price_series(config_obj, csv, ticker, None)
            indicators = compute_indicators(prices, config_obj.indicators)
            analysis = score_signal(
                prices[-1].close, latest_indicators(indicators), config_obj.signals
            )
            integrated = integrate_with_technical_analysis(
                prediction, analysis.signal, technical_score_from_signal(analysis)
            )
            typer.echo(f"\nCombined signal: {integrated.final_signal} ({integrated.final_score})")
            typer.echo(integrated.reasoning)

        logger.info(f"Sentiment command completed: risk {prediction.risk_score}")

    except typer.Exit:
        raise
    except Exception as e:
        logger.opt(exception=True).error("Error in sentiment command: {}", e)
        typer.echo(f"❌ Error: {e}", err=True)
        raise typer.Exit(code=1) from e
