"""CLI command modules. Importing them registers the commands on ``app``."""

from stocklens.cli.commands import analyze, backtest, screen, sentiment

__all__ = ["analyze", "backtest", "screen", "sentiment"]
