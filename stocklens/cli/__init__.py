"""Command-line interface."""

from stocklens.cli import commands  # noqa: F401
from stocklens.cli.app import app, main

__all__ = ["app", "main"]
