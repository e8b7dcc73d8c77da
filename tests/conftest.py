"""Shared test configuration and fixtures."""

from datetime import datetime, timedelta

import numpy as np
import pytest

from stocklens.config import reset_config
from stocklens.data.models import PricePoint


def build_prices(closes, start: datetime = datetime(2024, 1, 1)) -> list[PricePoint]:
    """Build a daily price series from closes with a 1% high/low range."""
    return [
        PricePoint(
            date=start + timedelta(days=i),
            open=float(close),
            high=float(close) * 1.01,
            low=float(close) * 0.99,
            close=float(close),
            volume=1_000_000,
        )
        for i, close in enumerate(closes)
    ]


@pytest.fixture
def price_factory():
    """Factory turning a list of closes into price points."""
    return build_prices


@pytest.fixture
def sample_prices():
    """250 days of a seeded random walk around 100."""
    np.random.seed(42)
    returns = np.random.normal(0.001, 0.02, 250)
    closes = 100.0 * np.cumprod(1 + returns)
    return build_prices(closes)


@pytest.fixture
def rising_prices():
    """Strictly rising closes 100, 101, ..., 199."""
    return build_prices([100.0 + i for i in range(100)])


@pytest.fixture
def flat_prices():
    """60 days at a constant close of 100."""
    return build_prices([100.0] * 60)


@pytest.fixture(autouse=True)
def _reset_cached_config():
    """Drop the process-wide config between tests."""
    reset_config()
    yield
    reset_config()
