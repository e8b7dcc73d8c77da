"""Technical indicator engine.

Builds the aligned RSI, MACD, SMA, EMA and Bollinger arrays for a price
series and extracts the latest defined values for the scorers.
"""

from typing import Sequence

import numpy as np
import pandas as pd

from stocklens.analysis import series as sm
from stocklens.analysis.models import (
    BollingerSeries,
    EMASeries,
    IndicatorSeries,
    LatestIndicators,
    MACDSeries,
    SMASeries,
)
from stocklens.config.schemas import IndicatorSettings
from stocklens.data.loader import normalize_columns
from stocklens.data.models import PricePoint
from stocklens.utils.errors import InvalidSeriesError
from stocklens.utils.logging import get_logger

logger = get_logger(__name__)

PriceInput = Sequence[PricePoint] | pd.DataFrame


def extract_closes(prices: PriceInput) -> np.ndarray:
    """Get closing prices from price points or a DataFrame.

    Args:
        prices: Price points, or a DataFrame with a ``close``/``close_price``
            column (case-insensitive)

    Returns:
        Float array of closes

    Raises:
        InvalidSeriesError: If a DataFrame has no close column
    """
    if isinstance(prices, pd.DataFrame):
        df = normalize_columns(prices)
        if "close" not in df.columns:
            raise InvalidSeriesError(f"No close column in {list(prices.columns)}")
        return df["close"].to_numpy(dtype=float)
    return np.array([p.close for p in prices], dtype=float)


def validate_price_series(prices: Sequence[PricePoint], allow_empty: bool = True) -> None:
    """Check that a price series is usable.

    Args:
        prices: Price points
        allow_empty: Whether an empty series is acceptable

    Raises:
        InvalidSeriesError: If the series is empty (when not allowed) or its
            dates are not strictly increasing
    """
    if not prices:
        if allow_empty:
            return
        raise InvalidSeriesError("Price series is empty")

    for prev, current in zip(prices, prices[1:]):
        if current.date <= prev.date:
            raise InvalidSeriesError(
                f"Price dates must be strictly increasing: {current.date} follows {prev.date}"
            )


def _as_list(values: np.ndarray) -> list[float]:
    return [float(v) for v in values]


def compute_indicators(
    prices: PriceInput, settings: IndicatorSettings | None = None
) -> IndicatorSeries:
    """Compute all indicator arrays for a price series.

    Short series never raise: indicators without enough history are NaN.

    Args:
        prices: Price points or a DataFrame with closes
        settings: Indicator periods. If None, uses defaults.

    Returns:
        IndicatorSeries aligned with the input
    """
    settings = settings or IndicatorSettings()
    closes = extract_closes(prices)
    textbook = settings.textbook_ema

    line, signal, histogram = sm.macd(
        closes,
        fast=settings.macd_fast,
        slow=settings.macd_slow,
        signal=settings.macd_signal,
        textbook=textbook,
    )
    upper, middle, lower = sm.bollinger_bands(
        closes, period=settings.bollinger_period, std_dev=settings.bollinger_std_dev
    )

    indicators = IndicatorSeries(
        rsi=_as_list(sm.rsi(closes, settings.rsi_period)),
        macd=MACDSeries(macd=_as_list(line), signal=_as_list(signal), histogram=_as_list(histogram)),
        sma=SMASeries(
            sma5=_as_list(sm.sma(closes, 5)),
            sma20=_as_list(sm.sma(closes, 20)),
            sma50=_as_list(sm.sma(closes, 50)),
        ),
        ema=EMASeries(
            ema12=_as_list(sm.ema(closes, 12, textbook)),
            ema26=_as_list(sm.ema(closes, 26, textbook)),
        ),
        bollinger=BollingerSeries(upper=_as_list(upper), middle=_as_list(middle), lower=_as_list(lower)),
    )
    logger.debug(f"Computed indicators for {len(closes)} prices")
    return indicators


def latest_indicators(indicators: IndicatorSeries) -> LatestIndicators:
    """Latest defined value of every indicator.

    Args:
        indicators: Indicator arrays

    Returns:
        LatestIndicators with None for indicators that are never defined
    """
    if len(indicators) == 0:
        return LatestIndicators()
    return indicators.latest()
