"""Conversion between pandas frames, CSV files and price series."""

from pathlib import Path

import pandas as pd

from stocklens.data.models import PricePoint
from stocklens.utils.errors import InvalidSeriesError
from stocklens.utils.logging import get_logger

logger = get_logger(__name__)

PRICE_COLUMNS = ["open", "high", "low", "close", "volume"]
COLUMN_ALIASES = {
    "open_price": "open",
    "high_price": "high",
    "low_price": "low",
    "close_price": "close",
    "adj close": "adj_close",
    "timestamp": "date",
    "datetime": "date",
}


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Lower-case column names and map common aliases.

    Args:
        df: Price DataFrame

    Returns:
        Copy of the frame with canonical column names
    """
    renamed = {col: str(col).strip().lower() for col in df.columns}
    df = df.rename(columns=renamed)
    return df.rename(columns={k: v for k, v in COLUMN_ALIASES.items() if k in df.columns})


def frame_to_prices(df: pd.DataFrame) -> list[PricePoint]:
    """Convert an OHLCV DataFrame into a price series.

    The date is taken from a ``date`` column or, failing that, from the index.
    Missing open/high/low fall back to close, missing volume to 0. Rows
    without a close are dropped.

    Args:
        df: DataFrame with at least a close column

    Returns:
        Price points sorted by date

    Raises:
        InvalidSeriesError: If there is no close column, a close is not positive
            or dates repeat
    """
    df = normalize_columns(df)
    if "close" not in df.columns:
        raise InvalidSeriesError(f"Price data needs a close column, got {list(df.columns)}")

    if "date" not in df.columns:
        df = df.reset_index().rename(columns={"index": "date", "Date": "date"})
        df = normalize_columns(df)

    df = df.dropna(subset=["close"]).copy()
    if (df["close"] <= 0).any():
        raise InvalidSeriesError("Price data contains non-positive closes")
    df["date"] = pd.to_datetime(df["date"], utc=True).dt.tz_localize(None)
    for col in ["open", "high", "low"]:
        if col not in df.columns:
            df[col] = df["close"]
        df[col] = df[col].fillna(df["close"])
    if "volume" not in df.columns:
        df["volume"] = 0
    df["volume"] = df["volume"].fillna(0)

    df = df.sort_values("date")
    if df["date"].duplicated().any():
        raise InvalidSeriesError("Price data contains duplicate dates")

    prices = [
        PricePoint(
            date=row.date.to_pydatetime(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=int(row.volume),
        )
        for row in df[["date", *PRICE_COLUMNS]].itertuples(index=False)
    ]
    logger.debug(f"Converted {len(prices)} rows to price points")
    return prices


def prices_to_frame(prices: list[PricePoint]) -> pd.DataFrame:
    """Convert a price series into a DataFrame indexed by date.

    Args:
        prices: Price points

    Returns:
        DataFrame with open/high/low/close/volume columns
    """
    if not prices:
        return pd.DataFrame(columns=PRICE_COLUMNS, index=pd.DatetimeIndex([], name="date"))
    df = pd.DataFrame([p.model_dump() for p in prices])
    return df.set_index("date")[PRICE_COLUMNS]


def load_prices_csv(path: str | Path) -> list[PricePoint]:
    """Read a price series from a CSV file.

    Args:
        path: CSV file with a date column and OHLCV columns

    Returns:
        Price points sorted by date

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidSeriesError: If the file lacks usable price data
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Price file not found: {path}")

    df = pd.read_csv(path)
    logger.debug(f"Read {len(df)} rows from {path}")
    return frame_to_prices(df)


def save_prices_csv(prices: list[PricePoint], path: str | Path) -> Path:
    """Write a price series to CSV.

    Args:
        prices: Price points
        path: Target file

    Returns:
        Path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    prices_to_frame(prices).to_csv(path, index_label="date")
    logger.debug(f"Wrote {len(prices)} rows to {path}")
    return path
