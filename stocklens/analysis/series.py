"""Numeric recurrences over price sequences.

Every function takes a sequence of floats and returns a numpy array of the
same length. Entries without enough history are NaN, and entry ``i`` only
ever depends on ``values[0..i]``.
"""

from typing import Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view


def to_array(values: Sequence[float] | np.ndarray) -> np.ndarray:
    """Convert a sequence to a 1-D float array."""
    return np.asarray(values, dtype=float).reshape(-1)


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be positive, got {period}")


def _windows(values: np.ndarray, period: int) -> np.ndarray | None:
    if len(values) < period:
        return None
    return sliding_window_view(values, period)


def sma(values: Sequence[float] | np.ndarray, period: int) -> np.ndarray:
    """Simple moving average.

    Each defined entry is the mean of its own trailing window, so there is
    no running-sum drift.

    Args:
        values: Input sequence
        period: Window length

    Returns:
        Array with NaN for ``i < period - 1``
    """
    _check_period(period)
    arr = to_array(values)
    out = np.full(len(arr), np.nan)
    windows = _windows(arr, period)
    if windows is not None:
        out[period - 1 :] = windows.mean(axis=1)
    return out


def rolling_std(values: Sequence[float] | np.ndarray, period: int) -> np.ndarray:
    """Population standard deviation of the trailing window.

    Args:
        values: Input sequence
        period: Window length

    Returns:
        Array with NaN for ``i < period - 1``
    """
    _check_period(period)
    arr = to_array(values)
    out = np.full(len(arr), np.nan)
    windows = _windows(arr, period)
    if windows is not None:
        out[period - 1 :] = windows.std(axis=1, ddof=0)
    return out


def ema(values: Sequence[float] | np.ndarray, period: int, textbook: bool = False) -> np.ndarray:
    """Exponential moving average with ``k = 2 / (period + 1)``.

    By default the average is seeded with the first value and is defined at
    every index. With ``textbook=True`` it is seeded with the SMA of the
    first ``period`` values and is NaN before that.

    Args:
        values: Input sequence
        period: Smoothing period
        textbook: Use SMA seeding with a NaN warm-up

    Returns:
        Array of the same length as ``values``
    """
    _check_period(period)
    arr = to_array(values)
    out = np.full(len(arr), np.nan)
    if len(arr) == 0:
        return out

    k = 2.0 / (period + 1)
    if textbook:
        if len(arr) < period:
            return out
        start = period - 1
        out[start] = arr[:period].mean()
    else:
        start = 0
        out[0] = arr[0]

    prev = out[start]
    for i in range(start + 1, len(arr)):
        prev = arr[i] * k + prev * (1 - k)
        out[i] = prev
    return out


def rsi(values: Sequence[float] | np.ndarray, period: int = 14) -> np.ndarray:
    """Relative Strength Index using simple averages of gains and losses.

    ``rsi[i]`` averages the ``period`` price changes ending at ``values[i]``.
    A window without losses yields 100.

    Args:
        values: Closing prices
        period: Lookback period

    Returns:
        Array with NaN for ``i < period``
    """
    _check_period(period)
    arr = to_array(values)
    out = np.full(len(arr), np.nan)
    if len(arr) <= period:
        return out

    changes = np.diff(arr)
    gains = np.where(changes > 0, changes, 0.0)
    losses = np.where(changes < 0, -changes, 0.0)
    avg_gain = sliding_window_view(gains, period).mean(axis=1)
    avg_loss = sliding_window_view(losses, period).mean(axis=1)

    with np.errstate(divide="ignore", invalid="ignore"):
        rs = avg_gain / avg_loss
        values_rsi = 100.0 - 100.0 / (1.0 + rs)
    out[period:] = np.where(avg_loss == 0, 100.0, values_rsi)
    return out


def macd(
    values: Sequence[float] | np.ndarray,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
    textbook: bool = False,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Moving Average Convergence Divergence.

    The signal line is the EMA of the defined MACD values, placed back at
    their original positions. With first-value seeding every MACD value is
    defined, so the signal line is too.

    Args:
        values: Closing prices
        fast: Fast EMA period
        slow: Slow EMA period
        signal: Signal line EMA period
        textbook: Use SMA-seeded EMAs with NaN warm-ups

    Returns:
        Tuple of (macd line, signal line, histogram)
    """
    arr = to_array(values)
    line = ema(arr, fast, textbook) - ema(arr, slow, textbook)

    signal_line = np.full(len(arr), np.nan)
    defined = ~np.isnan(line)
    if defined.any():
        signal_line[defined] = ema(line[defined], signal, textbook)

    return line, signal_line, line - signal_line


def bollinger_bands(
    values: Sequence[float] | np.ndarray, period: int = 20, std_dev: float = 2.0
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Bollinger Bands around a simple moving average.

    Args:
        values: Closing prices
        period: Window length
        std_dev: Band width in population standard deviations

    Returns:
        Tuple of (upper, middle, lower)
    """
    middle = sma(values, period)
    sigma = rolling_std(values, period)
    return middle + std_dev * sigma, middle, middle - std_dev * sigma


def last_valid(values: Sequence[float] | np.ndarray, end: int | None = None) -> float | None:
    """Last non-NaN value at or before ``end``.

    Args:
        values: Indicator array
        end: Inclusive index to scan back from (default: last index)

    Returns:
        The value, or None if every entry up to ``end`` is NaN
    """
    arr = to_array(values)
    stop = len(arr) - 1 if end is None else min(end, len(arr) - 1)
    for i in range(stop, -1, -1):
        if not np.isnan(arr[i]):
            return float(arr[i])
    return None
