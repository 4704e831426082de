"""Rolling window statistics: mean, population std, SMA and EMA"""

import math
from typing import Optional, Sequence

from ..errors import WindowParameterError

MIN_WINDOW = 2


def _check_window(window: int) -> None:
    if not isinstance(window, int) or isinstance(window, bool) or window < MIN_WINDOW:
        raise WindowParameterError(
            f"Window must be an integer >= {MIN_WINDOW}, got {window!r}",
            parameter="window",
            value=window
        )


def _is_finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def _window_slice(values: Sequence[Optional[float]], window: int, i: int) -> Optional[list[float]]:
    """Trailing window ending at i, or None if short or holding undefined values."""
    _check_window(window)
    if i < 0 or i >= len(values):
        raise IndexError(f"Index {i} outside sequence of length {len(values)}")
    if i < window - 1:
        return None

    window_values = values[i - window + 1:i + 1]
    if not all(_is_finite(v) for v in window_values):
        return None
    return list(window_values)


def rolling_mean(values: Sequence[Optional[float]], window: int, i: int) -> Optional[float]:
    """
    Population mean of the trailing window ending at index i

    Args:
        values: Input sequence; None/NaN/inf entries are undefined
        window: Window size (>= 2)
        i: Index the window ends at (inclusive)

    Returns:
        Mean value or None if i < window - 1 or the window holds undefined values
    """
    window_values = _window_slice(values, window, i)
    if window_values is None:
        return None
    return sum(window_values) / window


def rolling_std(values: Sequence[Optional[float]], window: int, i: int) -> Optional[float]:
    """
    Population standard deviation (divide by window) of the same trailing window

    Returns:
        Standard deviation or None under the same conditions as rolling_mean
    """
    window_values = _window_slice(values, window, i)
    if window_values is None:
        return None
    if max(window_values) == min(window_values):
        return 0.0
    mean = sum(window_values) / window
    variance = sum((v - mean) ** 2 for v in window_values) / window
    return math.sqrt(variance)


def sma(values: Sequence[Optional[float]], window: int) -> list[Optional[float]]:
    """Simple moving average, one output per input, None during warm-up"""
    _check_window(window)
    return [rolling_mean(values, window, i) for i in range(len(values))]


def ema(values: Sequence[Optional[float]], window: int,
        smoothing: Optional[float] = None) -> list[Optional[float]]:
    """
    Exponential moving average

    Seeds from the first finite value and recurs forward with no warm-up gap:
    ema[i] = ema[i-1] + smoothing * (value[i] - ema[i-1])

    Args:
        values: Input sequence
        window: Window size (>= 2), used for the default smoothing
        smoothing: Smoothing factor in (0, 1], default 2 / (window + 1)

    Returns:
        One output per input; None before the seed and at undefined inputs.
        The recurrence resumes from the last defined value after a gap.
    """
    _check_window(window)
    if smoothing is None:
        smoothing = 2.0 / (window + 1)
    if not 0 < smoothing <= 1:
        raise WindowParameterError(
            f"Smoothing must be in (0, 1], got {smoothing!r}",
            parameter="smoothing",
            value=smoothing
        )

    result: list[Optional[float]] = []
    previous: Optional[float] = None

    for value in values:
        if not _is_finite(value):
            result.append(None)
            continue
        if previous is None:
            previous = float(value)
        else:
            previous = previous + smoothing * (value - previous)
        result.append(previous)

    return result


class RollingWindowStats:
    """Rolling statistics bound to one window size"""

    def __init__(self, window: int):
        _check_window(window)
        self.window = window

    def mean(self, values: Sequence[Optional[float]], i: int) -> Optional[float]:
        return rolling_mean(values, self.window, i)

    def std(self, values: Sequence[Optional[float]], i: int) -> Optional[float]:
        return rolling_std(values, self.window, i)

    def sma(self, values: Sequence[Optional[float]]) -> list[Optional[float]]:
        return sma(values, self.window)

    def ema(self, values: Sequence[Optional[float]],
            smoothing: Optional[float] = None) -> list[Optional[float]]:
        return ema(values, self.window, smoothing)

    def warmup_period(self) -> int:
        """Number of leading indices without a windowed value"""
        return self.window - 1
