"""Cycle and oscillator indicators built on the rolling statistics"""

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Optional, Sequence

from ..data.aligner import validate_series
from ..errors import WindowParameterError
from ..utils.time import month_key
from .rolling import ema, rolling_mean, rolling_std, sma


@dataclass(frozen=True)
class BollingerBands:
    """Middle SMA with population-std bands"""
    upper: list
    middle: list
    lower: list


@dataclass(frozen=True)
class MACD:
    """MACD line, signal line and histogram"""
    macd: list
    signal: list
    histogram: list


class CycleZone(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class PiCycleRow:
    date: date
    price: float
    short_ma: float
    long_ma_scaled: float
    ratio: float
    zone: CycleZone


@dataclass(frozen=True)
class HeatmapRow:
    date: date
    index: int
    price: float
    moving_average: float
    change_pct: float


@dataclass(frozen=True)
class MVRVRow:
    date: date
    price: float
    value: float


@dataclass(frozen=True)
class MVRVZRow:
    date: date
    market_value: float
    realised_value: float
    z_score: float


@dataclass(frozen=True)
class MVRVProxies:
    """Short-term holder ratio and z-score, sampled once per month"""
    sth_mvrv: tuple
    z_score: tuple


def bollinger_bands(values: Sequence[Optional[float]], period: int = 20,
                    std_mult: float = 2.0) -> BollingerBands:
    """
    Bollinger bands

    Args:
        values: Price sequence
        period: SMA / std window
        std_mult: Band half-width in standard deviations

    Returns:
        BollingerBands with None during warm-up
    """
    middle = sma(values, period)
    upper: list[Optional[float]] = []
    lower: list[Optional[float]] = []

    for i, mean in enumerate(middle):
        std = rolling_std(values, period, i)
        if mean is None or std is None:
            upper.append(None)
            lower.append(None)
            continue
        upper.append(mean + std_mult * std)
        lower.append(mean - std_mult * std)

    return BollingerBands(upper=upper, middle=middle, lower=lower)


def _is_defined(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def rsi(values: Sequence[Optional[float]], period: int = 14) -> list[Optional[float]]:
    """
    Relative Strength Index with Wilder smoothing

    The first value appears once `period` price changes are defined, seeded
    with their simple average gain and loss. A change touching an undefined
    close gives None at that index; the averages hold across the gap and the
    recurrence resumes with the next defined change.
    """
    result: list[Optional[float]] = [None] * len(values)
    if len(values) <= period:
        return result

    def _rsi(gain: float, loss: float) -> float:
        if loss == 0:
            return 100.0
        rs = gain / loss
        return 100.0 - 100.0 / (1.0 + rs)

    seed_gains: list[float] = []
    seed_losses: list[float] = []
    avg_gain: Optional[float] = None
    avg_loss: Optional[float] = None

    for i in range(1, len(values)):
        if not (_is_defined(values[i - 1]) and _is_defined(values[i])):
            continue
        change = values[i] - values[i - 1]
        gain, loss = max(change, 0.0), max(-change, 0.0)

        if avg_gain is None:
            seed_gains.append(gain)
            seed_losses.append(loss)
            if len(seed_gains) < period:
                continue
            avg_gain = sum(seed_gains) / period
            avg_loss = sum(seed_losses) / period
        else:
            avg_gain = (avg_gain * (period - 1) + gain) / period
            avg_loss = (avg_loss * (period - 1) + loss) / period
        result[i] = _rsi(avg_gain, avg_loss)

    return result


def macd(values: Sequence[Optional[float]], fast: int = 12, slow: int = 26,
         signal: int = 9) -> MACD:
    """MACD = EMA(fast) - EMA(slow); signal = EMA(MACD, signal)"""
    fast_ema = ema(values, fast)
    slow_ema = ema(values, slow)

    macd_line = [
        f - s if f is not None and s is not None else None
        for f, s in zip(fast_ema, slow_ema)
    ]
    signal_line = ema(macd_line, signal)
    histogram = [
        m - s if m is not None and s is not None else None
        for m, s in zip(macd_line, signal_line)
    ]
    return MACD(macd=macd_line, signal=signal_line, histogram=histogram)


def annualized_volatility(closes: Sequence[float], period: int = 30,
                          periods_per_year: int = 365) -> Optional[float]:
    """
    Annualized volatility of log returns over the last `period` returns

    Returns:
        Volatility in percent, None with fewer than period + 1 closes or
        any undefined or non-positive price in the window
    """
    if len(closes) < period + 1:
        return None

    recent = closes[-period - 1:]
    if any(not _is_defined(c) or c <= 0 for c in recent):
        return None

    returns = [math.log(recent[i] / recent[i - 1]) for i in range(1, len(recent))]
    mean = sum(returns) / len(returns)
    variance = sum((r - mean) ** 2 for r in returns) / len(returns)
    return math.sqrt(variance * periods_per_year) * 100


def pi_cycle(points: Sequence[Any], short_window: int = 111, long_window: int = 350,
             long_mult: float = 2.0, top_ratio: float = 1.0,
             bottom_ratio: float = 0.75) -> list[PiCycleRow]:
    """
    Pi Cycle indicator: SMA(short) against long_mult * SMA(long)

    Only rows where both moving averages exist are returned. Ratio at or
    above top_ratio is a cycle top, at or below bottom_ratio a bottom.
    """
    series = validate_series(points, name="closes")
    closes = [p.value for p in series]
    short_ma = sma(closes, short_window)
    long_ma = sma(closes, long_window)

    rows: list[PiCycleRow] = []
    for point, short, long in zip(series, short_ma, long_ma):
        if short is None or long is None:
            continue
        scaled = long * long_mult
        if scaled <= 0:
            continue
        ratio = short / scaled
        if ratio >= top_ratio:
            zone = CycleZone.TOP
        elif ratio <= bottom_ratio:
            zone = CycleZone.BOTTOM
        else:
            zone = CycleZone.NEUTRAL
        rows.append(PiCycleRow(
            date=point.date,
            price=point.value,
            short_ma=short,
            long_ma_scaled=scaled,
            ratio=ratio,
            zone=zone,
        ))
    return rows


def ma_heatmap(points: Sequence[Any], period: int = 200,
               change_lag: int = 4) -> list[HeatmapRow]:
    """
    Long moving average heatmap (200-week MA on weekly closes)

    change_pct compares each row's moving average with the one change_lag
    rows earlier; rows without that history compare against themselves (0%).
    """
    if not isinstance(change_lag, int) or isinstance(change_lag, bool) or change_lag < 1:
        raise WindowParameterError(
            f"change_lag must be an integer >= 1, got {change_lag!r}",
            parameter="change_lag",
            value=change_lag
        )
    series = validate_series(points, name="closes")
    closes = [p.value for p in series]
    averages = sma(closes, period)

    rows: list[HeatmapRow] = []
    for point, average in zip(series, averages):
        if average is None:
            continue
        previous = rows[-change_lag].moving_average if len(rows) >= change_lag else average
        change_pct = (average - previous) / previous * 100 if previous > 0 else 0.0
        rows.append(HeatmapRow(
            date=point.date,
            index=len(rows),
            price=point.value,
            moving_average=average,
            change_pct=change_pct,
        ))
    return rows


def _rolling_std_sparse(values: Sequence[Optional[float]], window: int, i: int,
                        min_fraction: float = 0.5) -> Optional[float]:
    """Population std over defined entries of the trailing window."""
    if i < window - 1 or values[i] is None:
        return None
    defined = [v for v in values[i - window + 1:i + 1] if v is not None]
    if len(defined) < window * min_fraction:
        return None
    mean = sum(defined) / len(defined)
    return math.sqrt(sum((v - mean) ** 2 for v in defined) / len(defined))


def mvrv_proxies(points: Sequence[Any], sth_window: int = 155,
                 z_window: int = 365) -> MVRVProxies:
    """
    Price-only MVRV proxies, one row per calendar month

    sth_mvrv: price / SMA(sth_window)
    z_score: (price - SMA(z_window)) / std of that deviation over z_window,
    where the std needs at least half the window defined.
    """
    series = validate_series(points, name="closes")
    closes = [p.value for p in series]

    sth_rows: list[MVRVRow] = []
    last_month = None
    for i, point in enumerate(series):
        average = rolling_mean(closes, sth_window, i)
        if average is None or average == 0:
            continue
        month = month_key(point.date)
        if month == last_month:
            continue
        last_month = month
        sth_rows.append(MVRVRow(date=point.date, price=point.value, value=point.value / average))

    realised = sma(closes, z_window)
    deviations = [
        price - average if average is not None else None
        for price, average in zip(closes, realised)
    ]

    z_rows: list[MVRVZRow] = []
    last_month = None
    for i, point in enumerate(series):
        average = realised[i]
        std = _rolling_std_sparse(deviations, z_window, i)
        if average is None or std is None or std == 0:
            continue
        month = month_key(point.date)
        if month == last_month:
            continue
        last_month = month
        z_rows.append(MVRVZRow(
            date=point.date,
            market_value=point.value,
            realised_value=average,
            z_score=(point.value - average) / std,
        ))

    return MVRVProxies(sth_mvrv=tuple(sth_rows), z_score=tuple(z_rows))


@dataclass(frozen=True)
class TechnicalIndicators:
    """Oscillator overlays for one price series, aligned to its dates"""
    dates: tuple
    sma: list
    ema: list
    rsi: list
    bollinger: BollingerBands
    macd: MACD
    volatility_pct: Optional[float]


def technical_indicators(points: Sequence[Any], sma_window: int = 20, ema_window: int = 20,
                         rsi_period: int = 14, bollinger_period: int = 20,
                         bollinger_std_mult: float = 2.0, volatility_period: int = 30,
                         periods_per_year: int = 365) -> TechnicalIndicators:
    series = validate_series(points, name="closes")
    closes = [p.value for p in series]
    return TechnicalIndicators(
        dates=tuple(p.date for p in series),
        sma=sma(closes, sma_window),
        ema=ema(closes, ema_window),
        rsi=rsi(closes, rsi_period),
        bollinger=bollinger_bands(closes, bollinger_period, bollinger_std_mult),
        macd=macd(closes),
        volatility_pct=annualized_volatility(closes, volatility_period, periods_per_year),
    )
