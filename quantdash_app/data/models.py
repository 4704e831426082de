"""
Canonical data models for the analytics pipeline.

This module defines immutable data structures for input observations,
aligned multi-series tables and every computed output. Outputs are created
fresh per invocation and never patched afterwards.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from numbers import Real
from typing import Any, Iterator, Optional, Union

from ..errors import MalformedDataError


@dataclass(frozen=True)
class TimePoint:
    """Single dated observation of one series."""
    date: date
    value: float

    @classmethod
    def coerce(cls, obj: Any) -> "TimePoint":
        """Accept a TimePoint or a (date, value) pair."""
        if isinstance(obj, TimePoint):
            return obj
        try:
            day, value = obj
        except (TypeError, ValueError):
            raise MalformedDataError(
                f"Expected (date, value) pair, got {obj!r}",
                raw_data=repr(obj)[:100],
                expected_format="(date, value)"
            )
        if not isinstance(day, date):
            raise MalformedDataError(
                f"Observation date must be a date, got {type(day).__name__}",
                raw_data=repr(obj)[:100],
                expected_format="(date, value)"
            )
        # None marks a missing observation; anything else must be a real number
        if value is not None and (not isinstance(value, Real) or isinstance(value, bool)):
            raise MalformedDataError(
                f"Observation value must be numeric, got {type(value).__name__}",
                raw_data=repr(obj)[:100],
                expected_format="(date, value)"
            )
        return cls(date=day, value=value)


@dataclass(frozen=True)
class AlignedRow:
    """One calendar date with a value from every merged source."""
    date: date
    values: tuple


@dataclass(frozen=True)
class AlignedSeries:
    """Merged sources on a common, strictly increasing calendar."""
    names: tuple
    rows: tuple

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[AlignedRow]:
        return iter(self.rows)

    @property
    def dates(self) -> list[date]:
        return [row.date for row in self.rows]

    def column(self, key: Union[int, str]) -> list[float]:
        """Values of one source, addressed by position or name."""
        if isinstance(key, str):
            try:
                index = self.names.index(key)
            except ValueError:
                raise KeyError(f"Unknown column {key!r}; columns are {self.names}")
        else:
            index = key
        return [row.values[index] for row in self.rows]


class Zone(str, Enum):
    """Signal position relative to its bands."""
    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"
    NEUTRAL = "neutral"


def classify_zone(signal: float, upper: float, lower: float) -> Zone:
    """overbought iff signal > upper, oversold iff signal < lower."""
    if signal > upper:
        return Zone.OVERBOUGHT
    if signal < lower:
        return Zone.OVERSOLD
    return Zone.NEUTRAL


@dataclass(frozen=True)
class SignalPoint:
    """Ratio signal with its rolling mean and volatility bands."""
    date: date
    price: float
    signal: float
    signal_mean: float
    upper_band: float
    lower_band: float
    zone: Zone


@dataclass(frozen=True)
class SignalBandResult:
    """Display window of a signal band computation."""
    points: tuple
    computed_points: int        # Points produced over the full history
    as_of: Optional[date] = None

    @property
    def latest(self) -> Optional[SignalPoint]:
        return self.points[-1] if self.points else None

    @property
    def latest_signal(self) -> Optional[float]:
        return self.latest.signal if self.latest else None

    @property
    def latest_upper(self) -> Optional[float]:
        return self.latest.upper_band if self.latest else None

    @property
    def latest_lower(self) -> Optional[float]:
        return self.latest.lower_band if self.latest else None

    @property
    def latest_zone(self) -> Zone:
        return self.latest.zone if self.latest else Zone.NEUTRAL


@dataclass(frozen=True)
class YieldPoint:
    """Yield at one tenor."""
    maturity: str
    years: float
    yield_pct: float
    label: str = ""


@dataclass(frozen=True)
class YieldCurve:
    """Interpolated curve together with the provider it came from."""
    source: str
    points: tuple

    def as_mapping(self) -> dict[str, float]:
        return {p.maturity: p.yield_pct for p in self.points}


@dataclass(frozen=True)
class SimulationResult:
    """
    Aggregate Monte Carlo statistics.

    Returns and drawdowns are fractions of the initial value (-0.25 means a
    25% loss). `paths` holds a display subset only; every statistic is taken
    over all simulated paths.
    """
    num_paths: int
    horizon_days: int
    initial_value: float
    mean_return: float
    median_return: float
    percentile_5: float
    percentile_95: float
    cvar: dict = field(default_factory=dict)             # confidence level -> CVaR
    max_drawdown: float = 0.0
    drawdown_percentiles: dict = field(default_factory=dict)
    paths: tuple = ()

    def cvar_at(self, confidence: float) -> float:
        try:
            return self.cvar[confidence]
        except KeyError:
            raise KeyError(f"CVaR not computed at {confidence}; levels are {sorted(self.cvar)}")
