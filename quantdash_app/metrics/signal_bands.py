"""
Ratio signal with adaptive volatility bands (NVT Signal style)

Signal = price * scale / SMA(denominator, primary_window)
Bands  = rolling mean(signal) +/- band_std_mult * rolling std(signal)

The computation runs in two passes over the full history. The first produces
an optional signal per aligned row. The second densifies that sequence for
windowing, tracking which indices were synthetic. A band is only reported for
rows whose band window holds no synthetic index, so warm-up never leaks into
published statistics.
"""

import math
from datetime import date
from typing import Callable, Optional, Sequence, Union

from ..config.defaults import SignalBandParams
from ..data.models import AlignedSeries, SignalBandResult, SignalPoint, classify_zone
from ..errors import (
    DegenerateInputError,
    InsufficientDataError,
    MetricsCalculationError,
    ParameterError,
)
from ..utils.time import display_cutoff
from .rolling import RollingWindowStats

Scale = Union[float, Callable[[date], float]]


def densify(raw: Sequence[Optional[float]]) -> tuple[list[float], list[bool]]:
    """
    Copy an optional sequence into a dense one for windowing.

    Returns:
        (dense values with undefined entries set to 0.0, synthetic flags)
    """
    dense = [v if v is not None else 0.0 for v in raw]
    synthetic = [v is None for v in raw]
    return dense, synthetic


class SignalBandEngine:
    """Two-stage rolling signal and band calculator"""

    def __init__(self, primary_window: int = 90, band_window: int = 90,
                 band_std_mult: float = 2.0, min_points: int = 100,
                 clamp_lower: bool = True, display_years: int = 2):
        if (isinstance(band_std_mult, bool) or not isinstance(band_std_mult, (int, float))
                or not math.isfinite(band_std_mult) or band_std_mult <= 0):
            raise ParameterError(
                f"band_std_mult must be a positive number, got {band_std_mult!r}",
                parameter="band_std_mult", value=band_std_mult
            )
        if isinstance(min_points, bool) or not isinstance(min_points, int) or min_points < 1:
            raise ParameterError(
                f"min_points must be a positive integer, got {min_points!r}",
                parameter="min_points", value=min_points
            )
        if isinstance(display_years, bool) or not isinstance(display_years, int) or display_years < 0:
            raise ParameterError(
                f"display_years must be a non-negative integer, got {display_years!r}",
                parameter="display_years", value=display_years
            )
        self.primary = RollingWindowStats(primary_window)
        self.bands = RollingWindowStats(band_window)
        self.band_std_mult = band_std_mult
        self.min_points = min_points
        self.clamp_lower = clamp_lower
        self.display_years = display_years

    @classmethod
    def from_params(cls, params: SignalBandParams) -> "SignalBandEngine":
        return cls(
            primary_window=params.primary_window,
            band_window=params.band_window,
            band_std_mult=params.band_std_mult,
            min_points=params.min_points,
            clamp_lower=params.clamp_lower,
            display_years=params.display_years,
        )

    @property
    def primary_window(self) -> int:
        return self.primary.window

    @property
    def band_window(self) -> int:
        return self.bands.window

    def required_points(self) -> int:
        """Aligned rows needed before the first banded point can exist"""
        return max(self.min_points, self.primary_window + self.band_window - 1)

    def primary_signal(self, numerators: Sequence[float],
                       denominators: Sequence[float]) -> list[Optional[float]]:
        """
        Stage 1: numerator / rolling mean of the denominator.

        Entries are None during the denominator warm-up, where the rolling
        mean is not positive, or where the numerator is not finite.
        """
        signal: list[Optional[float]] = []
        for i, numerator in enumerate(numerators):
            denominator_mean = self.primary.mean(denominators, i)
            if denominator_mean is None or denominator_mean <= 0:
                signal.append(None)
                continue
            if numerator is None or not math.isfinite(numerator):
                signal.append(None)
                continue
            signal.append(numerator / denominator_mean)
        return signal

    def signal_at(self, numerator: float, denominators: Sequence[float], i: int) -> float:
        """
        Stage-one signal for a single index.

        Raises:
            InsufficientDataError: i falls inside the denominator warm-up
            DegenerateInputError: The rolling denominator mean is not positive
        """
        denominator_mean = self.primary.mean(denominators, i)
        if denominator_mean is None:
            raise InsufficientDataError(
                f"No rolling denominator at index {i}",
                required_count=self.primary_window,
                available_count=i + 1
            )
        if denominator_mean <= 0:
            raise DegenerateInputError(
                f"Rolling denominator mean is {denominator_mean} at index {i}",
                quantity="denominator_mean",
                value=denominator_mean
            )
        return numerator / denominator_mean

    def _band_rows(self, raw: list[Optional[float]]) -> dict[int, tuple[float, float]]:
        """Stage 2: (mean, std) per index whose band window is fully real."""
        dense, synthetic = densify(raw)
        window = self.band_window

        # synthetic_before[i] = number of synthetic indices in [0, i)
        synthetic_before = [0]
        for flag in synthetic:
            synthetic_before.append(synthetic_before[-1] + int(flag))

        rows: dict[int, tuple[float, float]] = {}
        for i, value in enumerate(raw):
            if value is None or i < window - 1:
                continue
            start = i - window + 1
            if synthetic_before[i + 1] - synthetic_before[start] > 0:
                continue

            mean = self.bands.mean(dense, i)
            std = self.bands.std(dense, i)
            if mean is None or std is None:
                raise MetricsCalculationError(
                    f"Band statistics undefined over a fully populated window at index {i}",
                    metric_name="signal_bands",
                    calculation_input={"index": i, "band_window": window}
                )
            rows[i] = (mean, std)
        return rows

    def compute_signal(self, aligned: AlignedSeries, scale: Scale,
                       price_column: Union[int, str] = 0,
                       denominator_column: Union[int, str] = 1,
                       as_of: Optional[date] = None) -> SignalBandResult:
        """
        Compute banded signal points and return the trailing display window.

        Args:
            aligned: Merged price / denominator series
            scale: Constant or per-date factor turning price into the
                numerator (supply for network value, shares for market cap)
            price_column: Column holding the price
            denominator_column: Column holding the volume-like denominator
            as_of: End of the display window, defaults to the last aligned date

        Returns:
            SignalBandResult with the display-window points

        Raises:
            InsufficientDataError: Fewer aligned rows than required_points()
        """
        required = self.required_points()
        if len(aligned) < required:
            raise InsufficientDataError(
                f"Signal needs {required} aligned points, got {len(aligned)}",
                required_count=required,
                available_count=len(aligned),
                context={"primary_window": self.primary_window, "band_window": self.band_window}
            )

        dates = aligned.dates
        prices = aligned.column(price_column)
        denominators = aligned.column(denominator_column)
        scale_at = scale if callable(scale) else (lambda _day: scale)
        numerators = [price * scale_at(day) for day, price in zip(dates, prices)]

        raw = self.primary_signal(numerators, denominators)
        band_rows = self._band_rows(raw)

        points: list[SignalPoint] = []
        for i in sorted(band_rows):
            mean, std = band_rows[i]
            signal = raw[i]
            upper = mean + self.band_std_mult * std
            lower = mean - self.band_std_mult * std
            if self.clamp_lower:
                lower = max(0.0, lower)
            points.append(SignalPoint(
                date=dates[i],
                price=prices[i],
                signal=signal,
                signal_mean=mean,
                upper_band=upper,
                lower_band=lower,
                zone=classify_zone(signal, upper, lower),
            ))

        if not points:
            raise MetricsCalculationError(
                "No signal point survived the warm-up windows",
                metric_name="signal_bands",
                calculation_input={"aligned_points": len(aligned)}
            )

        if as_of is None:
            as_of = dates[-1]
        cutoff = display_cutoff(as_of, self.display_years)
        display = tuple(p for p in points if cutoff <= p.date <= as_of)

        return SignalBandResult(points=display, computed_points=len(points), as_of=as_of)
