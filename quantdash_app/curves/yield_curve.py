"""
Piecewise-linear yield curve interpolation.

Maps a sparse set of observed tenors onto a fixed list of target maturities.
Known tenors pass through unchanged, interior tenors are interpolated linearly
between the nearest known neighbours, and tenors outside the observed range
take the nearest endpoint's yield (flat extrapolation).
"""

import math
import re
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from ..config.defaults import YieldCurveParams
from ..data.models import YieldPoint
from ..errors import InsufficientDataError, MalformedDataError

_MATURITY_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([dwmy])\s*$", re.IGNORECASE)

_UNIT_YEARS = {
    "d": 1.0 / 365.0,
    "w": 1.0 / 52.0,
    "m": 1.0 / 12.0,
    "y": 1.0,
}

Target = Union[str, float]


def maturity_to_years(key: str) -> float:
    """
    Convert a maturity key such as "3m", "10y" or "26w" to years.

    Raises:
        MalformedDataError: If the key cannot be parsed
    """
    if not isinstance(key, str):
        raise MalformedDataError(
            f"Maturity key must be a string, got {key!r}",
            raw_data=repr(key),
            expected_format="<number><d|w|m|y>"
        )
    match = _MATURITY_PATTERN.match(key)
    if match is None:
        raise MalformedDataError(
            f"Unparseable maturity key {key!r}",
            raw_data=key,
            expected_format="<number><d|w|m|y>"
        )
    amount, unit = match.groups()
    years = float(amount) * _UNIT_YEARS[unit.lower()]
    if years <= 0:
        raise MalformedDataError(f"Maturity must be positive, got {key!r}", raw_data=key)
    return years


def maturity_label(key: str) -> str:
    """Display label for a maturity key ("3m" -> "3M")."""
    return key.strip().upper()


def make_point(maturity: str, yield_pct: float) -> YieldPoint:
    """YieldPoint for a maturity key with its derived years and label."""
    return YieldPoint(
        maturity=maturity,
        years=maturity_to_years(maturity),
        yield_pct=yield_pct,
        label=maturity_label(maturity),
    )


def _coerce_known(known: Union[Mapping[str, float], Iterable[YieldPoint]]) -> list[YieldPoint]:
    if isinstance(known, Mapping):
        points = [make_point(maturity, value) for maturity, value in known.items()]
    else:
        points = list(known)

    for point in points:
        if point.yield_pct is None or not math.isfinite(point.yield_pct):
            raise MalformedDataError(
                f"Non-finite yield at {point.maturity}",
                raw_data=repr(point.yield_pct)
            )

    points.sort(key=lambda p: p.years)
    for previous, current in zip(points, points[1:]):
        if math.isclose(previous.years, current.years):
            raise MalformedDataError(
                f"Two known points at the same tenor: {previous.maturity} and {current.maturity}",
                expected_format="one yield per tenor"
            )
    return points


def _target_point(target: Target) -> tuple[str, float, str]:
    if isinstance(target, str):
        return target, maturity_to_years(target), maturity_label(target)
    years = float(target)
    if not math.isfinite(years) or years <= 0:
        raise MalformedDataError(f"Target maturity must be positive, got {target!r}")
    key = f"{years:g}y"
    return key, years, maturity_label(key)


def _find_known(known: list[YieldPoint], key: str, years: float) -> Optional[YieldPoint]:
    for point in known:
        if point.maturity == key or math.isclose(point.years, years):
            return point
    return None


def interpolate(known: Union[Mapping[str, float], Iterable[YieldPoint]],
                targets: Sequence[Target]) -> list[YieldPoint]:
    """
    Map known yields onto target maturities.

    Args:
        known: Observed yields, as {maturity key: yield} or YieldPoints
        targets: Target maturities as keys ("5y") or years (5.0)

    Returns:
        One YieldPoint per target, in target order

    Raises:
        InsufficientDataError: No known points
        MalformedDataError: Duplicate tenors or unparseable maturities
    """
    points = _coerce_known(known)
    if not points:
        raise InsufficientDataError(
            "Yield curve needs at least one known point",
            required_count=1,
            available_count=0
        )

    curve: list[YieldPoint] = []
    for target in targets:
        key, years, label = _target_point(target)

        match = _find_known(points, key, years)
        if match is not None:
            curve.append(YieldPoint(maturity=key, years=years, yield_pct=match.yield_pct, label=label))
            continue

        lower: Optional[YieldPoint] = None
        upper: Optional[YieldPoint] = None
        for point in points:
            if point.years <= years:
                lower = point
            if point.years >= years:
                upper = point
                break

        # Outside the known range one side is missing: extrapolate flat
        lower = lower or upper
        upper = upper or lower

        if lower is upper:
            value = lower.yield_pct
        else:
            ratio = (years - lower.years) / (upper.years - lower.years)
            value = lower.yield_pct + ratio * (upper.yield_pct - lower.yield_pct)

        curve.append(YieldPoint(maturity=key, years=years, yield_pct=value, label=label))

    return curve


class YieldCurveInterpolator:
    """Interpolator bound to a fixed list of target maturities."""

    def __init__(self, target_maturities: Sequence[Target]):
        if not target_maturities:
            raise MalformedDataError("At least one target maturity is required")
        for target in target_maturities:
            _target_point(target)
        self.target_maturities = tuple(target_maturities)

    @classmethod
    def from_params(cls, params: YieldCurveParams) -> "YieldCurveInterpolator":
        return cls(params.target_maturities)

    def interpolate(self, known: Union[Mapping[str, float], Iterable[YieldPoint]]) -> list[YieldPoint]:
        return interpolate(known, self.target_maturities)


def known_points_from_pairs(pairs: Iterable[tuple[str, Any]]) -> list[YieldPoint]:
    """Build YieldPoints from (maturity, yield) pairs, skipping missing yields."""
    return [make_point(maturity, float(value)) for maturity, value in pairs if value is not None]
