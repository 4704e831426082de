"""Yield curve interpolation and provider fallback chain"""

from .sources import first_available
from .yield_curve import YieldCurveInterpolator, interpolate, maturity_to_years

__all__ = [
    "YieldCurveInterpolator",
    "interpolate",
    "maturity_to_years",
    "first_available",
]
