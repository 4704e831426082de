"""
JSON-ready payloads for computed results.

Rounding happens here and nowhere upstream. Dates become ISO strings, enums
their values, and every key is snake_case.
"""

import math
from dataclasses import fields, is_dataclass
from datetime import date
from enum import Enum
from typing import Any, Iterable, Optional

from ..data.models import SignalBandResult, SimulationResult, YieldCurve


def round_value(value: Optional[float], places: int = 2) -> Optional[float]:
    """Round a finite number; None and non-finite values become None."""
    if value is None:
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return round(value, places)


def _plain(value: Any, places: int) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool) or isinstance(value, int):
        return value
    if isinstance(value, float):
        return round_value(value, places)
    if value is None or isinstance(value, str):
        return value
    if is_dataclass(value):
        return {f.name: _plain(getattr(value, f.name), places) for f in fields(value)}
    if isinstance(value, dict):
        return {str(k): _plain(v, places) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v, places) for v in value]
    return value


def signal_result_to_payload(result: SignalBandResult, places: int = 2) -> dict[str, Any]:
    points = [
        {
            "date": p.date.isoformat(),
            "price": round_value(p.price, places),
            "signal": round_value(p.signal, places),
            "signal_mean": round_value(p.signal_mean, places),
            "upper_band": round_value(p.upper_band, places),
            "lower_band": round_value(p.lower_band, places),
            "zone": p.zone.value,
        }
        for p in result.points
    ]
    return {
        "as_of": result.as_of.isoformat() if result.as_of else None,
        "computed_points": result.computed_points,
        "points": points,
        "latest_signal": round_value(result.latest_signal, places),
        "latest_upper": round_value(result.latest_upper, places),
        "latest_lower": round_value(result.latest_lower, places),
        "latest_zone": result.latest_zone.value,
    }


def yield_curve_to_payload(curve: YieldCurve, places: int = 2) -> dict[str, Any]:
    return {
        "source": curve.source,
        "points": [
            {
                "maturity": p.maturity,
                "label": p.label,
                "years": round_value(p.years, 4),
                "yield_pct": round_value(p.yield_pct, places),
            }
            for p in curve.points
        ],
    }


def _level_key(level: float) -> str:
    # 0.95 -> "95", 0.975 -> "97.5"
    return f"{level * 100:g}"


def simulation_to_payload(result: SimulationResult, places: int = 2,
                          include_paths: bool = True) -> dict[str, Any]:
    """
    Convert fractional statistics to percentages.

    Returns and drawdowns are multiplied by 100 and emitted under *_pct keys.
    Stored paths stay in currency units.
    """
    def pct(value: float) -> Optional[float]:
        return round_value(value * 100.0, places)

    payload = {
        "num_paths": result.num_paths,
        "horizon_days": result.horizon_days,
        "initial_value": round_value(result.initial_value, places),
        "mean_return_pct": pct(result.mean_return),
        "median_return_pct": pct(result.median_return),
        "percentile_5_pct": pct(result.percentile_5),
        "percentile_95_pct": pct(result.percentile_95),
        "cvar_pct": {_level_key(level): pct(value) for level, value in sorted(result.cvar.items())},
        "max_drawdown_pct": pct(result.max_drawdown),
        "drawdown_percentiles_pct": {
            str(p): pct(value) for p, value in sorted(result.drawdown_percentiles.items())
        },
    }
    if include_paths:
        payload["paths"] = [[round_value(v, places) for v in path] for path in result.paths]
    return payload


def indicator_rows_to_payload(rows: Iterable[Any], places: int = 2) -> list[dict[str, Any]]:
    """Serialize indicator row dataclasses (PiCycleRow, HeatmapRow, ...)."""
    return [_plain(row, places) for row in rows]
