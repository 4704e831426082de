"""
Time series alignment.

Merges independently sourced date-keyed series onto the sorted union of their
calendars. Gaps are forward-filled from each source's last valid observation;
dates before every source has reported are dropped rather than backfilled.
"""

import math
from datetime import date
from typing import Any, Iterable, Optional, Sequence

from ..errors import MalformedDataError, TemporalDataError
from .models import AlignedRow, AlignedSeries, TimePoint


def validate_series(points: Iterable[Any], name: str = "series") -> list[TimePoint]:
    """
    Coerce observations to TimePoints and check date ordering.

    Raises:
        TemporalDataError: If dates are not strictly increasing
    """
    result: list[TimePoint] = []
    previous: Optional[date] = None

    for raw in points:
        point = TimePoint.coerce(raw)
        if previous is not None and point.date <= previous:
            raise TemporalDataError(
                f"{name}: dates must be strictly increasing "
                f"({point.date.isoformat()} after {previous.isoformat()})",
                date=point.date,
                previous_date=previous,
                context={"series": name}
            )
        previous = point.date
        result.append(point)

    return result


def _is_valid(value: Any, require_positive: bool) -> bool:
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if not math.isfinite(value):
        return False
    return value > 0 if require_positive else True


def merge(
    *series: Sequence[Any],
    names: Optional[Sequence[str]] = None,
    require_positive: bool = True
) -> AlignedSeries:
    """
    Merge two or more series onto a common calendar.

    For each date of the union (ascending), each source contributes its own
    observation or, when absent, its most recent valid one. A row is emitted
    once every source has produced a valid value. An observation that is
    non-finite (or non-positive when require_positive) discards its date and
    is never carried forward.

    Args:
        *series: Sequences of TimePoint or (date, value) pairs
        names: Optional column names, one per series
        require_positive: Treat values <= 0 as invalid (prices, volumes)

    Returns:
        AlignedSeries with strictly increasing dates

    Raises:
        MalformedDataError: Fewer than two series or mismatched names
        TemporalDataError: A series is not strictly increasing
    """
    if len(series) < 2:
        raise MalformedDataError(
            f"merge needs at least two series, got {len(series)}",
            expected_format="two or more date-keyed series"
        )

    if names is None:
        names = tuple(f"s{i}" for i in range(len(series)))
    elif len(names) != len(series):
        raise MalformedDataError(
            f"Got {len(names)} names for {len(series)} series",
            expected_format="one name per series"
        )

    lookups: list[dict[date, float]] = []
    for name, points in zip(names, series):
        validated = validate_series(points, name=name)
        lookups.append({p.date: p.value for p in validated})

    calendar = sorted(set().union(*(lookup.keys() for lookup in lookups)))

    last_seen: list[Optional[float]] = [None] * len(lookups)
    rows: list[AlignedRow] = []

    for day in calendar:
        discard = False
        for index, lookup in enumerate(lookups):
            if day not in lookup:
                continue
            value = lookup[day]
            if _is_valid(value, require_positive):
                last_seen[index] = float(value)
            else:
                discard = True

        if discard or any(v is None for v in last_seen):
            continue

        rows.append(AlignedRow(date=day, values=tuple(last_seen)))

    return AlignedSeries(names=tuple(names), rows=tuple(rows))
