"""
Calendar helpers for display windows and sampling.

Every function takes the reference date explicitly; nothing here reads the
wall clock, so results depend only on the input series.
"""

from datetime import date


def shift_years(day: date, years: int) -> date:
    """
    Move a date by whole years, mapping Feb 29 onto Feb 28 when needed.

    Args:
        day: Reference date
        years: Years to add (negative moves back)

    Returns:
        Shifted calendar date
    """
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)


def display_cutoff(as_of: date, lookback_years: int) -> date:
    """First date included in a trailing display window."""
    return shift_years(as_of, -lookback_years)


def month_key(day: date) -> int:
    """Monotonic month index used for once-per-month sampling."""
    return day.year * 12 + (day.month - 1)
