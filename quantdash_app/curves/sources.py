"""
Ordered provider chain for known yield points.

Providers are tried in order and the first one returning at least one point
wins. Fetching and any static fallback curve stay with the caller; this module
only orchestrates the order and records why earlier providers were skipped.
"""

from typing import Callable, Iterable, Sequence

from ..data.models import YieldPoint
from ..errors import MissingDataError
from ..logging.config import get_analytics_logger

logger = get_analytics_logger(__name__)

Provider = Callable[[], Iterable[YieldPoint]]


def first_available(providers: Sequence[tuple[str, Provider]]) -> tuple[str, list[YieldPoint]]:
    """
    Return the first non-empty provider result.

    Args:
        providers: (name, callable) pairs in priority order

    Returns:
        (provider name, known points)

    Raises:
        MissingDataError: If every provider failed or returned nothing
    """
    attempts: dict[str, str] = {}

    for name, provider in providers:
        try:
            points = list(provider() or [])
        except Exception as e:
            logger.warning("Yield provider failed", provider=name, error=str(e))
            attempts[name] = f"error: {e}"
            continue

        if points:
            logger.debug("Yield provider selected", provider=name, points=len(points))
            return name, points

        logger.info("Yield provider returned no points", provider=name)
        attempts[name] = "empty"

    raise MissingDataError(
        "No yield provider returned any points",
        data_type="yield_points",
        context={"attempts": attempts}
    )
