"""Serialization of computed results"""

from .serializers import (
    indicator_rows_to_payload,
    round_value,
    signal_result_to_payload,
    simulation_to_payload,
    yield_curve_to_payload,
)

__all__ = [
    "round_value",
    "signal_result_to_payload",
    "yield_curve_to_payload",
    "simulation_to_payload",
    "indicator_rows_to_payload",
]
