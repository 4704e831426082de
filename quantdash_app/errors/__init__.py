"""
Error classification for the analytics core.

Structured exception hierarchy separating data quality problems (bad or short
input series), internal calculation failures, and invalid caller parameters.
"""

from .data_quality import (
    DataQualityError,
    TemporalDataError,
    MissingDataError,
    MalformedDataError,
    InsufficientDataError,
    DegenerateInputError,
)
from .system_failures import (
    SystemFailureError,
    MetricsCalculationError,
)
from .parameters import (
    ParameterError,
    WindowParameterError,
    SimulationParameterError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "TemporalDataError",
    "MissingDataError",
    "MalformedDataError",
    "InsufficientDataError",
    "DegenerateInputError",
    # System Failures
    "SystemFailureError",
    "MetricsCalculationError",
    # Parameter Errors
    "ParameterError",
    "WindowParameterError",
    "SimulationParameterError",
]
