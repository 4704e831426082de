"""
Parameter error classifications.

Raised before any computation starts when a caller passes arguments that can
only produce a degenerate result.
"""

from typing import Any, Optional


class ParameterError(ValueError):
    """Base class for invalid caller-supplied parameters."""

    def __init__(self, message: str, parameter: Optional[str] = None,
                 value: Any = None):
        super().__init__(message)
        self.parameter = parameter
        self.value = value
        self.recoverable = False


class WindowParameterError(ParameterError):
    """Rolling window size below the minimum of 2."""


class SimulationParameterError(ParameterError):
    """Monte Carlo parameters that would yield an empty or NaN distribution."""
