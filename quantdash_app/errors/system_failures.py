"""
System failure error classifications for unrecoverable errors.

These exceptions represent broken internal invariants rather than bad input.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for unrecoverable failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class MetricsCalculationError(SystemFailureError):
    """Critical error in a calculation that prevents a result."""

    def __init__(self, message: str, metric_name: Optional[str] = None,
                 calculation_input: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.metric_name = metric_name
        self.calculation_input = calculation_input
