"""
Data quality error classifications for time series processing.

These exceptions describe problems with the input series themselves: ordering,
gaps, shape, and length. Callers one layer up decide what the user sees.
"""

from typing import Optional, Dict, Any


class DataQualityError(Exception):
    """Base class for input data issues the caller can act on."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class TemporalDataError(DataQualityError):
    """Dates out of order or duplicated within one series."""

    def __init__(self, message: str, date: Optional[Any] = None,
                 previous_date: Optional[Any] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.date = date
        self.previous_date = previous_date


class MissingDataError(DataQualityError):
    """Required data is completely missing."""

    def __init__(self, message: str, data_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.data_type = data_type


class MalformedDataError(DataQualityError):
    """Data exists but is in incorrect format."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class InsufficientDataError(DataQualityError):
    """Not enough history to fill the warm-up windows."""

    def __init__(self, message: str, required_count: Optional[int] = None,
                 available_count: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.required_count = required_count
        self.available_count = available_count


class DegenerateInputError(DataQualityError):
    """Zero or negative denominator, or a zero-width interpolation range."""

    def __init__(self, message: str, quantity: Optional[str] = None,
                 value: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.quantity = quantity
        self.value = value
