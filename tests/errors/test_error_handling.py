"""Tests for the error classification hierarchy."""

from datetime import date

import pytest

from quantdash_app.errors import (
    DataQualityError,
    DegenerateInputError,
    InsufficientDataError,
    MalformedDataError,
    MetricsCalculationError,
    MissingDataError,
    ParameterError,
    SimulationParameterError,
    SystemFailureError,
    TemporalDataError,
    WindowParameterError,
)


class TestDataQualityErrors:
    """Test data quality error classification."""

    def test_base_error_context(self):
        """Test context defaults and recoverability."""
        error = DataQualityError("bad input")
        assert str(error) == "bad input"
        assert error.context == {}
        assert error.recoverable is True

    def test_temporal_error(self):
        """Test temporal error carries both dates."""
        error = TemporalDataError("out of order", date=date(2024, 1, 1),
                                  previous_date=date(2024, 1, 2))
        assert isinstance(error, DataQualityError)
        assert error.date == date(2024, 1, 1)
        assert error.previous_date == date(2024, 1, 2)

    def test_missing_data_error(self):
        """Test missing data error carries the data type and context."""
        error = MissingDataError("no cap", data_type="market_cap", context={"asset_id": "X"})
        assert error.data_type == "market_cap"
        assert error.context["asset_id"] == "X"

    def test_malformed_data_error(self):
        """Test malformed data error carries raw data and format."""
        error = MalformedDataError("bad", raw_data="abc", expected_format="(date, value)")
        assert error.raw_data == "abc"
        assert error.expected_format == "(date, value)"

    def test_insufficient_data_error(self):
        """Test insufficient data error carries the counts."""
        error = InsufficientDataError("short", required_count=179, available_count=50)
        assert error.required_count == 179
        assert error.available_count == 50

    def test_degenerate_input_error(self):
        """Test degenerate input error carries quantity and value."""
        error = DegenerateInputError("zero width", quantity="tenor_span", value=0.0)
        assert isinstance(error, DataQualityError)
        assert error.quantity == "tenor_span"


class TestSystemFailures:
    """Test unrecoverable failure classification."""

    def test_metrics_calculation_error(self):
        """Test metric name and input are recorded."""
        error = MetricsCalculationError("boom", metric_name="signal_bands",
                                        calculation_input={"index": 3})
        assert isinstance(error, SystemFailureError)
        assert error.recoverable is False
        assert error.metric_name == "signal_bands"
        assert error.calculation_input == {"index": 3}


class TestParameterErrors:
    """Test caller parameter error classification."""

    @pytest.mark.parametrize("cls", [ParameterError, WindowParameterError, SimulationParameterError])
    def test_parameter_errors_are_value_errors(self, cls):
        """Test parameter errors subclass ValueError and are not recoverable."""
        error = cls("bad window", parameter="window", value=1)
        assert isinstance(error, ValueError)
        assert error.parameter == "window"
        assert error.value == 1
        assert error.recoverable is False

    def test_families_are_disjoint(self):
        """Test the three families do not overlap."""
        assert not issubclass(ParameterError, DataQualityError)
        assert not issubclass(MetricsCalculationError, DataQualityError)
        assert not issubclass(DataQualityError, SystemFailureError)
