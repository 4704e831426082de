"""Tests for structlog configuration and computation logging."""

import pytest
import structlog
from structlog.testing import capture_logs

from quantdash_app.logging.config import (
    configure_logging,
    get_analytics_logger,
    get_risk_logger,
    log_computation,
)


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """Test the processor chain built by configure_logging."""

    def test_json_renderer_last(self) -> None:
        """Test JSON output puts the renderer at the end of the chain."""
        configure_logging(level="DEBUG", format_json=True)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert any(isinstance(p, structlog.processors.TimeStamper) for p in processors)

    def test_optional_processors(self) -> None:
        """Test timestamp removal, callsite fields and extra processors."""
        def tag(logger, method_name, event_dict):
            event_dict["tagged"] = True
            return event_dict

        configure_logging(include_timestamp=False, include_caller=True, extra_processors=[tag])
        processors = structlog.get_config()["processors"]
        assert not any(isinstance(p, structlog.processors.TimeStamper) for p in processors)
        assert any(isinstance(p, structlog.processors.CallsiteParameterAdder) for p in processors)
        assert processors.index(tag) == len(processors) - 2
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_unknown_level(self) -> None:
        """Test an unknown level name is rejected."""
        with pytest.raises(AttributeError):
            configure_logging(level="LOUD")


class TestComputationLogging:
    """Test subsystem loggers and the computation event."""

    def test_log_computation_fields(self) -> None:
        """Test the event carries subsystem, computation and context."""
        with capture_logs() as logs:
            logger = get_analytics_logger("tests")
            log_computation(logger, "nvt_signal", "BTC", 42, context={"band_window": 90})

        assert len(logs) == 1
        entry = logs[0]
        assert entry["event"] == "Computation finished"
        assert entry["log_level"] == "info"
        assert entry["subsystem"] == "analytics"
        assert entry["computation"] == "nvt_signal"
        assert entry["asset_id"] == "BTC"
        assert entry["points"] == 42
        assert entry["context"] == {"band_window": 90}

    def test_risk_logger_subsystem(self) -> None:
        """Test the risk logger binds its own subsystem."""
        with capture_logs() as logs:
            get_risk_logger("tests").debug("Simulation batch", batch=3)

        assert logs[0]["subsystem"] == "risk"
        assert logs[0]["batch"] == 3
