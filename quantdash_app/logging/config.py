"""
Centralized logging configuration for the QuantDash analytics core.

This module provides standardized logging configuration using structlog.
Numeric helpers stay silent; the engine, the provider chain and the
simulation layer log through the loggers created here so every event carries
the same structured fields.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    # Map the level name onto the stdlib constant
    log_level = getattr(logging, level.upper())

    # Stdlib logging only carries the rendered line
    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    # Shared processor chain for every analytics logger
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    # Optional timestamp and callsite fields
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    # Caller-supplied processors run before rendering
    if extra_processors:
        processors.extend(extra_processors)

    # Renderer goes last
    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    # Install globally; loggers are cached on first use
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_analytics_logger(name: str) -> FilteringBoundLogger:
    """Logger bound to the signal / curve analytics subsystem."""
    return get_logger(name).bind(subsystem="analytics")


def get_risk_logger(name: str) -> FilteringBoundLogger:
    """Logger bound to the Monte Carlo risk subsystem."""
    return get_logger(name).bind(subsystem="risk")


def log_computation(
    logger: FilteringBoundLogger,
    computation: str,
    asset_id: str,
    points: int,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a finished analytics computation with standardized format.

    Args:
        logger: Structlog logger instance
        computation: Name of the computation (e.g. "nvt_signal")
        asset_id: Asset or curve identifier the computation ran for
        points: Number of output rows produced
        context: Additional context data (window sizes, source name, ...)
    """
    bound_logger = logger.bind(
        computation=computation,
        asset_id=asset_id,
        points=points,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("Computation finished")
