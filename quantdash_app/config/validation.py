"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

from ..curves.yield_curve import maturity_to_years
from ..errors import MalformedDataError


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_signal_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate signal band parameters."""
        errors = []

        for name in ("primary_window", "band_window"):
            if name in params:
                value = params[name]
                if not isinstance(value, int) or isinstance(value, bool) or value < 2:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be an integer >= 2",
                        value=value
                    ))

        if "band_std_mult" in params:
            value = params["band_std_mult"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="band_std_mult",
                    message="Must be a positive number",
                    value=value
                ))

        if "min_points" in params:
            value = params["min_points"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                errors.append(ValidationError(
                    field="min_points",
                    message="Must be a positive integer",
                    value=value
                ))

        if "clamp_lower" in params:
            value = params["clamp_lower"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="clamp_lower",
                    message="Must be a boolean",
                    value=value
                ))

        if "display_years" in params:
            value = params["display_years"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="display_years",
                    message="Must be a non-negative integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_monte_carlo_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate Monte Carlo simulation parameters."""
        errors = []

        for name in ("num_paths", "horizon_days", "trading_days"):
            if name in params:
                value = params[name]
                if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive integer",
                        value=value
                    ))

        if "max_stored_paths" in params:
            value = params["max_stored_paths"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="max_stored_paths",
                    message="Must be a non-negative integer",
                    value=value
                ))

        if "initial_value" in params:
            value = params["initial_value"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="initial_value",
                    message="Must be a positive number",
                    value=value
                ))

        if "annual_vol_pct" in params:
            value = params["annual_vol_pct"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="annual_vol_pct",
                    message="Must be a non-negative number",
                    value=value
                ))

        if "annual_drift_pct" in params:
            value = params["annual_drift_pct"]
            if not _is_number(value):
                errors.append(ValidationError(
                    field="annual_drift_pct",
                    message="Must be a number",
                    value=value
                ))

        if "confidence_levels" in params:
            value = params["confidence_levels"]
            if (not isinstance(value, (list, tuple)) or not value
                    or not all(_is_number(c) and 0 < c < 1 for c in value)):
                errors.append(ValidationError(
                    field="confidence_levels",
                    message="Must be a non-empty list of numbers in (0, 1)",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_yield_curve_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate yield curve target maturities."""
        errors = []

        if "target_maturities" in params:
            value = params["target_maturities"]
            if not isinstance(value, (list, tuple)) or not value:
                errors.append(ValidationError(
                    field="target_maturities",
                    message="Must be a non-empty list of maturity keys",
                    value=value
                ))
            else:
                for key in value:
                    try:
                        maturity_to_years(key)
                    except MalformedDataError:
                        errors.append(ValidationError(
                            field="target_maturities",
                            message="Unparseable maturity key",
                            value=key
                        ))

        return errors

    @staticmethod
    def validate_rolling_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate moving-average window sizes."""
        return ConfigValidator._check_windows(params, ("sma_window", "ema_window"))

    @staticmethod
    def validate_indicator_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate cycle and oscillator indicator parameters."""
        errors = ConfigValidator._check_windows(params, (
            "pi_short_window", "pi_long_window", "heatmap_period",
            "mvrv_sth_window", "mvrv_z_window", "rsi_period",
            "bollinger_period", "volatility_period",
        ))

        for name in ("heatmap_change_lag", "volatility_periods_per_year"):
            if name in params:
                value = params[name]
                if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive integer",
                        value=value
                    ))

        for name in ("pi_long_mult", "pi_top_ratio", "pi_bottom_ratio", "bollinger_std_mult"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive number",
                        value=value
                    ))

        # Zones overlap unless bottom sits strictly below top
        top, bottom = params.get("pi_top_ratio"), params.get("pi_bottom_ratio")
        if _is_number(top) and _is_number(bottom) and 0 < top <= bottom:
            errors.append(ValidationError(
                field="pi_bottom_ratio",
                message="Must be below pi_top_ratio",
                value=bottom
            ))

        return errors

    @staticmethod
    def _check_windows(params: dict[str, Any], names: tuple) -> list[ValidationError]:
        errors = []
        for name in names:
            if name in params:
                value = params[name]
                if not isinstance(value, int) or isinstance(value, bool) or value < 2:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be an integer >= 2",
                        value=value
                    ))
        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "signal" in config:
            errors.extend(ConfigValidator.validate_signal_params(config["signal"]))

        if "monte_carlo" in config:
            errors.extend(ConfigValidator.validate_monte_carlo_params(config["monte_carlo"]))

        if "yield_curve" in config:
            errors.extend(ConfigValidator.validate_yield_curve_params(config["yield_curve"]))

        if "rolling" in config:
            errors.extend(ConfigValidator.validate_rolling_params(config["rolling"]))

        if "indicators" in config:
            errors.extend(ConfigValidator.validate_indicator_params(config["indicators"]))

        return errors
