"""
Monte Carlo price-path simulation for tail-risk estimation.

Simulates independent daily-compounded paths with normally distributed
returns (value *= 1 + mu_daily + sigma_daily * z) and derives the terminal
return distribution, CVaR at one or more confidence levels, and the maximum
drawdown distribution.

Usage:
    engine = MonteCarloRiskEngine(rng=np.random.default_rng(7))
    result = engine.simulate(
        num_paths=1000, horizon_days=252, initial_value=10_000,
        annual_drift_pct=5.0, annual_vol_pct=60.0,
    )
    result.cvar_at(0.95)

Statistics are always taken over every simulated path. Only the first
`max_stored_paths` paths are kept for charting.
"""

import math
from typing import Optional, Sequence

import numpy as np

from ..config.defaults import MonteCarloParams
from ..data.models import SimulationResult
from ..errors import SimulationParameterError
from ..logging.config import get_risk_logger

logger = get_risk_logger(__name__)

# Guards floor(n * (1 - c)) against 1 - 0.9 == 0.09999999999999998
_TAIL_EPSILON = 1e-9


def tail_count(num_outcomes: int, confidence: float) -> int:
    """Number of worst outcomes averaged for CVaR at a confidence level (>= 1)."""
    return max(1, math.floor(num_outcomes * (1.0 - confidence) + _TAIL_EPSILON))


def conditional_value_at_risk(returns: np.ndarray, confidence: float) -> float:
    """
    Mean of the worst (1 - confidence) fraction of returns.

    Args:
        returns: Terminal returns (any order)
        confidence: Level in (0, 1), e.g. 0.95

    Returns:
        CVaR as a return fraction (negative for losses)
    """
    ordered = np.sort(np.asarray(returns, dtype=np.float64))
    count = tail_count(len(ordered), confidence)
    return float(np.mean(ordered[:count]))


def _require(condition: bool, message: str, parameter: str, value) -> None:
    if not condition:
        raise SimulationParameterError(message, parameter=parameter, value=value)


def _finite_number(value) -> bool:
    return isinstance(value, (int, float, np.floating, np.integer)) and not isinstance(value, bool) \
        and math.isfinite(value)


class MonteCarloRiskEngine:
    """Stochastic path simulator with an injectable random generator"""

    def __init__(self, rng: Optional[np.random.Generator] = None,
                 max_stored_paths: int = 50, trading_days: int = 252,
                 batch_size: int = 10_000):
        if max_stored_paths < 0:
            raise SimulationParameterError(
                "max_stored_paths must be non-negative",
                parameter="max_stored_paths", value=max_stored_paths
            )
        if trading_days <= 0 or batch_size <= 0:
            raise SimulationParameterError(
                "trading_days and batch_size must be positive",
                parameter="trading_days" if trading_days <= 0 else "batch_size",
                value=trading_days if trading_days <= 0 else batch_size
            )
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_stored_paths = max_stored_paths
        self.trading_days = trading_days
        self.batch_size = batch_size

    @classmethod
    def from_params(cls, params: MonteCarloParams,
                    rng: Optional[np.random.Generator] = None) -> "MonteCarloRiskEngine":
        if rng is None:
            rng = np.random.default_rng(params.seed)
        return cls(rng=rng, max_stored_paths=params.max_stored_paths,
                   trading_days=params.trading_days)

    def _validate(self, num_paths, horizon_days, initial_value, annual_drift_pct,
                  annual_vol_pct, confidence_levels) -> None:
        _require(isinstance(num_paths, (int, np.integer)) and not isinstance(num_paths, bool)
                 and num_paths > 0,
                 f"num_paths must be a positive integer, got {num_paths!r}", "num_paths", num_paths)
        _require(isinstance(horizon_days, (int, np.integer)) and not isinstance(horizon_days, bool)
                 and horizon_days > 0,
                 f"horizon_days must be a positive integer, got {horizon_days!r}",
                 "horizon_days", horizon_days)
        _require(_finite_number(initial_value) and initial_value > 0,
                 f"initial_value must be a positive number, got {initial_value!r}",
                 "initial_value", initial_value)
        _require(_finite_number(annual_drift_pct),
                 f"annual_drift_pct must be finite, got {annual_drift_pct!r}",
                 "annual_drift_pct", annual_drift_pct)
        _require(_finite_number(annual_vol_pct) and annual_vol_pct >= 0,
                 f"annual_vol_pct must be a non-negative number, got {annual_vol_pct!r}",
                 "annual_vol_pct", annual_vol_pct)
        _require(len(confidence_levels) > 0,
                 "At least one confidence level is required", "confidence_levels", confidence_levels)
        for level in confidence_levels:
            _require(_finite_number(level) and 0 < level < 1,
                     f"Confidence levels must lie in (0, 1), got {level!r}",
                     "confidence_levels", level)

    def simulate(self, num_paths: int, horizon_days: int, initial_value: float,
                 annual_drift_pct: float, annual_vol_pct: float,
                 confidence_levels: Sequence[float] = (0.95, 0.99)) -> SimulationResult:
        """
        Run the simulation and aggregate statistics.

        Args:
            num_paths: Number of independent paths
            horizon_days: Simulated trading days per path
            initial_value: Portfolio value at day 0
            annual_drift_pct: Expected annual return in percent (5.0 = 5%)
            annual_vol_pct: Annual volatility in percent (60.0 = 60%)
            confidence_levels: CVaR levels, e.g. (0.95, 0.99)

        Returns:
            SimulationResult with fractional returns and drawdowns

        Raises:
            SimulationParameterError: On parameters that cannot produce a
                meaningful distribution
        """
        confidence_levels = tuple(confidence_levels)
        self._validate(num_paths, horizon_days, initial_value, annual_drift_pct,
                       annual_vol_pct, confidence_levels)

        mu_daily = annual_drift_pct / 100.0 / self.trading_days
        sigma_daily = annual_vol_pct / 100.0 / math.sqrt(self.trading_days)

        logger.debug(
            "Starting simulation",
            num_paths=num_paths,
            horizon_days=horizon_days,
            mu_daily=mu_daily,
            sigma_daily=sigma_daily,
        )

        final_values = np.empty(num_paths, dtype=np.float64)
        max_drawdowns = np.empty(num_paths, dtype=np.float64)
        stored_paths: list[tuple] = []
        to_store = min(num_paths, self.max_stored_paths)

        done = 0
        while done < num_paths:
            batch = min(self.batch_size, num_paths - done)

            z = self.rng.standard_normal((batch, horizon_days))
            factors = 1.0 + mu_daily + sigma_daily * z

            paths = np.empty((batch, horizon_days + 1), dtype=np.float64)
            paths[:, 0] = initial_value
            paths[:, 1:] = initial_value * np.cumprod(factors, axis=1)

            running_peak = np.maximum.accumulate(paths, axis=1)
            drawdowns = (running_peak - paths) / running_peak

            final_values[done:done + batch] = paths[:, -1]
            max_drawdowns[done:done + batch] = drawdowns.max(axis=1)

            if len(stored_paths) < to_store:
                keep = min(batch, to_store - len(stored_paths))
                stored_paths.extend(tuple(float(v) for v in row) for row in paths[:keep])

            done += batch

        returns = (final_values - initial_value) / initial_value
        p5, p95 = np.percentile(returns, [5, 95])

        result = SimulationResult(
            num_paths=num_paths,
            horizon_days=horizon_days,
            initial_value=float(initial_value),
            mean_return=float(np.mean(returns)),
            median_return=float(np.median(returns)),
            percentile_5=float(p5),
            percentile_95=float(p95),
            cvar={level: conditional_value_at_risk(returns, level) for level in confidence_levels},
            max_drawdown=float(np.max(max_drawdowns)),
            drawdown_percentiles={
                50: float(np.percentile(max_drawdowns, 50)),
                95: float(np.percentile(max_drawdowns, 95)),
            },
            paths=tuple(stored_paths),
        )

        logger.debug(
            "Simulation finished",
            num_paths=num_paths,
            mean_return=result.mean_return,
            max_drawdown=result.max_drawdown,
        )
        return result
