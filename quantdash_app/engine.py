"""
Main analytics engine coordinator.

Resolves per-asset configuration, runs the requested computation and logs a
summary of the result. Pipelines:

    prices + volumes → Aligner → SupplyModel → SignalBandEngine
    providers → first_available → YieldCurveInterpolator
    MonteCarloParams → MonteCarloRiskEngine
"""

from dataclasses import fields
from datetime import date
from typing import Any, Callable, Mapping, Optional, Sequence, TypeVar

import numpy as np

from .config.defaults import (
    IndicatorParams,
    MonteCarloParams,
    RollingParams,
    SignalBandParams,
    SupplyParams,
    YieldCurveParams,
)
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .curves.sources import Provider, first_available
from .curves.yield_curve import YieldCurveInterpolator
from .data.aligner import merge
from .data.models import SignalBandResult, SimulationResult, TimePoint, YieldCurve
from .errors import (
    DataQualityError,
    MalformedDataError,
    MetricsCalculationError,
    MissingDataError,
    ParameterError,
    SystemFailureError,
)
from .logging.config import get_analytics_logger, log_computation
from .metrics.indicators import (
    HeatmapRow,
    MVRVProxies,
    PiCycleRow,
    TechnicalIndicators,
    ma_heatmap,
    mvrv_proxies,
    pi_cycle,
    technical_indicators,
)
from .metrics.signal_bands import SignalBandEngine
from .metrics.supply import StockToFlowRow, SupplyModel
from .risk.monte_carlo import MonteCarloRiskEngine

logger = get_analytics_logger(__name__)

T = TypeVar("T")

# Raised deliberately by the components and passed through unchanged
_KNOWN_ERRORS = (DataQualityError, SystemFailureError, ParameterError)


def _freeze(value: Any) -> Any:
    """YAML lists become tuples so params stay hashable and immutable."""
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _bar_fields(bar: Any) -> tuple[date, Any, Any]:
    if isinstance(bar, Mapping):
        try:
            return bar["date"], bar["close"], bar["volume"]
        except KeyError as e:
            raise MalformedDataError(
                f"Price bar is missing {e}",
                raw_data=repr(bar)[:100],
                expected_format="{date, close, volume}"
            )
    try:
        day, close, volume = bar
    except (TypeError, ValueError):
        raise MalformedDataError(
            f"Expected (date, close, volume), got {bar!r}",
            raw_data=repr(bar)[:100],
            expected_format="(date, close, volume)"
        )
    return day, close, volume


def _financial_volume(close: Any, volume: Any) -> float:
    """close * volume, NaN (dropped by the aligner) when either is missing."""
    if close is None or volume is None:
        return float("nan")
    return float(close) * float(volume)


class AnalyticsEngine:
    """
    Coordinator for the dashboard analytics computations.

    Every public method resolves configuration with 3-tier precedence
    (defaults < assets.yaml < per-call overrides) and returns immutable
    result objects. Serialization is left to quantdash_app.output.
    """

    def __init__(self, config_dir: Optional[str] = None) -> None:
        self.logger = logger
        self.config_loader = ConfigLoader.create(config_dir)
        self.logger.info("Analytics engine initialized", config_dir=str(self.config_loader.config_dir))

    def _load_config(self, asset_id: str, overrides: Optional[dict[str, Any]]) -> dict[str, Any]:
        merged = self.config_loader.merge_config(asset_id, overrides)

        errors = ConfigValidator.validate_config(merged)
        if errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in errors]
            self.logger.error("Configuration validation failed", asset_id=asset_id, errors=error_msgs)
            raise ParameterError(
                f"Invalid configuration for {asset_id}: {'; '.join(error_msgs)}",
                parameter=errors[0].field,
                value=errors[0].value
            )
        return merged

    def _section(self, merged: dict[str, Any], key: str, cls: type[T]) -> T:
        values = merged.get(key) or {}
        known = {f.name for f in fields(cls)}

        unknown = sorted(set(values) - known)
        if unknown:
            self.logger.warning("Ignoring unknown configuration keys", section=key, keys=unknown)

        return cls(**{k: _freeze(v) for k, v in values.items() if k in known})

    def _guarded(self, computation: str, asset_id: str, func: Callable[[], T]) -> T:
        try:
            return func()
        except _KNOWN_ERRORS:
            raise
        except Exception as e:
            self.logger.error(
                "Unexpected error during computation",
                computation=computation,
                asset_id=asset_id,
                error=str(e),
                exc_info=True
            )
            raise MetricsCalculationError(
                f"{computation} failed for {asset_id}: {e}",
                metric_name=computation,
                calculation_input={"asset_id": asset_id}
            ) from e

    def nvt_signal(
        self,
        prices: Sequence[Any],
        volumes: Sequence[Any],
        asset_id: str = "BTC",
        overrides: Optional[dict[str, Any]] = None,
        as_of: Optional[date] = None,
    ) -> SignalBandResult:
        """
        Network value to transactions signal with volatility bands.

        Network value is price times the modeled circulating supply at each
        date; the denominator is the on-chain (or exchange) volume.

        Args:
            prices: (date, price) observations
            volumes: (date, volume) observations
            asset_id: Asset whose configuration overrides apply
            overrides: Per-call configuration overrides
            as_of: End of the display window

        Returns:
            SignalBandResult over the trailing display window
        """
        def run() -> SignalBandResult:
            merged = self._load_config(asset_id, overrides)
            signal_params = self._section(merged, "signal", SignalBandParams)
            supply = SupplyModel.from_params(self._section(merged, "supply", SupplyParams))

            aligned = merge(prices, volumes, names=("price", "volume"))
            engine = SignalBandEngine.from_params(signal_params)
            result = engine.compute_signal(aligned, supply.supply_at, as_of=as_of)

            log_computation(self.logger, "nvt_signal", asset_id, len(result.points), {
                "aligned_points": len(aligned),
                "computed_points": result.computed_points,
                "latest_zone": result.latest_zone.value,
            })
            return result

        return self._guarded("nvt_signal", asset_id, run)

    def equity_nvt_signal(
        self,
        history: Sequence[Any],
        market_cap: Optional[float],
        asset_id: str,
        overrides: Optional[dict[str, Any]] = None,
        as_of: Optional[date] = None,
    ) -> SignalBandResult:
        """
        NVT analogue for a listed company.

        Financial volume is close * volume per bar. Shares outstanding are
        market_cap / last close and are held constant over the history.

        Args:
            history: Bars as {date, close, volume} mappings or 3-tuples
            market_cap: Current market capitalization
            asset_id: Ticker whose configuration overrides apply

        Raises:
            MissingDataError: market_cap is absent or not positive
        """
        def run() -> SignalBandResult:
            if market_cap is None or not market_cap > 0:
                raise MissingDataError(
                    f"Market capitalization unavailable for {asset_id}",
                    data_type="market_cap",
                    context={"asset_id": asset_id, "market_cap": market_cap}
                )

            merged = self._load_config(asset_id, overrides)
            signal_params = self._section(merged, "signal", SignalBandParams)

            closes: list[TimePoint] = []
            financial_volume: list[TimePoint] = []
            for bar in history:
                day, close, volume = _bar_fields(bar)
                closes.append(TimePoint.coerce((day, close)))
                financial_volume.append(TimePoint.coerce((day, _financial_volume(close, volume))))

            aligned = merge(closes, financial_volume, names=("price", "financial_volume"))
            if len(aligned) == 0:
                raise MissingDataError(
                    f"No valid price history for {asset_id}",
                    data_type="price_history"
                )
            shares = market_cap / aligned.rows[-1].values[0]

            engine = SignalBandEngine.from_params(signal_params)
            result = engine.compute_signal(aligned, shares, as_of=as_of)

            log_computation(self.logger, "equity_nvt_signal", asset_id, len(result.points), {
                "aligned_points": len(aligned),
                "shares_outstanding": shares,
                "latest_zone": result.latest_zone.value,
            })
            return result

        return self._guarded("equity_nvt_signal", asset_id, run)

    def yield_curve(
        self,
        providers: Sequence[tuple[str, Provider]],
        asset_id: str = "US",
        overrides: Optional[dict[str, Any]] = None,
    ) -> YieldCurve:
        """Interpolate the first available provider's points onto the configured tenors."""
        def run() -> YieldCurve:
            merged = self._load_config(asset_id, overrides)
            params = self._section(merged, "yield_curve", YieldCurveParams)

            source, known = first_available(providers)
            points = YieldCurveInterpolator.from_params(params).interpolate(known)

            log_computation(self.logger, "yield_curve", asset_id, len(points), {
                "source": source,
                "known_points": len(known),
            })
            return YieldCurve(source=source, points=tuple(points))

        return self._guarded("yield_curve", asset_id, run)

    def risk_simulation(
        self,
        overrides: Optional[dict[str, Any]] = None,
        rng: Optional[np.random.Generator] = None,
        asset_id: str = "default",
    ) -> SimulationResult:
        """
        Monte Carlo tail-risk simulation.

        Pass a seeded generator (or set monte_carlo.seed) for reproducible
        results.
        """
        def run() -> SimulationResult:
            merged = self._load_config(asset_id, overrides)
            params = self._section(merged, "monte_carlo", MonteCarloParams)

            engine = MonteCarloRiskEngine.from_params(params, rng=rng)
            result = engine.simulate(
                num_paths=params.num_paths,
                horizon_days=params.horizon_days,
                initial_value=params.initial_value,
                annual_drift_pct=params.annual_drift_pct,
                annual_vol_pct=params.annual_vol_pct,
                confidence_levels=params.confidence_levels,
            )

            log_computation(self.logger, "risk_simulation", asset_id, result.num_paths, {
                "horizon_days": result.horizon_days,
                "max_drawdown": result.max_drawdown,
            })
            return result

        return self._guarded("risk_simulation", asset_id, run)

    def pi_cycle(self, points: Sequence[Any], asset_id: str = "BTC",
                 overrides: Optional[dict[str, Any]] = None) -> list[PiCycleRow]:
        def run() -> list[PiCycleRow]:
            params = self._section(self._load_config(asset_id, overrides), "indicators", IndicatorParams)
            rows = pi_cycle(
                points,
                short_window=params.pi_short_window,
                long_window=params.pi_long_window,
                long_mult=params.pi_long_mult,
                top_ratio=params.pi_top_ratio,
                bottom_ratio=params.pi_bottom_ratio,
            )
            log_computation(self.logger, "pi_cycle", asset_id, len(rows))
            return rows

        return self._guarded("pi_cycle", asset_id, run)

    def ma_heatmap(self, points: Sequence[Any], asset_id: str = "BTC",
                   overrides: Optional[dict[str, Any]] = None) -> list[HeatmapRow]:
        def run() -> list[HeatmapRow]:
            params = self._section(self._load_config(asset_id, overrides), "indicators", IndicatorParams)
            rows = ma_heatmap(points, period=params.heatmap_period,
                              change_lag=params.heatmap_change_lag)
            log_computation(self.logger, "ma_heatmap", asset_id, len(rows))
            return rows

        return self._guarded("ma_heatmap", asset_id, run)

    def stock_to_flow(self, points: Sequence[Any], asset_id: str = "BTC",
                      overrides: Optional[dict[str, Any]] = None) -> list[StockToFlowRow]:
        def run() -> list[StockToFlowRow]:
            params = self._section(self._load_config(asset_id, overrides), "supply", SupplyParams)
            rows = SupplyModel.from_params(params).model_series(points)
            log_computation(self.logger, "stock_to_flow", asset_id, len(rows))
            return rows

        return self._guarded("stock_to_flow", asset_id, run)

    def mvrv(self, points: Sequence[Any], asset_id: str = "BTC",
             overrides: Optional[dict[str, Any]] = None) -> MVRVProxies:
        def run() -> MVRVProxies:
            params = self._section(self._load_config(asset_id, overrides), "indicators", IndicatorParams)
            proxies = mvrv_proxies(points, sth_window=params.mvrv_sth_window,
                                   z_window=params.mvrv_z_window)
            log_computation(self.logger, "mvrv", asset_id, len(proxies.sth_mvrv), {
                "z_score_points": len(proxies.z_score),
            })
            return proxies

        return self._guarded("mvrv", asset_id, run)

    def technical_indicators(self, points: Sequence[Any], asset_id: str = "BTC",
                             overrides: Optional[dict[str, Any]] = None) -> TechnicalIndicators:
        """SMA, EMA, RSI, Bollinger bands, MACD and annualized volatility for one series."""
        def run() -> TechnicalIndicators:
            merged = self._load_config(asset_id, overrides)
            rolling = self._section(merged, "rolling", RollingParams)
            params = self._section(merged, "indicators", IndicatorParams)
            result = technical_indicators(
                points,
                sma_window=rolling.sma_window,
                ema_window=rolling.ema_window,
                rsi_period=params.rsi_period,
                bollinger_period=params.bollinger_period,
                bollinger_std_mult=params.bollinger_std_mult,
                volatility_period=params.volatility_period,
                periods_per_year=params.volatility_periods_per_year,
            )
            log_computation(self.logger, "technical_indicators", asset_id, len(result.dates), {
                "volatility_pct": result.volatility_pct,
            })
            return result

        return self._guarded("technical_indicators", asset_id, run)
