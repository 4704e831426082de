"""Unit tests for the analytics engine coordinator."""

from datetime import date, timedelta

import numpy as np
import pytest

from quantdash_app.curves.yield_curve import make_point
from quantdash_app.data.models import SignalBandResult, YieldCurve, Zone
from quantdash_app.engine import AnalyticsEngine
from quantdash_app.errors import (
    InsufficientDataError,
    MalformedDataError,
    MetricsCalculationError,
    MissingDataError,
    ParameterError,
)


@pytest.fixture
def engine() -> AnalyticsEngine:
    return AnalyticsEngine()


class TestEngineInitialization:
    """Test engine setup."""

    def test_engine_creation(self, engine):
        """Test that the engine resolves the shipped config directory."""
        assert engine.config_loader.config_dir.name == "config"

    def test_custom_config_dir(self, tmp_path):
        """Test a custom configuration directory."""
        engine = AnalyticsEngine(config_dir=str(tmp_path))
        assert engine.config_loader.config_dir == tmp_path


class TestNVTSignal:
    """Test the network value signal pipeline."""

    def test_nvt_signal(self, engine, btc_history):
        """Test a full run over three years of data."""
        prices, volumes = btc_history
        result = engine.nvt_signal(prices, volumes)

        assert isinstance(result, SignalBandResult)
        assert result.points
        assert result.as_of == prices[-1][0]
        assert result.latest_zone in set(Zone)
        # Display window is the trailing two years
        assert result.points[0].date >= date(result.as_of.year - 2, result.as_of.month, result.as_of.day)
        for point in result.points:
            assert point.lower_band >= 0.0

    def test_overrides_change_windows(self, engine, btc_history):
        """Test per-call overrides reach the signal engine."""
        prices, volumes = btc_history
        default = engine.nvt_signal(prices, volumes)
        short = engine.nvt_signal(prices, volumes, overrides={"signal": {"band_window": 30}})
        assert short.computed_points > default.computed_points

    def test_short_history(self, engine, make_series):
        """Test too little history raises InsufficientDataError."""
        prices = make_series([100.0] * 50)
        volumes = make_series([10.0] * 50)
        with pytest.raises(InsufficientDataError):
            engine.nvt_signal(prices, volumes)

    def test_invalid_override(self, engine, btc_history):
        """Test invalid configuration is rejected before computing."""
        prices, volumes = btc_history
        with pytest.raises(ParameterError) as exc_info:
            engine.nvt_signal(prices, volumes, overrides={"signal": {"primary_window": 1}})
        assert exc_info.value.parameter == "primary_window"


class TestEquityNVTSignal:
    """Test the listed-company signal pipeline."""

    def test_equity_signal(self, engine, equity_history):
        """Test shares derived from market cap and last close."""
        result = engine.equity_nvt_signal(equity_history, market_cap=3.0e9, asset_id="PETR4")
        assert result.points
        assert result.computed_points == len(equity_history) - 90 - 90 + 2

    def test_tuple_bars(self, engine, equity_history):
        """Test bars given as (date, close, volume) tuples."""
        bars = [(b["date"], b["close"], b["volume"]) for b in equity_history]
        from_dicts = engine.equity_nvt_signal(equity_history, 3.0e9, "PETR4")
        from_tuples = engine.equity_nvt_signal(bars, 3.0e9, "PETR4")
        assert from_dicts == from_tuples

    @pytest.mark.parametrize("market_cap", [None, 0.0])
    def test_missing_market_cap(self, engine, equity_history, market_cap):
        """Test a missing market cap raises MissingDataError."""
        with pytest.raises(MissingDataError) as exc_info:
            engine.equity_nvt_signal(equity_history, market_cap, "PETR4")
        assert exc_info.value.data_type == "market_cap"

    def test_malformed_bar(self, engine):
        """Test bars missing fields are rejected."""
        with pytest.raises(MalformedDataError):
            engine.equity_nvt_signal([{"date": date(2024, 1, 1), "close": 1.0}], 1.0e9, "X")

    def test_min_points_from_asset_config(self, engine, equity_history):
        """Test PETR4 requires 120 aligned rows."""
        with pytest.raises(InsufficientDataError) as exc_info:
            engine.equity_nvt_signal(equity_history[:110], 3.0e9, "PETR4",
                                     overrides={"signal": {"primary_window": 10, "band_window": 10}})
        assert exc_info.value.required_count == 120


class TestYieldCurve:
    """Test the yield curve pipeline."""

    def test_yield_curve_with_fallback(self, engine, us_known_yields):
        """Test the fallback provider feeds the interpolator."""
        def broken():
            raise TimeoutError("no response")

        fallback = [make_point(k, v) for k, v in us_known_yields.items()]
        curve = engine.yield_curve([("primary", broken), ("static", lambda: fallback)])

        assert isinstance(curve, YieldCurve)
        assert curve.source == "static"
        assert len(curve.points) == 11
        assert curve.as_mapping()["10y"] == 4.30

    def test_asset_targets(self, engine, us_known_yields):
        """Test BR uses its own target maturities."""
        points = [make_point(k, v) for k, v in us_known_yields.items()]
        curve = engine.yield_curve([("static", lambda: points)], asset_id="BR")
        assert [p.maturity for p in curve.points][-1] == "5y"
        assert len(curve.points) == 7

    def test_no_provider(self, engine):
        """Test every provider failing raises MissingDataError."""
        with pytest.raises(MissingDataError):
            engine.yield_curve([("empty", lambda: [])])


class TestRiskSimulation:
    """Test the Monte Carlo pipeline."""

    def test_risk_simulation(self, engine):
        """Test a seeded run with small overrides."""
        result = engine.risk_simulation(
            overrides={"monte_carlo": {"num_paths": 200, "horizon_days": 30}},
            rng=np.random.default_rng(1),
        )
        assert result.num_paths == 200
        assert result.horizon_days == 30
        assert set(result.cvar) == {0.95, 0.99}

    def test_yaml_list_levels(self, engine):
        """Test list-valued overrides are accepted."""
        result = engine.risk_simulation(
            overrides={"monte_carlo": {"num_paths": 100, "horizon_days": 5,
                                       "confidence_levels": [0.9]}},
            rng=np.random.default_rng(2),
        )
        assert list(result.cvar) == [0.9]

    def test_seed_override(self, engine):
        """Test a configured seed makes runs reproducible."""
        overrides = {"monte_carlo": {"num_paths": 100, "horizon_days": 10, "seed": 5}}
        assert engine.risk_simulation(overrides) == engine.risk_simulation(overrides)

    def test_asset_overrides(self, engine):
        """Test per-asset simulation settings."""
        result = engine.risk_simulation(
            overrides={"monte_carlo": {"horizon_days": 5}},
            rng=np.random.default_rng(3),
            asset_id="RISK_DEMO",
        )
        assert result.num_paths == 2000


class TestIndicatorWrappers:
    """Test the thin indicator wrappers."""

    def test_pi_cycle(self, engine, btc_history):
        """Test Pi Cycle rows start once the long average exists."""
        prices, _ = btc_history
        rows = engine.pi_cycle(prices)
        assert len(rows) == len(prices) - 349

    def test_ma_heatmap_override(self, engine, btc_history):
        """Test heatmap period override."""
        prices, _ = btc_history
        rows = engine.ma_heatmap(prices, overrides={"indicators": {"heatmap_period": 10}})
        assert len(rows) == len(prices) - 9

    def test_ma_heatmap_invalid_lag(self, engine, btc_history):
        """Test a zero change lag is rejected as configuration."""
        prices, _ = btc_history
        with pytest.raises(ParameterError) as exc_info:
            engine.ma_heatmap(prices, overrides={"indicators": {"heatmap_change_lag": 0}})
        assert exc_info.value.parameter == "heatmap_change_lag"

    def test_stock_to_flow(self, engine, btc_history):
        """Test one model row per price."""
        prices, _ = btc_history
        rows = engine.stock_to_flow(prices)
        assert len(rows) == len(prices)
        assert all(r.model_price > 0 for r in rows)

    def test_mvrv(self, engine, btc_history):
        """Test monthly proxies are produced."""
        prices, _ = btc_history
        proxies = engine.mvrv(prices)
        assert proxies.sth_mvrv
        assert proxies.z_score

    def test_technical_indicators(self, engine, btc_history):
        """Test rolling and indicator params reach the overlays."""
        prices, _ = btc_history
        result = engine.technical_indicators(prices, overrides={"rolling": {"sma_window": 50}})
        assert len(result.dates) == len(prices)
        assert result.sma[48] is None
        assert result.sma[49] is not None
        assert result.volatility_pct is not None


class TestErrorWrapping:
    """Test unexpected failures become MetricsCalculationError."""

    def test_unexpected_error_wrapped(self, engine):
        """Test an unparseable volume surfaces as MetricsCalculationError."""
        bars = [(date(2024, 1, 1) + timedelta(days=i), 10.0, "n/a") for i in range(5)]
        with pytest.raises(MetricsCalculationError) as exc_info:
            engine.equity_nvt_signal(bars, 1.0e9, "X")
        assert exc_info.value.metric_name == "equity_nvt_signal"
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_non_numeric_close_is_malformed(self, engine):
        """Test a string close is rejected as malformed input."""
        bars = [(date(2024, 1, 1) + timedelta(days=i), "n/a", 10.0) for i in range(5)]
        with pytest.raises(MalformedDataError):
            engine.equity_nvt_signal(bars, 1.0e9, "X")
