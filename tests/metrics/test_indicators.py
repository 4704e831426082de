"""Tests for cycle and oscillator indicators."""

import math
from datetime import date

import pytest

from quantdash_app.errors import TemporalDataError, WindowParameterError
from quantdash_app.metrics.indicators import (
    CycleZone,
    annualized_volatility,
    bollinger_bands,
    ma_heatmap,
    macd,
    mvrv_proxies,
    pi_cycle,
    rsi,
    technical_indicators,
)
from quantdash_app.utils.time import month_key


class TestOscillators:
    """Test RSI, MACD, Bollinger bands and volatility."""

    def test_rsi_all_gains(self):
        """Test RSI is 100 when there are no losses."""
        result = rsi([float(i) for i in range(20)], period=14)
        assert result[:14] == [None] * 14
        assert result[14] == 100.0
        assert result[-1] == 100.0

    def test_rsi_bounded(self):
        """Test RSI stays within [0, 100] on a noisy series."""
        values = [100 + 10 * math.sin(i / 3.0) for i in range(60)]
        for value in rsi(values, period=14)[14:]:
            assert 0.0 <= value <= 100.0

    def test_rsi_short_series(self):
        """Test RSI is undefined without period + 1 values."""
        assert rsi([1.0, 2.0, 3.0], period=14) == [None, None, None]

    def test_bollinger_constant_series(self):
        """Test bands collapse on a constant series."""
        bands = bollinger_bands([5.0] * 25, period=20)
        assert bands.middle[18] is None
        assert bands.upper[19] == bands.middle[19] == bands.lower[19] == 5.0

    def test_macd_constant_series(self):
        """Test MACD and histogram vanish on a constant series."""
        result = macd([10.0] * 40)
        assert result.macd[-1] == pytest.approx(0.0)
        assert result.histogram[-1] == pytest.approx(0.0)

    def test_annualized_volatility(self):
        """Test annualized volatility in percent."""
        assert annualized_volatility([100.0] * 31, period=30) == 0.0
        assert annualized_volatility([100.0] * 10, period=30) is None
        assert annualized_volatility([100.0] * 30 + [0.0], period=30) is None
        assert annualized_volatility([100.0, 110.0] * 16, period=30) > 0

    def test_rsi_skips_undefined_closes(self):
        """Test an undefined close leaves a gap instead of poisoning later values."""
        values = [100 + 10 * math.sin(i / 3.0) for i in range(40)]
        clean = rsi(values, period=14)
        gapped = list(values)
        gapped[20] = float("nan")
        result = rsi(gapped, period=14)

        assert result[:20] == clean[:20]
        assert result[20] is None
        assert result[21] is None
        for value in result[22:]:
            assert value is not None
            assert 0.0 <= value <= 100.0

    def test_rsi_seed_spans_gap(self):
        """Test the seed collects period defined changes around a missing close."""
        values = [float(i) for i in range(40)]
        values[5] = None
        result = rsi(values, period=14)
        # Changes into and out of index 5 are undefined
        assert result[15] is None
        assert result[16] == 100.0

    def test_volatility_undefined_close_in_window(self):
        """Test an undefined close in the window gives no volatility."""
        closes = [100.0, 110.0] * 16
        closes[-5] = float("nan")
        assert annualized_volatility(closes, period=30) is None
        closes[-5] = None
        assert annualized_volatility(closes, period=30) is None


class TestPiCycle:
    """Test Pi Cycle top/bottom classification."""

    def test_rows_and_zones(self, make_series):
        """Test rows only where both averages exist, with zone thresholds."""
        points = make_series([10.0, 10.0, 10.0, 1.0, 1.0])
        rows = pi_cycle(points, short_window=2, long_window=3, long_mult=1.0)
        assert len(rows) == 3
        assert rows[0].ratio == pytest.approx(1.0)
        assert rows[0].zone == CycleZone.TOP
        assert rows[1].zone == CycleZone.NEUTRAL
        assert rows[2].ratio == pytest.approx(0.25)
        assert rows[2].zone == CycleZone.BOTTOM

    def test_long_average_scaled(self, make_series):
        """Test the long average is multiplied before comparison."""
        rows = pi_cycle(make_series([10.0] * 4), short_window=2, long_window=3)
        assert rows[0].long_ma_scaled == pytest.approx(20.0)
        assert rows[0].ratio == pytest.approx(0.5)

    def test_unordered_input(self):
        """Test dates must be strictly increasing."""
        points = [(date(2024, 1, 2), 1.0), (date(2024, 1, 1), 1.0)]
        with pytest.raises(TemporalDataError):
            pi_cycle(points, short_window=2, long_window=3)


class TestMAHeatmap:
    """Test long moving average heatmap."""

    def test_change_against_lagged_row(self, make_series):
        """Test change_pct compares with change_lag rows earlier."""
        rows = ma_heatmap(make_series([1.0, 3.0, 5.0, 7.0]), period=2, change_lag=1)
        assert [r.index for r in rows] == [0, 1, 2]
        assert [r.moving_average for r in rows] == [2.0, 4.0, 6.0]
        assert rows[0].change_pct == 0.0
        assert rows[1].change_pct == pytest.approx(100.0)
        assert rows[2].change_pct == pytest.approx(50.0)

    @pytest.mark.parametrize("change_lag", [0, -1, True])
    def test_rejects_invalid_change_lag(self, make_series, change_lag):
        """Test the lag must reach at least one earlier row."""
        with pytest.raises(WindowParameterError) as exc_info:
            ma_heatmap(make_series([1.0, 3.0, 5.0, 7.0]), period=3, change_lag=change_lag)
        assert exc_info.value.parameter == "change_lag"


class TestMVRVProxies:
    """Test price-only MVRV proxies."""

    def test_monthly_sampling(self, make_series):
        """Test at most one row per calendar month."""
        values = [100 + 20 * math.sin(i / 7.0) for i in range(200)]
        proxies = mvrv_proxies(make_series(values), sth_window=5, z_window=10)

        for rows in (proxies.sth_mvrv, proxies.z_score):
            assert rows
            months = [month_key(r.date) for r in rows]
            assert months == sorted(set(months))

    def test_sth_ratio(self, make_series):
        """Test STH-MVRV is price over its moving average."""
        proxies = mvrv_proxies(make_series([10.0] * 40), sth_window=5, z_window=10)
        assert proxies.sth_mvrv[0].value == pytest.approx(1.0)
        # Deviations are all zero, so no z-score is defined
        assert proxies.z_score == ()

    def test_z_score_finite(self, make_series):
        """Test z-scores are finite numbers."""
        values = [100 + 20 * math.sin(i / 7.0) + i * 0.1 for i in range(200)]
        proxies = mvrv_proxies(make_series(values), sth_window=5, z_window=10)
        assert all(math.isfinite(r.z_score) for r in proxies.z_score)


class TestTechnicalIndicators:
    """Test the combined oscillator overlay."""

    def test_series_aligned_to_dates(self, make_series):
        """Test every overlay has one entry per input date."""
        values = [100 + 5 * math.sin(i / 4.0) for i in range(60)]
        result = technical_indicators(make_series(values), sma_window=5, ema_window=5)
        n = len(values)
        assert len(result.dates) == n
        assert len(result.sma) == len(result.ema) == len(result.rsi) == n
        assert len(result.bollinger.middle) == len(result.macd.macd) == n
        assert result.sma[3] is None and result.sma[4] is not None
        assert result.volatility_pct > 0

    def test_undefined_close_near_end(self, make_series):
        """Test a NaN close leaves gaps rather than NaN overlays."""
        values = [100 + 5 * math.sin(i / 4.0) for i in range(60)]
        values[-3] = float("nan")
        result = technical_indicators(make_series(values), sma_window=5, ema_window=5)

        assert result.volatility_pct is None
        assert result.rsi[-3] is None
        assert result.rsi[-2] is None
        assert 0.0 <= result.rsi[-1] <= 100.0
        assert result.sma[-1] is None
