"""Default configuration parameters for the analytics pipeline."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RollingParams:
    """Generic moving-average parameters."""
    sma_window: int = 20
    ema_window: int = 20


@dataclass(frozen=True)
class SignalBandParams:
    """NVT-style ratio signal and its volatility bands."""
    primary_window: int = 90                # Rolling mean window of the denominator
    band_window: int = 90                   # Rolling mean/std window of the signal
    band_std_mult: float = 2.0              # Band half-width in standard deviations
    min_points: int = 100                   # Floor on aligned history length
    clamp_lower: bool = True                # Ratio signals cannot go below zero
    display_years: int = 2                  # Trailing window returned to callers


@dataclass(frozen=True)
class SupplyParams:
    """Issuance schedule: (era start ISO date, reward per block)."""
    blocks_per_day: float = 144.0
    horizon: str = "2140-01-01"
    eras: tuple = (
        ("2009-01-03", 50.0),
        ("2012-11-28", 25.0),
        ("2016-07-09", 12.5),
        ("2020-05-11", 6.25),
        ("2024-04-20", 3.125),
    )


@dataclass(frozen=True)
class YieldCurveParams:
    """Target tenors the sparse curve is mapped onto."""
    target_maturities: tuple = (
        "1m", "3m", "6m", "1y", "2y", "3y", "5y", "7y", "10y", "20y", "30y",
    )


@dataclass(frozen=True)
class MonteCarloParams:
    """Lognormal-return risk simulation parameters."""
    num_paths: int = 1000
    horizon_days: int = 252
    initial_value: float = 10000.0
    annual_drift_pct: float = 5.0
    annual_vol_pct: float = 60.0
    confidence_levels: tuple = (0.95, 0.99)
    max_stored_paths: int = 50              # Paths kept for display only
    trading_days: int = 252
    seed: Optional[int] = None              # None draws fresh OS entropy


@dataclass(frozen=True)
class IndicatorParams:
    """Cycle and oscillator indicator parameters."""
    pi_short_window: int = 111
    pi_long_window: int = 350
    pi_long_mult: float = 2.0
    pi_top_ratio: float = 1.0
    pi_bottom_ratio: float = 0.75
    heatmap_period: int = 200               # Weekly candles
    heatmap_change_lag: int = 4             # ~1 month of weekly rows
    mvrv_sth_window: int = 155
    mvrv_z_window: int = 365
    rsi_period: int = 14
    bollinger_period: int = 20
    bollinger_std_mult: float = 2.0
    volatility_period: int = 30
    volatility_periods_per_year: int = 365


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    rolling: RollingParams
    signal: SignalBandParams
    supply: SupplyParams
    yield_curve: YieldCurveParams
    monte_carlo: MonteCarloParams
    indicators: IndicatorParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        rolling=RollingParams(),
        signal=SignalBandParams(),
        supply=SupplyParams(),
        yield_curve=YieldCurveParams(),
        monte_carlo=MonteCarloParams(),
        indicators=IndicatorParams(),
    )
