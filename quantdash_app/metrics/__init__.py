"""Rolling statistics, supply model, ratio signal bands and cycle indicators"""

from .indicators import (
    annualized_volatility,
    bollinger_bands,
    ma_heatmap,
    macd,
    mvrv_proxies,
    pi_cycle,
    rsi,
    technical_indicators,
)
from .rolling import RollingWindowStats, ema, rolling_mean, rolling_std, sma
from .signal_bands import SignalBandEngine
from .supply import Era, StockToFlowRow, SupplyModel

__all__ = [
    "RollingWindowStats",
    "rolling_mean",
    "rolling_std",
    "sma",
    "ema",
    "SignalBandEngine",
    "SupplyModel",
    "Era",
    "StockToFlowRow",
    "bollinger_bands",
    "rsi",
    "macd",
    "pi_cycle",
    "ma_heatmap",
    "mvrv_proxies",
    "annualized_volatility",
    "technical_indicators",
]
