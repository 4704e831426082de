"""Monte Carlo risk simulation and position sizing"""

from .monte_carlo import MonteCarloRiskEngine, conditional_value_at_risk
from .sizing import kelly_fraction, position_size, sharpe_ratio, sortino_ratio

__all__ = [
    "MonteCarloRiskEngine",
    "conditional_value_at_risk",
    "position_size",
    "kelly_fraction",
    "sharpe_ratio",
    "sortino_ratio",
]
