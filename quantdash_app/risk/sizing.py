"""Position sizing and risk-adjusted return ratios"""

from typing import Optional


def position_size(account_risk: float, entry_price: float, stop_price: float) -> Optional[float]:
    """
    Units to buy so that hitting the stop loses exactly account_risk

    Position Size = Account Risk / |Entry - Stop|

    Returns:
        Position size or None when entry equals stop
    """
    distance = abs(entry_price - stop_price)
    if distance == 0:
        return None
    return account_risk / distance


def kelly_fraction(win_rate: float, win_loss_ratio: float) -> float:
    """
    Kelly criterion f* = (b*p - q) / b

    Args:
        win_rate: Probability of a winning trade (0-1)
        win_loss_ratio: Average win / average loss (b)

    Returns:
        Optimal fraction of capital (may be negative: no edge), 0.0 when b <= 0
    """
    if win_loss_ratio <= 0:
        return 0.0
    loss_rate = 1.0 - win_rate
    return (win_loss_ratio * win_rate - loss_rate) / win_loss_ratio


def sharpe_ratio(avg_return: float, risk_free_rate: float, volatility: float) -> float:
    """Excess return per unit of total volatility (0.0 for zero volatility)"""
    if volatility <= 0:
        return 0.0
    return (avg_return - risk_free_rate) / volatility


def sortino_ratio(avg_return: float, risk_free_rate: float, downside_volatility: float) -> float:
    """Excess return per unit of downside volatility (0.0 for zero volatility)"""
    if downside_volatility <= 0:
        return 0.0
    return (avg_return - risk_free_rate) / downside_volatility
