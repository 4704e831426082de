"""Era-based issuance schedule and stock-to-flow model"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..config.defaults import SupplyParams
from ..data.aligner import validate_series
from ..errors import MalformedDataError

DAYS_PER_YEAR = 365.25

# ln(market_cap) = S2F_SLOPE * ln(stock_to_flow) + S2F_INTERCEPT
S2F_SLOPE = 3.32
S2F_INTERCEPT = 14.6


@dataclass(frozen=True)
class Era:
    """Issuance era with a constant reward per block"""
    start: date
    reward_per_block: float


@dataclass(frozen=True)
class EraMarker:
    """Era boundary for chart reference lines"""
    date: date
    reward_per_block: float
    index: int


@dataclass(frozen=True)
class StockToFlowRow:
    """Observed price next to the stock-to-flow model price"""
    date: date
    price: float
    stock_to_flow: Optional[float]
    model_price: Optional[float]


def _as_date(day: date) -> date:
    return day.date() if isinstance(day, datetime) else day


class SupplyModel:
    """
    Deterministic supply calculator

    Issuance accrues linearly inside an era at blocks_per_day * reward_per_block
    per day and carries over additively across eras. The last era runs until
    the horizon, after which supply stays flat.
    """

    def __init__(self, eras: Sequence[Era], blocks_per_day: float = 144.0,
                 horizon: date = date(2140, 1, 1)):
        if not eras:
            raise MalformedDataError("Supply model needs at least one era")
        if blocks_per_day <= 0:
            raise MalformedDataError(f"blocks_per_day must be positive, got {blocks_per_day}")

        for previous, current in zip(eras, eras[1:]):
            if current.start <= previous.start:
                raise MalformedDataError(
                    f"Era starts must be strictly increasing "
                    f"({current.start.isoformat()} after {previous.start.isoformat()})"
                )
        for era in eras:
            if era.reward_per_block < 0:
                raise MalformedDataError(f"Negative block reward in era starting {era.start.isoformat()}")
        if horizon <= eras[-1].start:
            raise MalformedDataError("Horizon must fall after the last era start")

        self.eras = tuple(eras)
        self.blocks_per_day = blocks_per_day
        self.horizon = horizon

    @classmethod
    def from_params(cls, params: SupplyParams) -> "SupplyModel":
        """Build the model from configuration (ISO dates)."""
        try:
            eras = [Era(start=date.fromisoformat(start), reward_per_block=float(reward))
                    for start, reward in params.eras]
            horizon = date.fromisoformat(params.horizon)
        except (TypeError, ValueError) as e:
            raise MalformedDataError(
                f"Invalid supply schedule: {e}",
                expected_format="[(YYYY-MM-DD, reward), ...]"
            )
        return cls(eras, blocks_per_day=params.blocks_per_day, horizon=horizon)

    def _era_end(self, index: int) -> date:
        return self.eras[index + 1].start if index + 1 < len(self.eras) else self.horizon

    def supply_at(self, day: date) -> float:
        """
        Total issued supply at the given calendar date

        Returns 0 before the first era starts.
        """
        day = _as_date(day)
        supply = 0.0

        for index, era in enumerate(self.eras):
            if day < era.start:
                break
            era_end = self._era_end(index)
            end = day if day < era_end else era_end
            days = max(0, (end - era.start).days)
            supply += days * self.blocks_per_day * era.reward_per_block
            if day < era_end:
                break

        return supply

    def current_reward(self, day: date) -> float:
        """Reward per block in effect at the date (0 outside the schedule)"""
        day = _as_date(day)
        if day < self.eras[0].start or day >= self.horizon:
            return 0.0

        reward = self.eras[0].reward_per_block
        for era in self.eras:
            if day < era.start:
                break
            reward = era.reward_per_block
        return reward

    def annual_flow(self, day: date) -> float:
        """New supply per year at the current reward"""
        return self.blocks_per_day * DAYS_PER_YEAR * self.current_reward(day)

    def stock_to_flow(self, day: date) -> Optional[float]:
        """Stock divided by annual flow, None when nothing is being issued"""
        flow = self.annual_flow(day)
        if flow <= 0:
            return None
        return self.supply_at(day) / flow

    def s2f_model_price(self, day: date) -> Optional[float]:
        """
        Price implied by the log-linear stock-to-flow regression

        Returns:
            Model price or None when stock or stock-to-flow is not positive
        """
        s2f = self.stock_to_flow(day)
        stock = self.supply_at(day)
        if s2f is None or s2f <= 0 or stock <= 0:
            return None
        market_cap = math.exp(S2F_SLOPE * math.log(s2f) + S2F_INTERCEPT)
        return market_cap / stock

    def era_markers(self, start: date, end: date) -> list[EraMarker]:
        """Era boundaries falling inside [start, end]"""
        start, end = _as_date(start), _as_date(end)
        return [
            EraMarker(date=era.start, reward_per_block=era.reward_per_block, index=index)
            for index, era in enumerate(self.eras)
            if start <= era.start <= end
        ]

    def model_series(self, points: Sequence[Any]) -> list[StockToFlowRow]:
        """Stock-to-flow and model price for every observed price"""
        return [
            StockToFlowRow(
                date=p.date,
                price=p.value,
                stock_to_flow=self.stock_to_flow(p.date),
                model_price=self.s2f_model_price(p.date),
            )
            for p in validate_series(points, name="prices")
        ]
