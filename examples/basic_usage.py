#!/usr/bin/env python3
"""
Basic Usage Example - QuantDash Analytics Engine

This script walks through every engine computation on synthetic data:
- NVT signal with volatility bands
- Equity NVT for a listed company
- Yield curve with a provider fallback chain
- Monte Carlo tail risk
- Cycle indicators (Pi Cycle, 200-week heatmap, stock-to-flow, MVRV)

Payloads are printed as JSON, the way a dashboard backend would return them.

Run: python examples/basic_usage.py
"""

import json
import math
from datetime import date, timedelta
from typing import Any, Dict, List, Tuple

import numpy as np

from quantdash_app.curves.yield_curve import known_points_from_pairs
from quantdash_app.engine import AnalyticsEngine
from quantdash_app.logging import configure_logging
from quantdash_app.output import (
    indicator_rows_to_payload,
    signal_result_to_payload,
    simulation_to_payload,
    yield_curve_to_payload,
)


def create_daily_history(days: int, start: date = date(2020, 1, 1)) -> Tuple[List, List]:
    """Synthetic daily prices and on-chain volumes."""
    prices = []
    volumes = []
    for i in range(days):
        day = start + timedelta(days=i)
        prices.append((day, 20000.0 + 15000.0 * math.sin(i / 120.0) + 15.0 * i))
        volumes.append((day, 4.0e9 + 1.5e9 * math.cos(i / 40.0)))
    return prices, volumes


def create_equity_bars(days: int, start: date = date(2022, 1, 3)) -> List[Dict[str, Any]]:
    """Synthetic daily bars for a listed company."""
    return [
        {
            "date": start + timedelta(days=i),
            "close": 35.0 + 4.0 * math.sin(i / 25.0),
            "volume": 4.0e7 + 5.0e6 * math.cos(i / 10.0),
        }
        for i in range(days)
    ]


def print_section(title: str, payload: Any) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)
    print(json.dumps(payload, indent=2)[:1500])


def main():
    configure_logging(level="INFO")
    engine = AnalyticsEngine()

    prices, volumes = create_daily_history(4 * 365)

    nvt = engine.nvt_signal(prices, volumes, asset_id="BTC")
    payload = signal_result_to_payload(nvt)
    payload["points"] = payload["points"][-5:]
    print_section("📈 NVT signal (last 5 points)", payload)

    equity = engine.equity_nvt_signal(create_equity_bars(500), market_cap=4.5e11, asset_id="PETR4")
    payload = signal_result_to_payload(equity)
    payload["points"] = payload["points"][-3:]
    print_section("🏢 Equity NVT (PETR4, last 3 points)", payload)

    def live_provider():
        raise TimeoutError("quote service unavailable")

    def static_provider():
        return known_points_from_pairs([("3m", 5.40), ("2y", 4.80), ("10y", 4.30), ("30y", 4.45)])

    curve = engine.yield_curve([("live", live_provider), ("static", static_provider)], asset_id="US")
    print_section("🏦 US yield curve", yield_curve_to_payload(curve))

    risk = engine.risk_simulation(
        overrides={"monte_carlo": {"num_paths": 2000}},
        rng=np.random.default_rng(42),
    )
    print_section("🎲 Monte Carlo risk", simulation_to_payload(risk, include_paths=False))

    pi_rows = engine.pi_cycle(prices)
    print_section("🥧 Pi Cycle (last 3 rows)", indicator_rows_to_payload(pi_rows[-3:]))

    weekly = prices[::7]
    heatmap = engine.ma_heatmap(weekly, overrides={"indicators": {"heatmap_period": 52}})
    print_section("🔥 MA heatmap (last 3 rows)", indicator_rows_to_payload(heatmap[-3:]))

    s2f = engine.stock_to_flow(prices[-30:])
    print_section("⛏️  Stock-to-flow (last 3 rows)", indicator_rows_to_payload(s2f[-3:]))

    mvrv = engine.mvrv(prices)
    print_section("📊 MVRV z-score (last 3 months)", indicator_rows_to_payload(mvrv.z_score[-3:]))


if __name__ == "__main__":
    main()
