"""Pytest configuration and shared fixtures."""

import math
from datetime import date, timedelta
from typing import Callable, List, Tuple

import numpy as np
import pytest


def daily_series(start: date, values) -> List[Tuple[date, float]]:
    """(date, value) pairs on consecutive calendar days."""
    return [(start + timedelta(days=i), v) for i, v in enumerate(values)]


@pytest.fixture
def make_series() -> Callable[..., List[Tuple[date, float]]]:
    """Factory for consecutive daily series."""
    def _make(values, start: date = date(2021, 1, 1)):
        return daily_series(start, values)
    return _make


@pytest.fixture
def btc_history() -> Tuple[list, list]:
    """Three years of smooth synthetic BTC-like prices and volumes."""
    start = date(2021, 1, 1)
    days = 3 * 365
    prices = [30000.0 + 8000.0 * math.sin(i / 60.0) + 10.0 * i for i in range(days)]
    volumes = [5.0e9 + 1.0e9 * math.cos(i / 45.0) for i in range(days)]
    return daily_series(start, prices), daily_series(start, volumes)


@pytest.fixture
def equity_history() -> List[dict]:
    """Daily OHLCV-style bars for a listed company."""
    start = date(2022, 1, 3)
    return [
        {
            "date": start + timedelta(days=i),
            "close": 30.0 + 3.0 * math.sin(i / 20.0),
            "volume": 1_000_000.0 + 100_000.0 * math.cos(i / 15.0),
        }
        for i in range(400)
    ]


@pytest.fixture
def us_known_yields() -> dict:
    """Sparse US Treasury curve in percent."""
    return {"3m": 5.40, "2y": 4.80, "10y": 4.30, "30y": 4.45}


@pytest.fixture
def seeded_rng() -> np.random.Generator:
    """Reproducible random generator for Monte Carlo tests."""
    return np.random.default_rng(12345)
