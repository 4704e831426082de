"""Tests for the issuance schedule and stock-to-flow model."""

from datetime import date, datetime

import pytest

from quantdash_app.config.defaults import SupplyParams
from quantdash_app.errors import MalformedDataError
from quantdash_app.metrics.supply import DAYS_PER_YEAR, Era, SupplyModel


@pytest.fixture
def small_model() -> SupplyModel:
    """Two short eras with one block per day."""
    return SupplyModel(
        [Era(date(2020, 1, 1), 10.0), Era(date(2020, 1, 11), 5.0)],
        blocks_per_day=1.0,
        horizon=date(2020, 2, 1),
    )


class TestSupplyAt:
    """Test cumulative supply."""

    def test_zero_before_schedule(self, small_model):
        """Test that supply is zero before the first era."""
        assert small_model.supply_at(date(2019, 12, 31)) == 0.0
        assert small_model.supply_at(date(2020, 1, 1)) == 0.0

    def test_linear_within_era(self, small_model):
        """Test linear accrual inside the first era."""
        assert small_model.supply_at(date(2020, 1, 6)) == 50.0

    def test_carries_over_eras(self, small_model):
        """Test that completed eras add their full issuance."""
        assert small_model.supply_at(date(2020, 1, 11)) == 100.0
        assert small_model.supply_at(date(2020, 1, 15)) == 120.0

    def test_flat_after_horizon(self, small_model):
        """Test that supply stops growing at the horizon."""
        assert small_model.supply_at(date(2020, 2, 1)) == 205.0
        assert small_model.supply_at(date(2020, 3, 1)) == 205.0

    def test_accepts_datetime(self, small_model):
        """Test that datetimes resolve to their calendar date."""
        assert small_model.supply_at(datetime(2020, 1, 6, 18, 30)) == 50.0

    def test_default_schedule_first_halving(self):
        """Test the default schedule against the first era's issuance."""
        model = SupplyModel.from_params(SupplyParams())
        days = (date(2012, 11, 28) - date(2009, 1, 3)).days
        assert model.supply_at(date(2012, 11, 28)) == days * 144 * 50

    def test_monotonic_non_decreasing(self):
        """Test monotonicity across the default schedule."""
        model = SupplyModel.from_params(SupplyParams())
        previous = 0.0
        for year in range(2008, 2150, 3):
            current = model.supply_at(date(year, 6, 1))
            assert current >= previous
            previous = current


class TestStockToFlow:
    """Test reward, flow and model price."""

    def test_current_reward(self, small_model):
        """Test reward lookup inside and outside the schedule."""
        assert small_model.current_reward(date(2019, 6, 1)) == 0.0
        assert small_model.current_reward(date(2020, 1, 5)) == 10.0
        assert small_model.current_reward(date(2020, 1, 20)) == 5.0
        assert small_model.current_reward(date(2020, 2, 1)) == 0.0

    def test_stock_to_flow_ratio(self, small_model):
        """Test stock divided by annual flow."""
        expected = 120.0 / (DAYS_PER_YEAR * 5.0)
        assert small_model.stock_to_flow(date(2020, 1, 15)) == pytest.approx(expected)

    def test_no_flow_gives_none(self, small_model):
        """Test that zero issuance yields no ratio or model price."""
        assert small_model.stock_to_flow(date(2021, 1, 1)) is None
        assert small_model.s2f_model_price(date(2021, 1, 1)) is None

    def test_model_price_positive(self):
        """Test that the default schedule produces a positive model price."""
        model = SupplyModel.from_params(SupplyParams())
        assert model.s2f_model_price(date(2021, 1, 1)) > 0

    def test_model_series(self, small_model):
        """Test one row per observed price."""
        rows = small_model.model_series([(date(2020, 1, 15), 3.0), (date(2020, 3, 1), 4.0)])
        assert len(rows) == 2
        assert rows[0].price == 3.0
        assert rows[0].stock_to_flow is not None
        assert rows[1].stock_to_flow is None

    def test_era_markers(self):
        """Test era boundaries inside a date range."""
        model = SupplyModel.from_params(SupplyParams())
        markers = model.era_markers(date(2015, 1, 1), date(2021, 1, 1))
        assert [m.date for m in markers] == [date(2016, 7, 9), date(2020, 5, 11)]
        assert markers[0].reward_per_block == 12.5


class TestSupplyValidation:
    """Test schedule validation."""

    def test_empty_schedule(self):
        """Test that at least one era is required."""
        with pytest.raises(MalformedDataError):
            SupplyModel([])

    def test_unordered_eras(self):
        """Test that era starts must increase."""
        with pytest.raises(MalformedDataError):
            SupplyModel([Era(date(2020, 1, 1), 1.0), Era(date(2019, 1, 1), 1.0)])

    def test_bad_iso_date(self):
        """Test that unparseable configured dates are rejected."""
        with pytest.raises(MalformedDataError):
            SupplyModel.from_params(SupplyParams(eras=(("not-a-date", 50.0),)))
