"""Tests for quick operations figures and the simple growth projection."""

import math

import pytest

from roiplan.calculations.projection import quick_operations, project_growth


class TestQuickOperations:

    def test_noi_and_cap_rate(self):
        ops = quick_operations(119_900, 700, 30)

        assert ops.noi_annual == pytest.approx(700 * 0.7 * 12)
        assert ops.cap_rate == pytest.approx(5_880 / 119_900)

    def test_opex_clamped(self):
        assert quick_operations(100_000, 1_000, 150).noi_annual == 0
        assert quick_operations(100_000, 1_000, -20).noi_annual == 12_000

    @pytest.mark.parametrize("cost", [None, 0, -5, math.nan, math.inf])
    def test_unknown_investment_cost(self, cost):
        ops = quick_operations(cost, 700, 30)
        assert ops.noi_annual == pytest.approx(5_880)
        assert math.isnan(ops.cap_rate)

    def test_negative_rent(self):
        assert math.isnan(quick_operations(100_000, -100, 0).cap_rate)


class TestProjectGrowth:

    def test_points_cover_horizon(self):
        points = project_growth(100_000, 500, 3, 2, 25, horizon_months=24)
        assert [p.month for p in points] == list(range(25))

    def test_year_labels(self):
        points = project_growth(100_000, 500, 3, 2, 25, horizon_months=24)
        assert points[0].year_label == "Y1"
        assert points[11].year_label == "Y1"
        assert points[12].year_label == "Y2"
        assert points[24].year_label == "Y3"

    def test_simple_monthly_rates(self):
        points = project_growth(100_000, 500, 12, 6, 0, horizon_months=12)

        assert points[0].price == 100_000
        assert points[0].equity_gain == 0
        assert points[12].price == pytest.approx(100_000 * 1.01 ** 12)
        assert points[12].net_cf_month == pytest.approx(500 * 1.005 ** 12)

    def test_cumulative_net_cash_flow(self):
        points = project_growth(100_000, 500, 0, 0, 20, horizon_months=10)

        assert points[0].net_cf_month == pytest.approx(400)
        assert points[-1].cumulative_net_cf == pytest.approx(400 * 11)

    @pytest.mark.parametrize("horizon, expected_points", [
        (0, 2),
        (-10, 2),
        (600, 601),
        (10_000, 601),
        (math.inf, 121),
    ])
    def test_horizon_clamped(self, horizon, expected_points):
        points = project_growth(100_000, 500, 3, 2, 25, horizon_months=horizon)
        assert len(points) == expected_points

    def test_default_horizon(self):
        assert len(project_growth(100_000, 500, 3, 2, 25)) == 121
