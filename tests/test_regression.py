"""Tests for the shared statistical primitives."""

import pytest

from dbis_warehouse.forecasting.regression import (
    half_split_trend,
    linear_regression,
    mean,
    moving_average,
    std_dev,
)


def test_exact_line_is_recovered():
    regression = linear_regression([(x, 2 * x + 5) for x in range(5)])

    assert regression.slope == pytest.approx(2.0)
    assert regression.intercept == pytest.approx(5.0)
    assert regression.r2 == pytest.approx(1.0)
    assert regression.predict(10) == pytest.approx(25.0)


def test_fewer_than_two_points_is_all_zero():
    assert linear_regression([]) == (0.0, 0.0, 0.0)
    assert linear_regression([(0, 4.0)]) == (0.0, 0.0, 0.0)


def test_vertical_points_do_not_divide_by_zero():
    assert linear_regression([(1, 2.0), (1, 3.0)]) == (0.0, 0.0, 0.0)


def test_flat_series_has_zero_r2():
    regression = linear_regression([(0, 3.0), (1, 3.0), (2, 3.0)])

    assert regression.slope == pytest.approx(0.0)
    assert regression.r2 == 0.0


def test_population_std_dev():
    assert std_dev([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)
    assert std_dev([5.0]) == 0.0


def test_mean_of_empty_is_zero():
    assert mean([]) == 0.0
    assert mean([1, 2, 3]) == pytest.approx(2.0)


def test_moving_average():
    assert moving_average([1, 2, 3, 4], 2) == pytest.approx([1.5, 2.5, 3.5])
    assert moving_average([1, 2], 3) == [1, 2]


class TestHalfSplitTrend:
    def test_rising(self):
        assert half_split_trend([10, 10, 12, 12], 0.10, "up", "down") == "up"

    def test_falling(self):
        assert half_split_trend([12, 12, 10, 10], 0.10, "up", "down") == "down"

    def test_within_band_is_stable(self):
        assert half_split_trend([10, 10, 10.5, 10.5], 0.10, "up", "down") == "stable"

    def test_single_value_is_stable(self):
        assert half_split_trend([7], 0.10, "up", "down") == "stable"
