"""
Tests for Time Resolution
=========================
Tests for hycom_subset/core/timegrid.py
"""

import numpy as np
import pandas as pd
import pytest


NOW = pd.Timestamp("2025-06-01 12:00")


@pytest.fixture
def daily_axis():
    """Daily time axis like GLBu0.08 serves it."""
    return pd.DatetimeIndex(pd.date_range("2009-12-30", "2010-01-03", freq="D"))


class TestNearestIndex:
    """Tests for nearest_index."""

    def test_scalar(self):
        from hycom_subset.core.timegrid import nearest_index

        assert nearest_index([0.0, 1.0, 2.0], 1.9) == 2
        assert isinstance(nearest_index([0.0, 1.0, 2.0], 1.9), int)

    def test_tie_goes_to_lower_index(self):
        from hycom_subset.core.timegrid import nearest_index

        assert nearest_index([0.0, 1.0, 2.0], 0.5) == 0
        assert nearest_index([10.0, 20.0], 15.0) == 0

    def test_vector(self):
        from hycom_subset.core.timegrid import nearest_index

        result = nearest_index(np.arange(0.0, 360.0), [189.6, 240.2])
        np.testing.assert_array_equal(result, [190, 240])

    def test_outside_range_clamps(self):
        from hycom_subset.core.timegrid import nearest_index

        assert nearest_index([0.0, 1.0, 2.0], -50.0) == 0
        assert nearest_index([0.0, 1.0, 2.0], 50.0) == 2

    def test_datetimes(self, daily_axis):
        from hycom_subset.core.timegrid import nearest_index

        target = np.datetime64("2010-01-01T11:00")
        assert nearest_index(daily_axis.values, target) == 2

    def test_empty_coordinates(self):
        from hycom_subset.core.timegrid import nearest_index

        with pytest.raises(ValueError):
            nearest_index([], 1.0)


class TestSamplingGrid:
    """Daily until mid-2014, 3-hourly afterwards."""

    def test_grid_bounds(self):
        from hycom_subset.core.timegrid import sampling_grid

        grid = sampling_grid(NOW)
        assert grid[0] == pd.Timestamp("1992-10-02")
        assert grid[-1] == pd.Timestamp("2025-05-31")
        assert grid.is_monotonic_increasing

    def test_cadence_changes_at_cutover(self):
        from hycom_subset.core.timegrid import sampling_grid

        grid = sampling_grid(NOW)
        i = grid.get_loc(pd.Timestamp("2014-07-01 12:00"))
        assert grid[i] - grid[i - 1] == pd.Timedelta(hours=12)
        assert grid[i + 1] - grid[i] == pd.Timedelta(hours=3)
        assert grid[i - 1] - grid[i - 2] == pd.Timedelta(days=1)

    @pytest.mark.parametrize("instant,expected", [
        ("2010-01-01 10:00", "2010-01-01 00:00"),
        ("2010-01-01 13:00", "2010-01-02 00:00"),
        ("2010-01-01 12:00", "2010-01-01 00:00"),   # tie
        ("2018-01-15 01:00", "2018-01-15 00:00"),
        ("2018-01-15 01:30", "2018-01-15 00:00"),   # tie
        ("2018-01-15 02:00", "2018-01-15 03:00"),
        ("2014-07-01 09:00", "2014-07-01 12:00"),
    ])
    def test_snap_to_grid(self, instant, expected):
        from hycom_subset.core.timegrid import snap_to_grid

        assert snap_to_grid(instant, NOW) == pd.Timestamp(expected)

    def test_snap_before_archive(self):
        from hycom_subset.core.exceptions import NoProductAvailable
        from hycom_subset.core.timegrid import snap_to_grid

        with pytest.raises(NoProductAvailable):
            snap_to_grid("1992-10-01 12:00", NOW)

    def test_snap_after_horizon(self):
        from hycom_subset.core.exceptions import NoProductAvailable
        from hycom_subset.core.timegrid import snap_to_grid

        with pytest.raises(NoProductAvailable):
            snap_to_grid("2025-05-31 03:00", NOW)


class TestResolveTime:
    """Matching against the time axis actually served."""

    def test_decode_hycom_time(self):
        from hycom_subset.core.timegrid import decode_hycom_time

        times = decode_hycom_time(np.array([0.0, 24.0, 87672.0]))
        assert times[0] == pd.Timestamp("2000-01-01")
        assert times[1] == pd.Timestamp("2000-01-02")
        assert times[2] == pd.Timestamp("2010-01-01")

    def test_exact_match(self, daily_axis):
        from hycom_subset.core.timegrid import resolve_time

        resolved = resolve_time("2010-01-01", daily_axis)
        assert resolved.index == 2
        assert resolved.deviation == pd.Timedelta(0)

    def test_deviation_is_actual_minus_requested(self, daily_axis):
        from hycom_subset.core.timegrid import resolve_time

        resolved = resolve_time("2010-01-01 05:00", daily_axis, target="2010-01-01")
        assert resolved.snapped == pd.Timestamp("2010-01-01")
        assert resolved.deviation == pd.Timedelta(hours=-5)

    def test_one_day_is_accepted(self, daily_axis):
        from hycom_subset.core.timegrid import resolve_time

        resolved = resolve_time("2010-01-04", daily_axis)
        assert resolved.index == 4
        assert resolved.deviation == pd.Timedelta(days=-1)

    def test_beyond_one_day_is_missing(self, daily_axis):
        from hycom_subset.core.exceptions import DataMissing
        from hycom_subset.core.timegrid import resolve_time

        with pytest.raises(DataMissing) as info:
            resolve_time("2010-01-04 01:00", daily_axis)
        assert "2010-01-03" in info.value.details["actual"]

    def test_custom_tolerance(self, daily_axis):
        from hycom_subset.core.exceptions import DataMissing
        from hycom_subset.core.timegrid import resolve_time

        with pytest.raises(DataMissing):
            resolve_time("2010-01-01 05:00", daily_axis, tolerance=pd.Timedelta(hours=3))

    def test_product_window(self, daily_axis):
        from hycom_subset.core.exceptions import DataMissing
        from hycom_subset.core.timegrid import check_product_window

        check_product_window(daily_axis, pd.Timestamp("2010-01-04"))
        check_product_window(daily_axis, pd.Timestamp("2009-12-29"))
        with pytest.raises(DataMissing, match="outside the time range"):
            check_product_window(daily_axis, pd.Timestamp("2010-01-05"))
