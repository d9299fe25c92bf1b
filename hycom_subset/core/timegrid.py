"""
Time Resolution
===============
Nearest-sample lookups on the theoretical HYCOM sampling grid and on the
actual time axis served by a product.

The two may disagree by less than the nominal cadence: the grid picks which
product and cache file to address, the actual axis picks the read offset.
"""

from datetime import datetime
from typing import Optional, Union

import numpy as np
import pandas as pd

from .catalog import DAILY_UNTIL, EARLIEST_DATE, THREE_HOURLY, availability_horizon
from .exceptions import DataMissing, NoProductAvailable
from .helpers import as_utc_timestamp
from .models import ResolvedTime

HYCOM_TIME_ORIGIN = pd.Timestamp("2000-01-01")
DEFAULT_TOLERANCE = pd.Timedelta(days=1)


def nearest_index(coords, target) -> Union[int, np.ndarray]:
    """
    Index of the element of `coords` closest to `target`.

    Ties go to the lower index. A sequence of targets returns one index per
    target.

    Parameters
    ----------
    coords : array-like
        Coordinate values (numbers or datetime64)
    target : scalar or array-like
        Value(s) to look up

    Examples
    --------
    >>> nearest_index([0.0, 1.0, 2.0], 1.5)
    1
    >>> nearest_index([0.0, 1.0, 2.0], [0.2, 1.9])
    array([0, 2])
    """
    coords = np.asarray(coords).ravel()
    if coords.size == 0:
        raise ValueError("Cannot search an empty coordinate array")
    targets = np.asarray(target)
    diffs = np.abs(coords[np.newaxis, :] - targets.reshape(-1, 1))
    # argmin returns the first minimum: ties resolve to the lower index
    indices = np.argmin(diffs, axis=1)
    if targets.ndim == 0:
        return int(indices[0])
    return indices


def sampling_grid(now: Optional[datetime] = None) -> pd.DatetimeIndex:
    """
    Theoretical HYCOM sampling instants up to the availability horizon.

    Daily from 1992-10-02 while only the daily archive exists, then
    3-hourly from 2014-07-01T12:00.
    """
    horizon = availability_horizon(now)
    daily = pd.date_range(EARLIEST_DATE, DAILY_UNTIL, freq="D")
    three_hourly = pd.date_range(DAILY_UNTIL, horizon, freq=THREE_HOURLY)
    return daily.append(three_hourly)


def snap_to_grid(instant: datetime, now: Optional[datetime] = None) -> pd.Timestamp:
    """
    Snap an instant onto the theoretical sampling grid.

    Raises
    ------
    NoProductAvailable
        If the instant lies before the first or after the last grid sample
    """
    instant = as_utc_timestamp(instant)
    grid = sampling_grid(now)
    if instant < grid[0] or instant > grid[-1]:
        raise NoProductAvailable(
            instant,
            f"no HYCOM data before {grid[0]:%Y-%m-%d} or after {grid[-1]:%Y-%m-%d}",
        )
    return grid[nearest_index(grid.values, instant.to_datetime64())]


def decode_hycom_time(hours) -> pd.DatetimeIndex:
    """Convert HYCOM "hours since 2000-01-01 00:00:00" to timestamps."""
    hours = np.asarray(hours, dtype=float).ravel()
    return pd.DatetimeIndex(HYCOM_TIME_ORIGIN + pd.to_timedelta(hours, unit="h"))


def resolve_time(
    requested: datetime,
    time_axis: pd.DatetimeIndex,
    target: Optional[datetime] = None,
    tolerance: pd.Timedelta = DEFAULT_TOLERANCE,
) -> ResolvedTime:
    """
    Match an instant against an actual time axis.

    Parameters
    ----------
    requested : datetime
        Instant the caller asked for; the deviation is measured from it
    time_axis : pd.DatetimeIndex
        Time coordinate served by the product
    target : datetime, optional
        Instant to search for (usually the grid-snapped one); defaults to
        `requested`
    tolerance : pd.Timedelta
        Largest accepted |actual - requested|; equality is accepted

    Raises
    ------
    DataMissing
        If the nearest sample deviates by more than `tolerance`
    """
    requested = as_utc_timestamp(requested)
    target = as_utc_timestamp(target) if target is not None else requested
    index = nearest_index(time_axis.values, target.to_datetime64())
    resolved = ResolvedTime(requested=requested, snapped=pd.Timestamp(time_axis[index]), index=index)

    if abs(resolved.deviation) > tolerance:
        raise DataMissing(
            requested,
            actual=resolved.snapped,
            reason=f"nearest sample {resolved.snapped:%Y-%m-%dT%H:%MZ} is beyond {tolerance}",
        )
    return resolved


def check_product_window(time_axis: pd.DatetimeIndex, snapped: pd.Timestamp,
                         slack: pd.Timedelta = DEFAULT_TOLERANCE) -> None:
    """Raise DataMissing if `snapped` is outside the axis span widened by `slack`."""
    if snapped < time_axis.min() - slack or snapped > time_axis.max() + slack:
        raise DataMissing(
            snapped,
            reason="the given time is outside the time range of the HYCOM product",
        )
