"""
Helper Functions
================
Small utilities for timestamps, rounding and file naming.
"""

import math
from datetime import datetime
from typing import Iterable, List, Union

import pandas as pd


def as_utc_timestamp(value: Union[str, datetime, pd.Timestamp]) -> pd.Timestamp:
    """
    Convert any datetime-like value to a naive UTC `pd.Timestamp`.

    Aware values are converted to UTC first; naive values are taken to be
    UTC already.

    Examples
    --------
    >>> as_utc_timestamp("2010-01-01T00:00Z")
    Timestamp('2010-01-01 00:00:00')
    """
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def utc_now() -> pd.Timestamp:
    """Current time as a naive UTC timestamp."""
    return pd.Timestamp.now(tz="UTC").tz_localize(None)


def round_half_away(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero.

    Python's built-in `round` rounds halves to even, which would make
    117.5 and 118.5 both land on 118.

    Examples
    --------
    >>> round_half_away(117.5), round_half_away(-2.5)
    (118, -3)
    """
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def geo_tag(bounds: Iterable[float]) -> str:
    """
    Filesystem-safe tag for a region, e.g. "W190E240Sn5N5".

    Bounds are (west, east, south, north), rounded half away from zero.
    The minus sign is spelled "n" (negative).
    """
    west, east, south, north = [round_half_away(b) for b in bounds]
    tag = f"W{west}E{east}S{south}N{north}"
    return tag.replace("-", "n")


def format_timestamp(ts: pd.Timestamp) -> str:
    """Minute-resolution UTC stamp used in file names."""
    return ts.strftime("%Y%m%dT%H%MZ")


def time_span(start, end, step_hours: float) -> List[pd.Timestamp]:
    """Instants from `start` to `end` inclusive, `step_hours` apart."""
    start, end = as_utc_timestamp(start), as_utc_timestamp(end)
    if step_hours <= 0:
        raise ValueError(f"step_hours must be positive, got {step_hours}")
    return list(pd.date_range(start, end, freq=pd.Timedelta(hours=step_hours)))
