"""
Subset Planning
===============
Turn a reconciled region into index windows on the product's axes.

Longitude axes are strictly ascending. When the western bound sits after
the eastern one on the axis, the box wraps past the end of the axis back to
its start (the product's seam) and is read in two pieces: the tail of the
axis first, then its head. Concatenating in that order gives a contiguous
box that is ascending once longitudes are restored to the caller's
convention.
"""

from dataclasses import dataclass
from typing import Iterator, Tuple

import numpy as np

from .coordinates import LongitudeAdjustment
from .models import RequestedRegion
from .timegrid import nearest_index


@dataclass(frozen=True)
class IndexRange:
    """A contiguous window on one axis: `count` elements from `start`."""
    start: int
    count: int

    @property
    def stop(self) -> int:
        return self.start + self.count

    @property
    def as_slice(self) -> slice:
        return slice(self.start, self.stop)

    @classmethod
    def between(cls, i: int, j: int) -> 'IndexRange':
        """Inclusive window between two indices, in either order."""
        lo, hi = min(i, j), max(i, j)
        return cls(start=int(lo), count=int(hi - lo + 1))


@dataclass(frozen=True)
class SeamPlan:
    """
    Index windows for one request.

    Attributes:
        crosses_seam: True when the longitude window wraps past the axis end
        lon_ranges: One or two longitude windows, in reassembly order
        lat_range: Latitude window (never wraps)
    """
    crosses_seam: bool
    lon_ranges: Tuple[IndexRange, ...]
    lat_range: IndexRange

    @property
    def n_lon(self) -> int:
        return sum(r.count for r in self.lon_ranges)

    def take_lon(self, lon: np.ndarray) -> np.ndarray:
        """Select and stitch the planned longitudes from a full axis."""
        return np.concatenate([np.asarray(lon)[r.as_slice] for r in self.lon_ranges])

    def take_lat(self, lat: np.ndarray) -> np.ndarray:
        return np.asarray(lat)[self.lat_range.as_slice]

    def read_windows(
        self,
        time_index: int,
        levels: int = 0,
    ) -> Iterator[Tuple[Tuple[int, ...], Tuple[int, ...]]]:
        """
        Yield (start, count) per longitude window in remote dimension order.

        The order is (time, depth, lat, lon) for 3-D variables and
        (time, lat, lon) when `levels` is 0. 3-D variables always read the
        full depth extent.
        """
        for lon_range in self.lon_ranges:
            if levels:
                start = (time_index, 0, self.lat_range.start, lon_range.start)
                count = (1, levels, self.lat_range.count, lon_range.count)
            else:
                start = (time_index, self.lat_range.start, lon_range.start)
                count = (1, self.lat_range.count, lon_range.count)
            yield start, count


def plan_subset(
    adjustment: LongitudeAdjustment,
    region: RequestedRegion,
    lon_axis: np.ndarray,
    lat_axis: np.ndarray,
) -> SeamPlan:
    """
    Plan the index windows for a reconciled region.

    Parameters
    ----------
    adjustment : LongitudeAdjustment
        Longitude bounds already in the product convention
    region : RequestedRegion
        Original request, for the latitude bounds
    lon_axis, lat_axis : np.ndarray
        Full, ascending product axes

    Returns
    -------
    SeamPlan
    """
    i_west, i_east = nearest_index(lon_axis, [adjustment.lon_west, adjustment.lon_east])
    i_south, i_north = nearest_index(lat_axis, [region.lat_south, region.lat_north])
    lat_range = IndexRange.between(i_south, i_north)

    if i_west > i_east:
        last = len(lon_axis) - 1
        return SeamPlan(
            crosses_seam=True,
            lon_ranges=(IndexRange.between(i_west, last), IndexRange.between(0, i_east)),
            lat_range=lat_range,
        )

    return SeamPlan(
        crosses_seam=False,
        lon_ranges=(IndexRange.between(i_west, i_east),),
        lat_range=lat_range,
    )
