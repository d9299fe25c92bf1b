"""
Coordinate Utilities
====================
Longitude convention handling: wrapping, reconciling a requested box with a
product's native convention, and restoring results to the caller's
convention.

HYCOM products come in two flavours: nine of them use 0..360 longitudes,
the others -180..180. Callers may use either convention regardless of the
product that ends up serving the request.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

from .exceptions import SeamConventionConflict
from .models import LongitudeConvention, RequestedRegion


class RestoreRule(str, Enum):
    """How to bring product longitudes back into the caller's convention."""
    NONE = "none"
    WRAP_ABOVE_180 = "wrap_above_180"  # subtract 360 from values > 180
    WRAP_BELOW_0 = "wrap_below_0"      # add 360 to values < 0


@dataclass(frozen=True)
class LongitudeAdjustment:
    """A requested longitude interval expressed in the product convention."""
    lon_west: float
    lon_east: float
    restore: RestoreRule = RestoreRule.NONE

    @property
    def lon_range(self) -> Tuple[float, float]:
        return (self.lon_west, self.lon_east)


def wrap_longitudes(values) -> np.ndarray:
    """
    Wrap longitude values to [-180, 180) range.

    Examples
    --------
    >>> wrap_longitudes([190, -200, 0])
    array([-170.,  160.,    0.])
    """
    arr = np.asarray(values, dtype=float)
    return ((arr + 180) % 360) - 180


def to_360(values) -> np.ndarray:
    """
    Wrap longitude values to [0, 360) range.

    Examples
    --------
    >>> to_360([-170, 10])
    array([190.,  10.])
    """
    return np.asarray(values, dtype=float) % 360


def reconcile(region: RequestedRegion, convention: LongitudeConvention) -> LongitudeAdjustment:
    """
    Express the requested longitude interval in a product's convention.

    Parameters
    ----------
    region : RequestedRegion
        Box in the caller's convention
    convention : LongitudeConvention
        Native convention of the product's longitude axis

    Returns
    -------
    LongitudeAdjustment
        Adjusted (west, east) and the rule that restores product longitudes
        to the caller's convention

    Raises
    ------
    SeamConventionConflict
        If the request mixes both conventions (a bound below 0 with a bound
        above 180), or if shifting exactly one bound collapses the interval
        onto the product's seam, e.g. [-180, 180] against a 0..360 product
    """
    requested = np.array(region.lon_range, dtype=float)
    lon_reg = requested.copy()
    restore = RestoreRule.NONE

    if lon_reg.min() < 0 and lon_reg.max() > 180:
        raise SeamConventionConflict(region.lon_west, region.lon_east, "mixed-convention request")

    if convention is LongitudeConvention.ZERO_TO_360 and lon_reg.min() < 0:
        restore = RestoreRule.WRAP_ABOVE_180
        lon_reg[lon_reg < 0] += 360
    elif convention is LongitudeConvention.SIGNED_PM180 and lon_reg.max() > 180:
        restore = RestoreRule.WRAP_BELOW_0
        lon_reg[lon_reg > 180] -= 360

    n_adjusted = int(np.sum(lon_reg != requested))
    if n_adjusted == 1 and lon_reg[0] == lon_reg[1]:
        raise SeamConventionConflict(region.lon_west, region.lon_east, convention.value)

    return LongitudeAdjustment(
        lon_west=float(lon_reg[0]),
        lon_east=float(lon_reg[1]),
        restore=restore,
    )


def restore_longitudes(lon: np.ndarray, rule: RestoreRule) -> np.ndarray:
    """Apply a restore rule to product longitudes; returns a new array."""
    lon = np.array(lon, dtype=float)
    if rule is RestoreRule.WRAP_ABOVE_180:
        lon[lon > 180] -= 360
    elif rule is RestoreRule.WRAP_BELOW_0:
        lon[lon < 0] += 360
    return lon
