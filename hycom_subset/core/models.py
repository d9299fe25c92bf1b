"""
Core Domain Models
==================
Models shared by the resolution pipeline, the record stores and the CLI.

These models provide:
- Runtime validation of user requests (pydantic)
- Plain containers for intermediate results (dataclasses)
- A single in-memory record (`Subset`) returned to callers

Models:
    - LongitudeConvention: 0..360 vs -180..180 longitude axes
    - RequestedRegion: geographic box in the caller's convention
    - ResolvedTime: requested instant, matched instant and their deviation
    - Subset: the assembled HYCOM subset

Example:
    >>> region = RequestedRegion.from_list([190, 240, -5, 5])  # Nino 3.4
    >>> region.lon_range
    (190.0, 240.0)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
import xarray as xr
from pydantic import BaseModel, Field, model_validator


# =============================================================================
# ENUMS
# =============================================================================

class LongitudeConvention(str, Enum):
    """Longitude convention of a coordinate axis."""
    ZERO_TO_360 = "0_360"
    SIGNED_PM180 = "-180_180"

    @classmethod
    def infer(
        cls,
        lon: np.ndarray,
        default: Optional["LongitudeConvention"] = None,
    ) -> Optional["LongitudeConvention"]:
        """
        Classify an actual longitude axis.

        An axis reaching past 180 is 0..360, an axis with negative values is
        -180..180. A regional axis inside [0, 180] is ambiguous and gets
        `default`.
        """
        lon = np.asarray(lon, dtype=float)
        if lon.size == 0:
            return default
        if float(np.nanmax(lon)) > 180:
            return cls.ZERO_TO_360
        if float(np.nanmin(lon)) < 0:
            return cls.SIGNED_PM180
        return default


class OutputFormat(str, Enum):
    """On-disk encodings of a cached subset."""
    NATIVE = "native"        # MATLAB .mat structure
    PORTABLE = "portable"    # netCDF with named dimensions

    @property
    def extension(self) -> str:
        return "mat" if self is OutputFormat.NATIVE else "nc"


# =============================================================================
# REQUEST MODELS
# =============================================================================

class RequestedRegion(BaseModel):
    """
    Geographic box in the caller's longitude convention.

    Attributes:
        lon_west: Western longitude (0..360 or -180..180)
        lon_east: Eastern longitude (0..360 or -180..180)
        lat_south: Southern latitude (-80 to 80)
        lat_north: Northern latitude (-80 to 80)

    Note:
        lon_west > lon_east is valid and means the box crosses the
        antimeridian in the caller's convention, e.g. [170, -170].
    """
    lon_west: float = Field(..., ge=-180, le=360, description="Western longitude")
    lon_east: float = Field(..., ge=-180, le=360, description="Eastern longitude")
    lat_south: float = Field(..., ge=-80, le=80, description="Southern latitude")
    lat_north: float = Field(..., ge=-80, le=80, description="Northern latitude")

    @model_validator(mode='after')
    def validate_ranges(self) -> 'RequestedRegion':
        """Ensure lat_south <= lat_north."""
        if self.lat_south > self.lat_north:
            raise ValueError(
                f"lat_south ({self.lat_south}) must be <= lat_north ({self.lat_north})"
            )
        return self

    @property
    def lon_range(self) -> Tuple[float, float]:
        """Return longitude range as (west, east)."""
        return (self.lon_west, self.lon_east)

    @property
    def lat_range(self) -> Tuple[float, float]:
        """Return latitude range as (south, north)."""
        return (self.lat_south, self.lat_north)

    @property
    def as_list(self) -> List[float]:
        """Return as [west, east, south, north]."""
        return [self.lon_west, self.lon_east, self.lat_south, self.lat_north]

    @classmethod
    def from_list(cls, region: List[float]) -> 'RequestedRegion':
        """Create from [lon_west, lon_east, lat_south, lat_north]."""
        if len(region) != 4:
            raise ValueError(f"Expected 4 elements, got {len(region)}")
        return cls(
            lon_west=region[0],
            lon_east=region[1],
            lat_south=region[2],
            lat_north=region[3],
        )


# =============================================================================
# RESULT MODELS
# =============================================================================

@dataclass(frozen=True)
class ResolvedTime:
    """An instant matched against a time axis."""
    requested: pd.Timestamp
    snapped: pd.Timestamp
    index: int

    @property
    def deviation(self) -> pd.Timedelta:
        """Actual minus requested."""
        return self.snapped - self.requested


@dataclass
class Subset:
    """
    An assembled HYCOM subset.

    Variable arrays are laid out as (lon, lat) for sea-surface height and
    (lon, lat, depth) for the 3-D fields. Longitudes are always in the
    convention the caller used in the request.
    """
    lon: np.ndarray
    lat: np.ndarray
    depth: np.ndarray
    time: pd.Timestamp
    deviation: pd.Timedelta
    variables: Dict[str, np.ndarray] = field(default_factory=dict)
    product: str = ""

    @property
    def deviation_hours(self) -> float:
        return self.deviation / pd.Timedelta(hours=1)

    def __getitem__(self, name: str) -> np.ndarray:
        return self.variables[name]

    def to_dataset(self) -> xr.Dataset:
        """Render the subset as an xarray Dataset with named dimensions."""
        data_vars = {}
        for name, values in self.variables.items():
            dims = ("lon", "lat", "depth") if values.ndim == 3 else ("lon", "lat")
            data_vars[name] = (dims, values)
        # plain float: a time "units" attribute would be decoded to timedelta64
        data_vars["dev_time"] = ((), self.deviation_hours, {"long_name": "actual minus requested time (hours)"})

        ds = xr.Dataset(
            data_vars,
            coords={
                "lon": ("lon", self.lon),
                "lat": ("lat", self.lat),
                "depth": ("depth", self.depth),
                "time": self.time.to_datetime64(),
            },
        )
        ds.attrs["product"] = self.product
        return ds

    @classmethod
    def from_dataset(cls, ds: xr.Dataset) -> 'Subset':
        """Inverse of `to_dataset`."""
        variables = {
            name: np.asarray(ds[name].values)
            for name in ds.data_vars
            if name != "dev_time"
        }
        return cls(
            lon=np.asarray(ds["lon"].values),
            lat=np.asarray(ds["lat"].values),
            depth=np.asarray(ds["depth"].values),
            time=pd.Timestamp(ds["time"].values[()]),
            deviation=pd.Timedelta(hours=float(ds["dev_time"].values)),
            variables=variables,
            product=str(ds.attrs.get("product", "")),
        )
