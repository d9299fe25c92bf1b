"""
HYCOM Product Catalog
=====================

Static table of the global HYCOM products served by tds.hycom.org.

The archive is a historical sequence of experiments whose time windows
overlap: products were deprecated and data corrections were layered on top
of older runs. A product is selected by walking the table from top to
bottom and taking the first entry whose guard accepts the instant.

DO NOT reorder the entries below. Later, broader entries are shadowed by
earlier, narrower ones on purpose; sorting by window start or end would
change which product serves a given date.

Example:
    product = select_product(pd.Timestamp("2018-01-15"))
    product.name                       # "GLBv0.08/expt_93.0"
    product.endpoint_for("temp", ts)   # OPeNDAP URL
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

import pandas as pd

from .exceptions import NoProductAvailable
from .helpers import as_utc_timestamp, utc_now
from .logging_config import get_logger
from .models import LongitudeConvention

logger = get_logger(__name__)

THREDDS_BASE = "http://tds.hycom.org/thredds/dodsC"

EARLIEST_DATE = pd.Timestamp("1992-10-02")
DAILY_UNTIL = pd.Timestamp("2014-07-01 12:00")
ESPC_START = pd.Timestamp("2024-09-04")
AVAILABILITY_LAG = pd.Timedelta(days=1)

THREE_HOURLY = pd.Timedelta(hours=3)
DAILY = pd.Timedelta(days=1)

# Canonical variable -> HYCOM standard name
STANDARD_NAMES: Dict[str, str] = {
    "ssh": "surf_el",
    "temp": "water_temp",
    "salt": "salinity",
    "uvel": "water_u",
    "vvel": "water_v",
}

SURFACE_VARIABLES = ("ssh",)


# =============================================================================
# PRODUCT DESCRIPTOR
# =============================================================================

@dataclass(frozen=True)
class ProductDescriptor:
    """
    One upstream HYCOM dataset version.

    Attributes:
        name: Product path below the THREDDS root (e.g. "GLBv0.08/expt_93.0")
        valid_from: First instant served (inclusive)
        valid_to: Last instant served (inclusive), None when open-ended
        endpoint_template: OPeNDAP URL; may hold a "{var}" placeholder
        longitude_convention: Native convention of the lon axis
        levels: Number of vertical levels
        cadence: Nominal sampling interval of the 3-D fields
        ssh_hourly_after: From this instant on, ssh is sampled hourly
        variable_endpoints: Per-variable endpoint suffix, filled into "{var}"
        partitioned_by_year: Endpoints are split into one dataset per year
    """
    name: str
    valid_from: pd.Timestamp
    valid_to: Optional[pd.Timestamp]
    endpoint_template: str
    longitude_convention: Optional[LongitudeConvention]
    levels: int = 40
    cadence: pd.Timedelta = THREE_HOURLY
    ssh_hourly_after: Optional[pd.Timestamp] = None
    variable_endpoints: Dict[str, str] = field(default_factory=dict)
    partitioned_by_year: bool = False

    def covers(self, instant: pd.Timestamp) -> bool:
        if instant < self.valid_from:
            return False
        return self.valid_to is None or instant <= self.valid_to

    def ssh_is_hourly(self, instant: pd.Timestamp) -> bool:
        return self.ssh_hourly_after is not None and instant >= self.ssh_hourly_after

    def endpoint_for(self, variable: str, instant: pd.Timestamp) -> str:
        """OPeNDAP endpoint holding `variable` at `instant`."""
        url = self.endpoint_template.format(var=self.variable_endpoints.get(variable, ""))
        if self.partitioned_by_year:
            url = f"{url}/{instant.year}"
        return url

    def coordinate_endpoint(self, instant: pd.Timestamp) -> str:
        """Endpoint whose lon/lat/depth/time axes describe the 3-D fields."""
        return self.endpoint_for("temp", instant)

    @property
    def experiment(self) -> str:
        return self.name.rsplit("/", 1)[-1]

    @classmethod
    def from_endpoint(cls, url: str) -> 'ProductDescriptor':
        """
        Descriptor for an explicitly supplied endpoint.

        Nothing is known about such a product up front: the window is
        unbounded and the longitude convention is read from the data.
        """
        name = "/".join(url.rstrip("?/").split("/")[-2:])
        return cls(
            name=name,
            valid_from=pd.Timestamp.min,
            valid_to=None,
            endpoint_template=url.replace("{", "{{").replace("}", "}}"),
            longitude_convention=None,
        )


def _glb(name: str) -> str:
    return f"{THREDDS_BASE}/{name}?"


def _between(start: str, end: str) -> Callable[[pd.Timestamp], bool]:
    lo, hi = pd.Timestamp(start), pd.Timestamp(end)
    return lambda t: lo <= t <= hi


def _since(start: str) -> Callable[[pd.Timestamp], bool]:
    lo = pd.Timestamp(start)
    return lambda t: t >= lo


def _product(name: str, start: str, end: Optional[str], lon: LongitudeConvention,
             cadence: pd.Timedelta = THREE_HOURLY, **kwargs) -> ProductDescriptor:
    return ProductDescriptor(
        name=name,
        valid_from=pd.Timestamp(start),
        valid_to=pd.Timestamp(end) if end else None,
        endpoint_template=kwargs.pop("endpoint_template", _glb(name)),
        longitude_convention=lon,
        cadence=cadence,
        **kwargs,
    )


_E360 = LongitudeConvention.ZERO_TO_360
_E180 = LongitudeConvention.SIGNED_PM180


# =============================================================================
# PRIORITY TABLE
# =============================================================================

PRODUCT_PRIORITY: Tuple[Tuple[Callable[[pd.Timestamp], bool], ProductDescriptor], ...] = (
    # ------ ESPC-D-V02 (2024-9-4 to present, 3-hourly, ssh hourly, 40 levels, 0.08x0.04)
    (_since("2024-09-04"), _product(
        "ESPC-D-V02", "2024-09-04", None, _E360,
        endpoint_template=f"{THREDDS_BASE}/ESPC-D-V02/{{var}}",
        ssh_hourly_after=ESPC_START,
        variable_endpoints={"ssh": "ssh", "temp": "t3z", "salt": "s3z", "uvel": "u3z", "vvel": "v3z"},
        partitioned_by_year=True,
    )),

    # ------ GLBv0.08 (2014-7-1 to 2020-2-19, 3-hourly, 40 levels, 0.08x0.08)
    (_between("2018-01-01 12:00", "2020-02-19 09:00"),
     _product("GLBv0.08/expt_93.0", "2018-01-01 12:00", "2020-02-19 09:00", _E360)),
    (_between("2017-10-01 12:00", "2018-03-20 09:00"),
     _product("GLBv0.08/expt_92.9", "2017-10-01 12:00", "2018-03-20 09:00", _E360)),
    (_between("2017-06-01 12:00", "2017-10-01 09:00"),
     _product("GLBv0.08/expt_57.7", "2017-06-01 12:00", "2017-10-01 09:00", _E180)),
    (_between("2017-02-01 12:00", "2017-06-01 09:00"),
     _product("GLBv0.08/expt_92.8", "2017-02-01 12:00", "2017-06-01 09:00", _E360)),
    (_between("2016-05-01 12:00", "2017-02-01 09:00"),
     _product("GLBv0.08/expt_57.2", "2016-05-01 12:00", "2017-02-01 09:00", _E180)),
    (_between("2014-07-01 12:00", "2016-09-30 09:00"),
     _product("GLBv0.08/expt_56.3", "2014-07-01 12:00", "2016-09-30 09:00", _E180)),

    # ------ GLBy0.08 (2018-12-4 to 2024-9-4, 3-hourly, 40 levels, 0.08x0.04)
    (_since("2018-12-04 12:00"),
     _product("GLBy0.08/expt_93.0", "2018-12-04 12:00", None, _E360)),

    # ------ GLBu0.08 (1992-10-2 to 2018-11-20, daily, 40 levels, 0.08x0.08)
    (_between("2016-04-18", "2018-11-20"),
     _product("GLBu0.08/expt_91.2", "2016-04-18", "2018-11-20", _E360, DAILY)),
    (_between("2014-04-07", "2016-04-18"),
     _product("GLBu0.08/expt_91.1", "2014-04-07", "2016-04-18", _E360, DAILY)),
    (_between("2013-08-17", "2014-04-08"),
     _product("GLBu0.08/expt_91.0", "2013-08-17", "2014-04-08", _E360, DAILY)),
    (_between("1995-08-01", "2012-12-31"),
     _product("GLBu0.08/expt_19.1", "1995-08-01", "2012-12-31", _E180, DAILY)),
    # 2012-09-03 to 2012-12-02 are missing upstream
    (_between("2012-01-25", "2013-08-20"),
     _product("GLBu0.08/expt_90.9", "2012-01-25", "2013-08-20", _E360, DAILY)),
    (_between("1992-10-02", "1995-07-31"),
     _product("GLBu0.08/expt_19.0", "1992-10-02", "1995-07-31", _E180, DAILY)),
)


# =============================================================================
# LOOKUP
# =============================================================================

def availability_horizon(now: Optional[datetime] = None) -> pd.Timestamp:
    """Latest instant the archive is expected to serve: start of yesterday."""
    now = as_utc_timestamp(now) if now is not None else utc_now()
    return (now - AVAILABILITY_LAG).normalize()


def select_product(instant: datetime, now: Optional[datetime] = None) -> ProductDescriptor:
    """
    Select the HYCOM product serving `instant`.

    Args:
        instant: Requested (usually grid-snapped) instant, naive UTC
        now: Reference "now" for the rolling horizon (default: current time)

    Returns:
        The first catalog entry whose guard accepts the instant

    Raises:
        NoProductAvailable: Before 1992-10-02, after the horizon, or when
            no guard matches
    """
    instant = as_utc_timestamp(instant)
    horizon = availability_horizon(now)

    if instant < EARLIEST_DATE:
        raise NoProductAvailable(instant, f"no HYCOM data before {EARLIEST_DATE:%Y-%m-%d}")
    if instant > horizon:
        raise NoProductAvailable(instant, f"no HYCOM data after {horizon:%Y-%m-%d}")

    for guard, product in PRODUCT_PRIORITY:
        if guard(instant):
            logger.info(f"HYCOM_{product.experiment} selected for {instant:%Y-%m-%dT%H:%MZ}")
            return product

    raise NoProductAvailable(instant, "no catalog entry covers this instant")


def list_products() -> List[ProductDescriptor]:
    """All catalog entries in priority order."""
    return [product for _, product in PRODUCT_PRIORITY]


def get_product(name: str) -> ProductDescriptor:
    """
    Look up a catalog entry by name.

    Raises:
        KeyError: If the product is not in the catalog
    """
    for product in list_products():
        if product.name == name:
            return product
    available = ", ".join(p.name for p in list_products())
    raise KeyError(f"Product '{name}' not in catalog. Available: {available}")
