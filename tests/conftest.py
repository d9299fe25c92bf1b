"""
Pytest Configuration
====================
Shared fixtures: an in-memory stand-in for the HYCOM THREDDS server.

The fake archive serves synthetic products laid out like the real ones
(surf_el(time, lat, lon), water_temp(time, depth, lat, lon), time in hours
since 2000-01-01) and records every read, so tests can assert how many
remote calls a request made and with which offsets.
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
import xarray as xr

project_root = Path(__file__).parent.parent.absolute()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from hycom_subset.core.exceptions import RemoteFetchFailure  # noqa: E402

THREDDS = "http://tds.hycom.org/thredds/dodsC"

LON_360 = np.arange(0.0, 360.0, 1.0)
LON_180 = np.arange(-180.0, 180.0, 1.0)
LAT = np.arange(-20.0, 21.0, 1.0)
DEPTH = np.array([0.0, 10.0, 50.0])


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "network: marks tests that talk to the real HYCOM server"
    )


# =============================================================================
# FAKE ARCHIVE
# =============================================================================

def hycom_hours(times) -> np.ndarray:
    """Encode timestamps as HYCOM hours since 2000-01-01."""
    deltas = pd.DatetimeIndex(times) - pd.Timestamp("2000-01-01")
    return (deltas / pd.Timedelta(hours=1)).to_numpy(dtype=float)


def make_product_dataset(lon, times, lat=LAT, depth=DEPTH) -> xr.Dataset:
    """
    Synthetic HYCOM product.

    surf_el, water_u and water_v hold the longitude of each column, so a
    stitched array can be checked against the stitched axis. water_temp
    holds latitude + 100 * level, salinity holds the time index.
    """
    lon = np.asarray(lon, dtype=float)
    n_t, n_z, n_y, n_x = len(times), len(depth), len(lat), len(lon)

    lon_field = np.broadcast_to(lon, (n_t, n_y, n_x)).astype("float32")
    lon_field_3d = np.broadcast_to(lon, (n_t, n_z, n_y, n_x)).astype("float32")
    temp = (lat[None, None, :, None] + 100.0 * np.arange(n_z)[None, :, None, None]
            + np.zeros((n_t, n_z, n_y, n_x))).astype("float32")
    salt = (np.arange(n_t)[:, None, None, None] + np.zeros((n_t, n_z, n_y, n_x))).astype("float32")

    return xr.Dataset(
        {
            "surf_el": (("time", "lat", "lon"), lon_field.copy()),
            "water_temp": (("time", "depth", "lat", "lon"), temp),
            "salinity": (("time", "depth", "lat", "lon"), salt),
            "water_u": (("time", "depth", "lat", "lon"), lon_field_3d.copy()),
            "water_v": (("time", "depth", "lat", "lon"), lon_field_3d.copy()),
        },
        coords={
            "time": ("time", hycom_hours(times)),
            "depth": ("depth", np.asarray(depth, dtype=float)),
            "lat": ("lat", np.asarray(lat, dtype=float)),
            "lon": ("lon", lon),
        },
    )


class FakeArraySource:
    """RemoteArraySource serving in-memory datasets keyed by endpoint."""

    def __init__(self):
        self.datasets = {}
        self.calls = []
        self.fail_reads = 0
        self.closed = False

    def add(self, endpoint: str, ds: xr.Dataset) -> None:
        self.datasets[endpoint.rstrip("?")] = ds

    @property
    def n_reads(self) -> int:
        return len(self.calls)

    def range_calls(self, variable: str):
        return [c for c in self.calls if c[0] == "range" and c[2] == variable]

    def _dataset(self, endpoint: str, name: str) -> xr.Dataset:
        if self.fail_reads > 0:
            self.fail_reads -= 1
            raise RemoteFetchFailure(endpoint, name, "simulated outage")
        try:
            return self.datasets[endpoint.rstrip("?")]
        except KeyError:
            raise RemoteFetchFailure(endpoint, name, "unknown endpoint") from None

    def read_full(self, endpoint, name):
        self.calls.append(("full", endpoint, name))
        return self._dataset(endpoint, name)[name].values.copy()

    def read_range(self, endpoint, variable, start, count):
        self.calls.append(("range", endpoint, variable, tuple(start), tuple(count)))
        window = tuple(slice(s, s + c) for s, c in zip(start, count))
        return self._dataset(endpoint, variable)[variable][window].values.copy()

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def fake_archive():
    """
    Fake THREDDS server with a handful of products:

    - GLBu0.08/expt_19.0: -180..180, daily, 1992-10-02 .. 1992-10-06
    - GLBu0.08/expt_19.1: -180..180, daily, 2009-12-30 .. 2010-01-03
    - GLBv0.08/expt_93.0: 0..360, 3-hourly, 2018-01-14 .. 2018-01-16
    - ESPC-D-V02 2025: 0..360, 3-hourly 3-D fields, hourly ssh
    """
    source = FakeArraySource()
    source.add(
        f"{THREDDS}/GLBu0.08/expt_19.0",
        make_product_dataset(LON_180, pd.date_range("1992-10-02", "1992-10-06", freq="D")),
    )
    source.add(
        f"{THREDDS}/GLBu0.08/expt_19.1",
        make_product_dataset(LON_180, pd.date_range("2009-12-30", "2010-01-03", freq="D")),
    )
    source.add(
        f"{THREDDS}/GLBv0.08/expt_93.0",
        make_product_dataset(LON_360, pd.date_range("2018-01-14", "2018-01-16", freq="3h")),
    )
    espc_3d = make_product_dataset(LON_360, pd.date_range("2024-12-31", "2025-01-02", freq="3h"))
    espc_ssh = make_product_dataset(LON_360, pd.date_range("2024-12-31", "2025-01-02", freq="h"))
    for suffix in ("t3z", "s3z", "u3z", "v3z"):
        source.add(f"{THREDDS}/ESPC-D-V02/{suffix}/2025", espc_3d)
    source.add(f"{THREDDS}/ESPC-D-V02/ssh/2025", espc_ssh)
    return source


@pytest.fixture
def fixed_now():
    """Reference "now" that keeps the availability horizon stable."""
    return pd.Timestamp("2025-06-01 12:00")


@pytest.fixture
def sample_subset():
    """A small hand-built subset."""
    from hycom_subset.core.models import Subset

    lon = np.array([190.0, 191.0, 192.0])
    lat = np.array([-1.0, 0.0])
    return Subset(
        lon=lon,
        lat=lat,
        depth=DEPTH.copy(),
        time=pd.Timestamp("2010-01-01"),
        deviation=pd.Timedelta(hours=-3),
        variables={
            "ssh": np.arange(6, dtype="float32").reshape(3, 2),
            "temp": np.arange(18, dtype="float32").reshape(3, 2, 3),
        },
        product="GLBu0.08/expt_19.1",
    )
