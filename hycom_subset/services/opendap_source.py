"""
HYCOM OPeNDAP Array Source
==========================

Read-only access to HYCOM THREDDS endpoints via OPeNDAP.

Only coordinate axes are read in full; variables are read as index windows
so that the server subsets before anything crosses the network.

Usage:
    with OpendapArraySource() as source:
        lon = source.read_full(url, "lon")
        block = source.read_range(url, "water_temp", (10, 0, 200, 300), (1, 40, 50, 60))
"""

from typing import Dict, Protocol, Sequence, runtime_checkable

import numpy as np
import xarray as xr

from ..core.exceptions import RemoteFetchFailure
from ..core.logging_config import get_logger, log_call

logger = get_logger(__name__)


@runtime_checkable
class RemoteArraySource(Protocol):
    """Capability the pipeline needs from a remote array archive."""

    def read_full(self, endpoint: str, name: str) -> np.ndarray:
        ...

    def read_range(
        self,
        endpoint: str,
        variable: str,
        start: Sequence[int],
        count: Sequence[int],
    ) -> np.ndarray:
        ...


class OpendapArraySource:
    """
    Remote array source backed by xarray / netCDF4 OPeNDAP access.

    Opened datasets are kept until `close()` so that the axes and the
    variable windows of one request share a single connection per endpoint.
    Times are left undecoded (HYCOM stores hours since 2000-01-01).
    """

    def __init__(self, engine: str = "netcdf4"):
        self.engine = engine
        self._datasets: Dict[str, xr.Dataset] = {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # ==========================================================================
    # READS
    # ==========================================================================

    @log_call(logger)
    def read_full(self, endpoint: str, name: str) -> np.ndarray:
        """Read a whole (coordinate) variable."""
        try:
            return np.asarray(self._open(endpoint)[name].values)
        except RemoteFetchFailure:
            raise
        except Exception as e:
            raise RemoteFetchFailure(endpoint, name, f"{type(e).__name__}: {e}") from e

    @log_call(logger)
    def read_range(
        self,
        endpoint: str,
        variable: str,
        start: Sequence[int],
        count: Sequence[int],
    ) -> np.ndarray:
        """Read `count` elements from `start` along each dimension of `variable`."""
        window = tuple(slice(s, s + c) for s, c in zip(start, count))
        try:
            return np.asarray(self._open(endpoint)[variable][window].values)
        except RemoteFetchFailure:
            raise
        except Exception as e:
            raise RemoteFetchFailure(endpoint, variable, f"{type(e).__name__}: {e}") from e

    def close(self) -> None:
        for ds in self._datasets.values():
            ds.close()
        self._datasets.clear()

    # ==========================================================================
    # PRIVATE METHODS
    # ==========================================================================

    def _open(self, endpoint: str) -> xr.Dataset:
        url = endpoint.rstrip("?")
        if url not in self._datasets:
            logger.debug(f"Opening {url}")
            try:
                self._datasets[url] = xr.open_dataset(url, engine=self.engine, decode_times=False)
            except Exception as e:
                raise RemoteFetchFailure(url, "<dataset>", f"{type(e).__name__}: {e}") from e
        return self._datasets[url]
