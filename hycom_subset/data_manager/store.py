"""
💾 Subset Record Stores
=======================

Key-addressed persistence for assembled subsets.

Two encodings are supported:
- native: MATLAB .mat structure written with scipy.io, one MAT variable
  per field
- portable: netCDF with named dimensions written through xarray

Entries are written once per key. Each save goes to a temporary file in the
target directory and is renamed into place, so readers never see a partial
file and concurrent writers of the same key simply replace each other.
"""

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd
import scipy.io
import xarray as xr

from ..core.logging_config import get_logger
from ..core.models import OutputFormat, Subset

logger = get_logger(__name__)

_MAT_FIELDS = ("lon", "lat", "depth", "time", "dev_time", "product")


class RecordStore(ABC):
    """Directory-backed store of subsets addressed by cache key."""

    format: OutputFormat

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / key

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def load(self, key: str) -> Subset:
        path = self.path_for(key)
        logger.debug(f"Loading cached subset {path}")
        return self._read(path)

    def save(self, key: str, subset: Subset) -> Path:
        """Persist `subset` under `key`; returns the final path."""
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=path.parent)
        os.close(fd)
        try:
            self._write(Path(tmp_name), subset)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"💾 Cached: {path.name} ({path.stat().st_size / 1024:.1f} KB)")
        return path

    @abstractmethod
    def _read(self, path: Path) -> Subset:
        ...

    @abstractmethod
    def _write(self, path: Path, subset: Subset) -> None:
        ...


class MatRecordStore(RecordStore):
    """Native encoding: a flat MATLAB structure."""

    format = OutputFormat.NATIVE

    def _write(self, path: Path, subset: Subset) -> None:
        record = {
            "lon": np.asarray(subset.lon, dtype=float),
            "lat": np.asarray(subset.lat, dtype=float),
            "depth": np.asarray(subset.depth, dtype=float),
            "time": subset.time.isoformat(),
            "dev_time": subset.deviation_hours,
            "product": subset.product,
        }
        record.update(subset.variables)
        scipy.io.savemat(path, record, appendmat=False, do_compression=True)

    def _read(self, path: Path) -> Subset:
        record = scipy.io.loadmat(path, appendmat=False)
        variables = {
            name: np.asarray(values)
            for name, values in record.items()
            if not name.startswith("__") and name not in _MAT_FIELDS
        }
        product = record.get("product", np.array([""]))
        return Subset(
            lon=np.ravel(record["lon"]),
            lat=np.ravel(record["lat"]),
            depth=np.ravel(record["depth"]),
            time=pd.Timestamp(str(record["time"][0])),
            deviation=pd.Timedelta(hours=float(np.ravel(record["dev_time"])[0])),
            variables=variables,
            product=str(product[0]) if product.size else "",
        )


class NetCDFRecordStore(RecordStore):
    """Portable encoding: self-describing netCDF."""

    format = OutputFormat.PORTABLE

    def _write(self, path: Path, subset: Subset) -> None:
        subset.to_dataset().to_netcdf(path, engine="netcdf4")

    def _read(self, path: Path) -> Subset:
        return Subset.from_dataset(xr.load_dataset(path, engine="netcdf4"))


_STORES = {
    OutputFormat.NATIVE: MatRecordStore,
    OutputFormat.PORTABLE: NetCDFRecordStore,
}


def get_record_store(directory: Union[str, Path], output_format: Union[str, OutputFormat]) -> RecordStore:
    """Record store for `output_format` rooted at `directory`."""
    return _STORES[OutputFormat(output_format)](directory)
