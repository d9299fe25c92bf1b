"""
HYCOM Subset
============
Download region/time subsets of the global HYCOM ocean model archive with
automatic product selection, longitude reconciliation and on-disk caching.
"""

from .core import (
    HycomError,
    NoProductAvailable,
    SeamConventionConflict,
    DataMissing,
    RemoteFetchFailure,
    UnrecognizedVariable,
    RequestedRegion,
    Subset,
    OutputFormat,
    select_product,
)
from .data_manager import DownloadOptions
from .services import HycomSubsetService, get_hycom_subset

__version__ = "0.1.0"

__all__ = [
    "HycomError",
    "NoProductAvailable",
    "SeamConventionConflict",
    "DataMissing",
    "RemoteFetchFailure",
    "UnrecognizedVariable",
    "RequestedRegion",
    "Subset",
    "OutputFormat",
    "select_product",
    "DownloadOptions",
    "HycomSubsetService",
    "get_hycom_subset",
]
