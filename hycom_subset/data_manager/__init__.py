"""
📊 Data Manager
===============

Persistence and options for HYCOM subsets:
- Download options (JSON round-trip)
- Record stores (.mat and netCDF)
- Cache gate keyed by region + time + format
"""

from .config import DownloadOptions, SUPPORTED_VARIABLES, normalize_variables
from .store import RecordStore, MatRecordStore, NetCDFRecordStore, get_record_store
from .cache import CacheGate, build_cache_key

__all__ = [
    "DownloadOptions",
    "SUPPORTED_VARIABLES",
    "normalize_variables",
    "RecordStore",
    "MatRecordStore",
    "NetCDFRecordStore",
    "get_record_store",
    "CacheGate",
    "build_cache_key",
]
