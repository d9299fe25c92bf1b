"""
💾 Subset Cache
===============

Deterministic on-disk cache in front of the resolution pipeline.

The cache key is a pure function of the rounded region bounds, the
grid-snapped instant and the output format, so repeating a request is
always a cache hit and never touches the remote archive.
"""

from dataclasses import dataclass
from typing import Callable, Optional

import pandas as pd

from ..core.helpers import format_timestamp, geo_tag
from ..core.logging_config import get_logger
from ..core.models import OutputFormat, RequestedRegion, Subset
from .store import RecordStore

logger = get_logger(__name__)


def build_cache_key(
    region: RequestedRegion,
    snapped: pd.Timestamp,
    output_format: OutputFormat,
    prefix: Optional[str] = None,
) -> str:
    """
    Cache key / file name for a request.

    Args:
        region: Requested box, in the caller's convention
        snapped: Instant snapped onto the sampling grid
        output_format: Encoding of the stored record
        prefix: Replaces the region tag when given

    Returns:
        e.g. "W190E240Sn5N5_20100101T0000Z.mat"
    """
    tag = prefix or geo_tag(region.as_list)
    return f"{tag}_{format_timestamp(snapped)}.{OutputFormat(output_format).extension}"


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0


class CacheGate:
    """
    Short-circuits requests whose result already exists in the store.

    Usage:
        gate = CacheGate(get_record_store("data/hycom", "native"))
        subset = gate.lookup_or_fetch(key, lambda: pipeline.fetch(...))
    """

    def __init__(self, store: RecordStore):
        self.store = store
        self.stats = CacheStats()

    def lookup_or_fetch(self, key: str, fetch_fn: Callable[[], Subset]) -> Subset:
        """
        Return the cached subset for `key`, or fetch and store it.

        Nothing is written when `fetch_fn` raises.
        """
        if self.store.exists(key):
            self.stats.hits += 1
            logger.info(f"{key} has been downloaded before")
            return self.store.load(key)

        self.stats.misses += 1
        subset = fetch_fn()
        self.store.save(key, subset)
        return subset
