"""
HYCOM Subset Service
====================

Resolves a request (region, instant, variables) into a HYCOM subset.

Pipeline, per request:
    cache lookup -> product selection -> time resolution -> longitude
    reconciliation -> subset planning -> range reads -> cache store

A cache hit short-circuits everything after the first step. Retries wrap
the whole pipeline and live in `download`, never inside it.

Usage:
    service = HycomSubsetService(DownloadOptions(target_directory="data/hycom"))
    subset = service.download([190, 240, -5, 5], "2010-01-01")   # Nino 3.4
    subset.lon, subset["temp"].shape
"""

from datetime import datetime
from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..core.catalog import ProductDescriptor, select_product
from ..core.coordinates import reconcile, restore_longitudes
from ..core.helpers import as_utc_timestamp
from ..core.logging_config import LogContext, get_logger
from ..core.models import LongitudeConvention, RequestedRegion, Subset
from ..core.planner import plan_subset
from ..core.timegrid import (
    check_product_window,
    decode_hycom_time,
    resolve_time,
    snap_to_grid,
)
from ..data_manager.cache import CacheGate, build_cache_key
from ..data_manager.config import DownloadOptions
from ..data_manager.store import get_record_store
from .assembler import assemble
from .opendap_source import OpendapArraySource, RemoteArraySource
from .retry import RetryPolicy, run_with_retry

logger = get_logger(__name__)

RegionLike = Union[RequestedRegion, Sequence[float]]


def as_region(region: RegionLike) -> RequestedRegion:
    if isinstance(region, RequestedRegion):
        return region
    return RequestedRegion.from_list(list(region))


class HycomSubsetService:
    """
    Request-resolution and subset-assembly engine.

    Args:
        options: Download options; defaults are used when omitted
        source: Remote array source; an OPeNDAP source when omitted
        now: Fixed "now" for the availability horizon (default: wall clock)
    """

    def __init__(
        self,
        options: Optional[DownloadOptions] = None,
        source: Optional[RemoteArraySource] = None,
        now: Optional[datetime] = None,
    ):
        self.options = options or DownloadOptions()
        self._owns_source = source is None
        self.source = source if source is not None else OpendapArraySource()
        self.store = get_record_store(self.options.target_directory, self.options.output_format)
        self.cache = CacheGate(self.store)
        self.now = now

    def close(self) -> None:
        """Close the remote source if this service created it."""
        if self._owns_source:
            self.source.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @property
    def tolerance(self) -> pd.Timedelta:
        return pd.Timedelta(days=self.options.tolerance_days)

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.options.max_attempts,
            delay_seconds=self.options.retry_delay_seconds,
        )

    # ==========================================================================
    # PUBLIC API
    # ==========================================================================

    def download(self, region: RegionLike, instant: datetime, sleep=None) -> Subset:
        """`get_subset` wrapped in the bounded retry policy."""
        kwargs = {"sleep": sleep} if sleep is not None else {}
        label = f"HYCOM subset at {as_utc_timestamp(instant):%Y-%m-%dT%H:%MZ}"
        return run_with_retry(
            lambda: self.get_subset(region, instant),
            self.retry_policy,
            label=label,
            **kwargs,
        )

    def get_subset(self, region: RegionLike, instant: datetime) -> Subset:
        """
        One attempt: return the cached subset or resolve and fetch it.

        Raises:
            NoProductAvailable: Instant outside the archive horizon
            SeamConventionConflict: Region not expressible in the product convention
            DataMissing: No sample within the tolerance
            RemoteFetchFailure: A remote read failed
        """
        region = as_region(region)
        requested = as_utc_timestamp(instant)
        snapped = snap_to_grid(requested, self.now)
        key = self.cache_key(region, snapped)

        def fetch() -> Subset:
            product = self.resolve_product(snapped)
            with LogContext(logger, f"Downloading {key} from HYCOM_{product.experiment}"):
                return self.fetch_subset(product, region, requested, snapped)

        return self.cache.lookup_or_fetch(key, fetch)

    def cache_key(self, region: RequestedRegion, snapped: pd.Timestamp) -> str:
        return build_cache_key(
            region,
            snapped,
            self.options.output_format,
            prefix=self.options.filename_prefix,
        )

    def resolve_product(self, snapped: pd.Timestamp) -> ProductDescriptor:
        if self.options.explicit_endpoint:
            return ProductDescriptor.from_endpoint(self.options.explicit_endpoint)
        return select_product(snapped, self.now)

    # ==========================================================================
    # RESOLUTION + FETCH
    # ==========================================================================

    def fetch_subset(
        self,
        product: ProductDescriptor,
        region: RequestedRegion,
        requested: pd.Timestamp,
        snapped: pd.Timestamp,
    ) -> Subset:
        """Resolve a request against `product` and read the subset."""
        variables = self.options.variables
        endpoints = {var: product.endpoint_for(var, snapped) for var in variables}
        axis_endpoint = product.coordinate_endpoint(snapped)

        lon_all = np.asarray(self.source.read_full(axis_endpoint, "lon"), dtype=float)
        lat_all = np.asarray(self.source.read_full(axis_endpoint, "lat"), dtype=float)
        depth_all = np.asarray(self.source.read_full(axis_endpoint, "depth"), dtype=float)
        time_all = decode_hycom_time(self.source.read_full(axis_endpoint, "time"))

        if self.options.explicit_endpoint:
            check_product_window(time_all, snapped)

        convention = self._convention(product, lon_all)
        adjustment = reconcile(region, convention)
        plan = plan_subset(adjustment, region, lon_all, lat_all)
        if plan.crosses_seam:
            logger.info(f"Region crosses the {convention.value} seam; reading in two pieces")

        resolved = resolve_time(requested, time_all, target=snapped, tolerance=self.tolerance)

        ssh_time_index = None
        if "ssh" in variables and product.ssh_is_hourly(snapped):
            ssh_time = decode_hycom_time(self.source.read_full(endpoints["ssh"], "time"))
            ssh_resolved = resolve_time(requested, ssh_time, target=snapped, tolerance=self.tolerance)
            if ssh_resolved.snapped != resolved.snapped:
                logger.warning(
                    f"ssh sample {ssh_resolved.snapped:%Y-%m-%dT%H:%MZ} differs from "
                    f"the 3-D fields' {resolved.snapped:%Y-%m-%dT%H:%MZ}"
                )
            ssh_time_index = ssh_resolved.index

        data = assemble(
            self.source,
            plan,
            variables,
            endpoints,
            time_index=resolved.index,
            levels=len(depth_all),
            ssh_time_index=ssh_time_index,
        )

        return Subset(
            lon=restore_longitudes(plan.take_lon(lon_all), adjustment.restore),
            lat=plan.take_lat(lat_all),
            depth=depth_all,
            time=resolved.snapped,
            deviation=resolved.deviation,
            variables=data,
            product=product.name,
        )

    def _convention(self, product: ProductDescriptor, lon_all: np.ndarray) -> LongitudeConvention:
        declared = product.longitude_convention
        actual = LongitudeConvention.infer(lon_all, default=declared)
        if declared is not None and actual is not declared:
            logger.warning(
                f"{product.name} is listed as {declared.value} but serves a {actual.value} axis"
            )
        return actual or LongitudeConvention.SIGNED_PM180


def get_hycom_subset(
    target_directory,
    region: RegionLike,
    instant: datetime,
    variables: Optional[List[str]] = None,
    endpoint: Optional[str] = None,
    **options,
) -> Subset:
    """
    Convenience function: download one HYCOM subset with retries.

    Parameters
    ----------
    target_directory : path
        Where the subset is cached
    region : [lon_west, lon_east, lat_south, lat_north]
        Longitudes in 0..360 or -180..180, latitudes in -80..80
    instant : datetime-like
        Requested time (UTC)
    variables : list of str, optional
        Default: ssh, temp, salt, uvel, vvel
    endpoint : str, optional
        Explicit HYCOM product URL

    Returns
    -------
    Subset
    """
    if variables is not None:
        options["variables"] = variables
    opts = DownloadOptions(target_directory=target_directory, explicit_endpoint=endpoint, **options)
    with HycomSubsetService(opts) as service:
        return service.download(region, instant)
