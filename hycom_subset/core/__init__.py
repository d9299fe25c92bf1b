"""
Core Module - Catalog, time and coordinate resolution
=====================================================
"""
from .exceptions import (
    HycomError,
    NoProductAvailable,
    SeamConventionConflict,
    DataMissing,
    RemoteFetchFailure,
    UnrecognizedVariable,
)
from .models import LongitudeConvention, OutputFormat, RequestedRegion, ResolvedTime, Subset
from .catalog import (
    ProductDescriptor,
    PRODUCT_PRIORITY,
    STANDARD_NAMES,
    select_product,
    list_products,
    get_product,
)
from .timegrid import nearest_index, snap_to_grid, resolve_time, decode_hycom_time
from .coordinates import (
    LongitudeAdjustment,
    RestoreRule,
    reconcile,
    restore_longitudes,
    wrap_longitudes,
    to_360,
)
from .planner import IndexRange, SeamPlan, plan_subset

__all__ = [
    # Errors
    "HycomError",
    "NoProductAvailable",
    "SeamConventionConflict",
    "DataMissing",
    "RemoteFetchFailure",
    "UnrecognizedVariable",
    # Models
    "LongitudeConvention",
    "OutputFormat",
    "RequestedRegion",
    "ResolvedTime",
    "Subset",
    # Catalog
    "ProductDescriptor",
    "PRODUCT_PRIORITY",
    "STANDARD_NAMES",
    "select_product",
    "list_products",
    "get_product",
    # Time
    "nearest_index",
    "snap_to_grid",
    "resolve_time",
    "decode_hycom_time",
    # Coordinates
    "LongitudeAdjustment",
    "RestoreRule",
    "reconcile",
    "restore_longitudes",
    "wrap_longitudes",
    "to_360",
    # Planner
    "IndexRange",
    "SeamPlan",
    "plan_subset",
]
