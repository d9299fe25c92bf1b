"""
Services Layer
==============
Remote access, assembly, retry and the request pipeline.

Usage:
    from hycom_subset.services import HycomSubsetService

    service = HycomSubsetService(options)
    subset = service.download([117.5, 122.5, 37, 41], "2020-01-01T03:00")
"""

from .opendap_source import OpendapArraySource, RemoteArraySource
from .assembler import assemble, read_variable
from .retry import RetryPolicy, run_with_retry
from .hycom_service import HycomSubsetService, get_hycom_subset

__all__ = [
    "OpendapArraySource",
    "RemoteArraySource",
    "assemble",
    "read_variable",
    "RetryPolicy",
    "run_with_retry",
    "HycomSubsetService",
    "get_hycom_subset",
]
