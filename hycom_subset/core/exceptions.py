"""
🚨 HYCOM Subset Exceptions
==========================
Typed failures raised by the resolution pipeline.

The core never retries on its own; the retry layer decides what to do
from the exception class alone.
"""

from typing import Any, Dict, Optional


# ==========================
# BASE EXCEPTION
# ==========================

class HycomError(Exception):
    """Base exception for every failure of the subset pipeline."""

    retryable = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        self.attempts: Optional[int] = None
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


# ==========================
# FATAL REQUEST ERRORS
# ==========================

class NoProductAvailable(HycomError):
    """Raised when no HYCOM product covers the requested instant."""

    def __init__(self, instant: Any, reason: Optional[str] = None):
        message = f"No available HYCOM product for {instant}"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message,
            details={"instant": str(instant), "reason": reason},
        )


class SeamConventionConflict(HycomError):
    """Raised when a longitude interval cannot be expressed in the product convention."""

    def __init__(self, lon_west: float, lon_east: float, convention: str):
        super().__init__(
            message=(
                f"Longitudes [{lon_west}, {lon_east}] hit the longitudinal bounds "
                f"of a {convention} product; adjust the region"
            ),
            details={"lon_west": lon_west, "lon_east": lon_east, "convention": convention},
        )


class DataMissing(HycomError):
    """Raised when the nearest available sample is farther than the tolerance."""

    def __init__(self, requested: Any, actual: Any = None, reason: Optional[str] = None):
        message = f"HYCOM data is missing for {requested}"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message,
            details={"requested": str(requested), "actual": str(actual), "reason": reason},
        )


# ==========================
# TRANSIENT ERRORS
# ==========================

class RemoteFetchFailure(HycomError):
    """Raised when a read against the remote archive fails."""

    retryable = True

    def __init__(self, endpoint: str, name: str, reason: str):
        super().__init__(
            message=f"Remote read of '{name}' from {endpoint} failed: {reason}",
            details={"endpoint": endpoint, "name": name, "reason": reason},
        )


# ==========================
# WARNINGS
# ==========================

class UnrecognizedVariable(UserWarning):
    """Emitted when a requested variable name is not supported; the name is dropped."""
