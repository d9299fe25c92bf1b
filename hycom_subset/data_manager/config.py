"""
🔧 Download Options
===================

User-configurable settings for HYCOM subset requests.
"""

import json
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..core.catalog import STANDARD_NAMES
from ..core.exceptions import UnrecognizedVariable
from ..core.logging_config import get_logger
from ..core.models import OutputFormat

logger = get_logger(__name__)

SUPPORTED_VARIABLES = tuple(STANDARD_NAMES)
DEFAULT_DATA_DIR = Path("data/hycom")


def normalize_variables(names: Sequence[str]) -> List[str]:
    """
    Lower-case, de-duplicate and validate requested variable names.

    Unknown names are dropped with an `UnrecognizedVariable` warning rather
    than failing the request. Request order is kept.

    Raises:
        ValueError: If no supported variable remains
    """
    kept: List[str] = []
    for name in names:
        key = str(name).strip().lower()
        if key not in STANDARD_NAMES:
            message = f"Variable name '{name}' is unrecognized and was dropped"
            logger.warning(message)
            warnings.warn(message, UnrecognizedVariable, stacklevel=3)
            continue
        if key not in kept:
            kept.append(key)

    if not kept:
        raise ValueError(
            f"No supported variable requested. Choose from: {', '.join(SUPPORTED_VARIABLES)}"
        )
    return kept


@dataclass
class DownloadOptions:
    """
    Options for one or many subset requests.

    Attributes:
        target_directory: Where cached subsets are written
        variables: Subset of ssh, temp, salt, uvel, vvel
        output_format: "native" (.mat) or "portable" (.nc)
        filename_prefix: Overrides the region tag in cache file names
        explicit_endpoint: OPeNDAP URL that bypasses product selection
        tolerance_days: Largest accepted time deviation
        max_attempts: Attempts per request made by the retry layer
        retry_delay_seconds: Pause between attempts
    """
    target_directory: Path = DEFAULT_DATA_DIR
    variables: List[str] = field(default_factory=lambda: list(SUPPORTED_VARIABLES))
    output_format: OutputFormat = OutputFormat.NATIVE
    filename_prefix: Optional[str] = None
    explicit_endpoint: Optional[str] = None
    tolerance_days: float = 1.0
    max_attempts: int = 5
    retry_delay_seconds: float = 1.0

    def __post_init__(self):
        self.target_directory = Path(self.target_directory)
        self.output_format = OutputFormat(self.output_format)
        self.variables = normalize_variables(self.variables)
        if self.tolerance_days < 0:
            raise ValueError(f"tolerance_days must be >= 0, got {self.tolerance_days}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    def to_dict(self) -> Dict:
        return {
            "target_directory": str(self.target_directory),
            "variables": list(self.variables),
            "output_format": self.output_format.value,
            "filename_prefix": self.filename_prefix,
            "explicit_endpoint": self.explicit_endpoint,
            "tolerance_days": self.tolerance_days,
            "max_attempts": self.max_attempts,
            "retry_delay_seconds": self.retry_delay_seconds,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "DownloadOptions":
        known = cls.__dataclass_fields__
        unknown = set(data) - set(known)
        if unknown:
            logger.warning(f"Ignoring unknown option(s): {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def load(cls, path: Path) -> "DownloadOptions":
        """Load options from a JSON file."""
        with open(path) as f:
            return cls.from_dict(json.load(f))

    def save(self, path: Path) -> None:
        """Save options to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
