"""
Fetch Assembly
==============
Issue the planned range reads and stitch the pieces into one array per
variable.
"""

from typing import Dict, Mapping, Optional, Sequence

import numpy as np

from ..core.catalog import STANDARD_NAMES, SURFACE_VARIABLES
from ..core.logging_config import get_logger
from ..core.planner import SeamPlan
from .opendap_source import RemoteArraySource

logger = get_logger(__name__)


def read_variable(
    source: RemoteArraySource,
    endpoint: str,
    variable: str,
    plan: SeamPlan,
    time_index: int,
    levels: int = 0,
) -> np.ndarray:
    """
    Read one variable for a plan and return it laid out as (lon, lat[, depth]).

    Remote blocks come back as (time, [depth,] lat, lon); seam-crossing
    pieces are joined along lon in plan order.
    """
    pieces = []
    for start, count in plan.read_windows(time_index, levels):
        block = np.asarray(source.read_range(endpoint, STANDARD_NAMES[variable], start, count))
        pieces.append(block.reshape(count)[0])
    return np.concatenate(pieces, axis=-1).T.copy()


def assemble(
    source: RemoteArraySource,
    plan: SeamPlan,
    variables: Sequence[str],
    endpoints: Mapping[str, str],
    time_index: int,
    levels: int,
    ssh_time_index: Optional[int] = None,
) -> Dict[str, np.ndarray]:
    """
    Fetch every requested variable.

    Parameters
    ----------
    source : RemoteArraySource
        Where the reads go
    plan : SeamPlan
        Index windows for lon / lat
    variables : sequence of str
        Canonical names (ssh, temp, salt, uvel, vvel)
    endpoints : mapping
        Endpoint per canonical name
    time_index : int
        Offset on the 3-D fields' time axis
    levels : int
        Depth extent of the 3-D fields
    ssh_time_index : int, optional
        Offset on ssh's own time axis when it differs from `time_index`

    Any read failure propagates and aborts the loop; nothing partial is
    returned.
    """
    data: Dict[str, np.ndarray] = {}
    for variable in variables:
        if variable in SURFACE_VARIABLES:
            t_index = time_index if ssh_time_index is None else ssh_time_index
            values = read_variable(source, endpoints[variable], variable, plan, t_index)
        else:
            values = read_variable(source, endpoints[variable], variable, plan, time_index, levels)
        logger.debug(f"{variable}: {values.shape}")
        data[variable] = values
    return data
