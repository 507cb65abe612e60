"""
Nearest-Measurement Selection

Finds the dataset measurement whose listener-relative position is closest
to a requested virtual source. Only nearest-neighbour selection is done;
there is no interpolation between measured directions.
"""

import numpy as np
import logging
from typing import Sequence, Union

from .utils import CartesianVector, ORIGIN
from .exceptions import EmptyDatasetError, InvalidPositionError

# Set up logging
logger = logging.getLogger(__name__)


def _as_position_matrix(positions: Union[np.ndarray, Sequence[CartesianVector]]) -> np.ndarray:
    if isinstance(positions, np.ndarray):
        matrix = positions.astype(np.float64, copy=False)
    else:
        matrix = np.array([tuple(p) for p in positions], dtype=np.float64)

    if matrix.size == 0:
        raise EmptyDatasetError("No measurement positions to select from")

    if matrix.ndim != 2 or matrix.shape[1] != 3:
        raise InvalidPositionError(f"Measurement positions must have shape (M, 3), got {matrix.shape}")

    return matrix


def select_nearest(target: CartesianVector,
                   measurement_positions: Union[np.ndarray, Sequence[CartesianVector]],
                   listener_origin: CartesianVector = ORIGIN) -> int:
    """
    Return the index of the measurement closest to a target position.

    Every measurement position has the listener origin subtracted before the
    Euclidean distance to the target is taken, so the target must already be
    listener-relative.

    Args:
        target: Listener-relative target position
        measurement_positions: Cartesian measurement positions, either an
            (M, 3) array or a sequence of CartesianVector
        listener_origin: Listener reference position in the dataset frame

    Returns:
        Index of the minimum-distance measurement. Ties resolve to the
        lowest index.

    Raises:
        EmptyDatasetError: If there are no measurement positions
        InvalidPositionError: If any coordinate is NaN or infinite
    """
    positions = _as_position_matrix(measurement_positions)

    if not target.is_finite():
        raise InvalidPositionError(f"Target position is not finite: {target}")
    if not listener_origin.is_finite():
        raise InvalidPositionError(f"Listener origin is not finite: {listener_origin}")

    bad_rows = np.flatnonzero(~np.isfinite(positions).all(axis=1))
    if bad_rows.size:
        raise InvalidPositionError(f"Measurement {int(bad_rows[0])} has a non-finite coordinate")

    relative = positions - listener_origin.as_array()
    distances = np.linalg.norm(relative - target.as_array(), axis=1)

    # argmin returns the first occurrence of the minimum
    index = int(np.argmin(distances))
    logger.debug(f"Nearest measurement {index} at distance {distances[index]:.4f}")

    return index
