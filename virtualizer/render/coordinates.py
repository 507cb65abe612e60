"""
Coordinate Transformations

Converts spherical source positions (degrees, degrees, radius) to the
cartesian frame used for nearest-measurement search. Both a scalar form for
a single position and a vectorised form for whole datasets are provided;
they use the same formulas.

See Also:
    - utils: For SphericalPosition and CartesianVector
    - selector: For the consumer of these vectors
"""

import math
import numpy as np
from typing import Union

from .utils import SphericalPosition, CartesianVector, Vector3


def to_cartesian(position: Union[SphericalPosition, Vector3]) -> CartesianVector:
    """
    Convert a spherical position to a cartesian vector.

    Uses the convention:
    - x = r * cos(elevation) * -sin(azimuth)
    - y = r * cos(elevation) * cos(azimuth)
    - z = r * sin(elevation)

    so azimuth 0 lies on +y (ahead), positive azimuth turns towards -x and
    elevation 0 is the horizontal plane. This is a total function: non-finite
    inputs produce non-finite outputs, which the selector rejects.

    Args:
        position: (azimuth, elevation, radius) with angles in degrees

    Returns:
        The cartesian vector in the radius' unit

    Examples:
        >>> to_cartesian(SphericalPosition(0.0, 0.0, 1.0))
        CartesianVector(x=-0.0, y=1.0, z=0.0)
    """
    azimuth, elevation, radius = position
    azimuth_rad = azimuth * (math.pi / 180.0)
    elevation_rad = elevation * (math.pi / 180.0)

    x = radius * math.cos(elevation_rad) * -math.sin(azimuth_rad)
    y = radius * math.cos(elevation_rad) * math.cos(azimuth_rad)
    z = radius * math.sin(elevation_rad)

    return CartesianVector(x, y, z)


def to_cartesian_array(positions: np.ndarray) -> np.ndarray:
    """
    Vectorised form of to_cartesian.

    Args:
        positions: Array of shape (M, 3) holding (azimuth, elevation, radius)
            rows with angles in degrees

    Returns:
        Array of shape (M, 3) holding (x, y, z) rows
    """
    positions = np.asarray(positions, dtype=np.float64)
    if positions.ndim != 2 or positions.shape[1] != 3:
        raise ValueError(f"Positions must have shape (M, 3), got {positions.shape}")

    azimuth_rad = positions[:, 0] * (math.pi / 180.0)
    elevation_rad = positions[:, 1] * (math.pi / 180.0)
    radius = positions[:, 2]

    cartesian = np.empty_like(positions)
    cartesian[:, 0] = radius * np.cos(elevation_rad) * -np.sin(azimuth_rad)
    cartesian[:, 1] = radius * np.cos(elevation_rad) * np.cos(azimuth_rad)
    cartesian[:, 2] = radius * np.sin(elevation_rad)

    return cartesian
