"""
General Utility Functions and Definitions

This module contains type definitions, enumerations and the immutable data
classes shared by the rendering modules.

Coordinate convention used throughout:
    - Azimuth 0 degrees is straight ahead, positive azimuth is to the left
    - Elevation 0 degrees is the horizontal plane, positive is up
    - Radius is in the dataset's linear unit (metres for SOFA files)

See Also:
    - coordinates: For the spherical to cartesian transform
    - config: For render configuration
"""

import math
import numpy as np
from enum import Enum
from dataclasses import dataclass, field
from typing import Iterator, Tuple

# Type aliases for improved readability
Vector3 = Tuple[float, float, float]  # (x, y, z) or (azimuth, elevation, radius)
MonoSignal = np.ndarray  # Shape: (n_samples,), int16 PCM
StereoSignal = Tuple[np.ndarray, np.ndarray]  # (left, right), int16 PCM
ImpulseResponse = np.ndarray  # Shape: (delay + n_taps,), float64


class ConvolutionMethod(Enum):
    """
    Convolution kernels available to the engine.

    Attributes:
        DIRECT: Time-domain multiply-accumulate, the reference algorithm
        FFT: Frequency-domain convolution via scipy, same values within
            floating-point tolerance
    """
    DIRECT = "direct"
    FFT = "fft"


class SampleRatePolicy(Enum):
    """
    What to do when the input sample rate differs from the dataset's.

    Attributes:
        ERROR: Fail the render
        WARN: Log a warning and convolve anyway
        RESAMPLE: Resample the input to the dataset rate first
    """
    ERROR = "error"
    WARN = "warn"
    RESAMPLE = "resample"


@dataclass(frozen=True)
class SphericalPosition:
    """
    A position given as angles in degrees and a radius.

    Attributes:
        azimuth: Degrees from the front axis, positive to the left
        elevation: Degrees above the horizontal plane
        radius: Distance from the origin
    """
    azimuth: float
    elevation: float
    radius: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.azimuth, self.elevation, self.radius))

    def as_array(self) -> np.ndarray:
        return np.array([self.azimuth, self.elevation, self.radius], dtype=np.float64)

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in self)


@dataclass(frozen=True)
class CartesianVector:
    """An (x, y, z) triple in the dataset's spatial unit."""
    x: float
    y: float
    z: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    def __sub__(self, other: 'CartesianVector') -> 'CartesianVector':
        return CartesianVector(self.x - other.x, self.y - other.y, self.z - other.z)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in self)

    @classmethod
    def from_array(cls, values) -> 'CartesianVector':
        x, y, z = (float(v) for v in values)
        return cls(x, y, z)


ORIGIN = CartesianVector(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Measurement:
    """
    One entry of a spatial dataset.

    Attributes:
        position: Source position the pair was measured at
        left: Raw left-ear response, without onset delay
        right: Raw right-ear response, without onset delay
        left_delay: Left-ear onset delay in samples
        right_delay: Right-ear onset delay in samples
        index: Row of the measurement in its dataset
    """
    position: SphericalPosition
    left: np.ndarray = field(repr=False)
    right: np.ndarray = field(repr=False)
    left_delay: int = 0
    right_delay: int = 0
    index: int = 0

    @property
    def delays(self) -> Tuple[int, int]:
        return (self.left_delay, self.right_delay)
