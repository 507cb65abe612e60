"""
SOFA (Spatially Oriented Format for Acoustics) Support Module

This module reads HRIR datasets stored as SOFA files, which are
netCDF-4/HDF5 containers of named arrays. Only the variables the renderer
needs are read: listener position, source positions, sampling rate,
per-ear onset delays and the impulse-response tensor.

References:
    https://www.sofaconventions.org/
    https://www.sofaconventions.org/mediawiki/index.php/GeneralFIR
"""

import os
import math
import numpy as np
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from netCDF4 import Dataset

from .utils import SphericalPosition, CartesianVector, Measurement
from .coordinates import to_cartesian_array
from .exceptions import (
    FileFormatError, EmptyDatasetError, EmptyResponseError, InvalidDelayError, ChannelMismatchError
)

# Set up logging
logger = logging.getLogger(__name__)

N_EARS = 2

REQUIRED_VARIABLES = (
    'ListenerPosition',
    'SourcePosition',
    'Data.SamplingRate',
    'Data.Delay',
    'Data.IR',
)


class SOFAConvention(Enum):
    """Supported SOFA conventions."""
    SIMPLE_HRIR = "SimpleFreeFieldHRIR"
    GENERAL_FIR = "GeneralFIR"


class SOFACoordinateSystem(Enum):
    """Coordinate systems used in SOFA files."""
    CARTESIAN = "cartesian"
    SPHERICAL = "spherical"


@dataclass
class SpatialDataset:
    """
    The parts of a SOFA file the renderer uses.

    Attributes:
        listener_position: Listener reference position
        source_positions: (M, 3) spherical source positions in degrees/metres
        sample_rate: Measurement sampling rate in Hz
        delays: (1, 2) or (M, 2) onset delays in samples
        impulse_responses: (M, 2, N) response taps
        convention: SOFAConventions attribute of the file
    """
    listener_position: CartesianVector
    source_positions: np.ndarray = field(repr=False)
    sample_rate: int
    delays: np.ndarray = field(repr=False)
    impulse_responses: np.ndarray = field(repr=False)
    convention: str = SOFAConvention.GENERAL_FIR.value

    def __post_init__(self):
        """Validate array shapes after initialization"""
        self.source_positions = np.asarray(self.source_positions, dtype=np.float64)
        self.impulse_responses = np.asarray(self.impulse_responses, dtype=np.float64)
        self.delays = np.atleast_2d(np.asarray(self.delays, dtype=np.float64))

        if self.impulse_responses.ndim != 3:
            raise FileFormatError(f"Data.IR must have shape (M, R, N), got {self.impulse_responses.shape}")

        if self.source_positions.size == 0 or self.impulse_responses.shape[0] == 0:
            raise EmptyDatasetError("Dataset contains no measurements")

        if self.source_positions.ndim != 2 or self.source_positions.shape[1] != 3:
            raise FileFormatError(f"SourcePosition must have shape (M, 3), got {self.source_positions.shape}")

        n_measurements, n_receivers, n_samples = self.impulse_responses.shape
        if n_receivers != N_EARS:
            raise ChannelMismatchError(f"Expected {N_EARS} receivers in Data.IR, got {n_receivers}")

        if n_samples == 0:
            raise EmptyResponseError("Data.IR holds zero-length impulse responses")

        if not np.all(np.isfinite(self.impulse_responses)):
            bad = np.argwhere(~np.isfinite(self.impulse_responses))[0]
            raise FileFormatError(f"Data.IR has a non-finite tap at measurement {bad[0]}, "
                                  f"receiver {bad[1]}, sample {bad[2]}")

        bad_rows = np.flatnonzero(~np.isfinite(self.source_positions).all(axis=1))
        if bad_rows.size:
            raise FileFormatError(f"SourcePosition {int(bad_rows[0])} has a non-finite coordinate")

        if self.source_positions.shape[0] != n_measurements:
            raise FileFormatError(f"{self.source_positions.shape[0]} source positions for "
                                  f"{n_measurements} measurements")

        if self.delays.shape[1] != N_EARS or self.delays.shape[0] not in (1, n_measurements):
            raise ChannelMismatchError(f"Data.Delay must have shape (1, {N_EARS}) or "
                                       f"({n_measurements}, {N_EARS}), got {self.delays.shape}")

        if not np.all(np.isfinite(self.delays)) or np.any(self.delays < 0) or \
                np.any(self.delays != np.floor(self.delays)):
            raise InvalidDelayError("Data.Delay must hold non-negative whole sample counts")

        if self.sample_rate <= 0:
            raise FileFormatError(f"Sampling rate must be positive, got {self.sample_rate}")

    @property
    def n_measurements(self) -> int:
        return self.impulse_responses.shape[0]

    @property
    def n_samples(self) -> int:
        return self.impulse_responses.shape[2]

    def cartesian_positions(self) -> np.ndarray:
        """Source positions converted to cartesian, in the file's frame."""
        return to_cartesian_array(self.source_positions)

    def measurement(self, index: int) -> Measurement:
        """
        Get one measurement.

        A single row of delays is shared by every measurement; otherwise the
        row with the same index is used.
        """
        if not 0 <= index < self.n_measurements:
            raise IndexError(f"Measurement index {index} out of range 0..{self.n_measurements - 1}")

        delay_row = self.delays[0] if self.delays.shape[0] == 1 else self.delays[index]
        azimuth, elevation, radius = self.source_positions[index]

        return Measurement(
            position=SphericalPosition(float(azimuth), float(elevation), float(radius)),
            left=self.impulse_responses[index, 0, :],
            right=self.impulse_responses[index, 1, :],
            left_delay=int(delay_row[0]),
            right_delay=int(delay_row[1]),
            index=index,
        )


def _cartesian_to_spherical_degrees(positions: np.ndarray) -> np.ndarray:
    """Inverse of to_cartesian_array, used for files that store cartesian sources."""
    x, y, z = positions[:, 0], positions[:, 1], positions[:, 2]
    radius = np.sqrt(x * x + y * y + z * z)
    azimuth = np.degrees(np.arctan2(-x, y))
    elevation = np.degrees(np.arctan2(z, np.sqrt(x * x + y * y)))
    return np.column_stack([azimuth, elevation, radius])


def _read_variable(sofa_data: Dataset, name: str) -> np.ndarray:
    values = sofa_data.variables[name][:]
    # netCDF4 hands back masked arrays; fill values would mean missing data
    if np.ma.isMaskedArray(values):
        if np.ma.is_masked(values):
            raise FileFormatError(f"Variable {name} has missing values")
        values = values.data
    return np.asarray(values)


def _attribute(variable: Any, name: str, default: str) -> str:
    try:
        return str(variable.getncattr(name))
    except AttributeError:
        return default


def load_sofa_file(file_path: str) -> SpatialDataset:
    """
    Load a SOFA file.

    Args:
        file_path: Path to the SOFA file

    Returns:
        The dataset the renderer needs

    Raises:
        FileNotFoundError: If the file doesn't exist
        FileFormatError: If the file is not a readable SOFA container or
            lacks a required variable
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"SOFA file not found: {file_path}")

    logger.info(f"Loading SOFA file: {file_path}")

    try:
        sofa_data = Dataset(file_path, 'r')
    except OSError as e:
        logger.error(f"Error opening SOFA file: {str(e)}")
        raise FileFormatError(f"Could not open SOFA file {file_path}: {str(e)}") from e

    with sofa_data:
        missing = [name for name in REQUIRED_VARIABLES if name not in sofa_data.variables]
        if missing:
            raise FileFormatError(f"SOFA file {file_path} is missing variables: {', '.join(missing)}")

        try:
            convention = str(sofa_data.getncattr('SOFAConventions'))
        except AttributeError:
            convention = SOFAConvention.GENERAL_FIR.value

        listener = _read_variable(sofa_data, 'ListenerPosition').reshape(-1, 3)[0]
        sources = _read_variable(sofa_data, 'SourcePosition')
        sample_rate = _read_variable(sofa_data, 'Data.SamplingRate').ravel()[0]
        delays = _read_variable(sofa_data, 'Data.Delay')
        ir_data = _read_variable(sofa_data, 'Data.IR')

        source_type = _attribute(sofa_data.variables['SourcePosition'], 'Type',
                                 SOFACoordinateSystem.SPHERICAL.value)

    sources = np.asarray(sources, dtype=np.float64)
    if sources.ndim == 1:
        sources = sources.reshape(1, -1)
    if source_type.lower() == SOFACoordinateSystem.CARTESIAN.value:
        sources = _cartesian_to_spherical_degrees(sources)

    if not math.isfinite(float(sample_rate)) or float(sample_rate) != int(sample_rate):
        raise FileFormatError(f"Sampling rate must be a whole number of hertz, got {sample_rate}")

    dataset = SpatialDataset(
        listener_position=CartesianVector.from_array(listener),
        source_positions=sources,
        sample_rate=int(sample_rate),
        delays=delays,
        impulse_responses=ir_data,
        convention=convention,
    )

    logger.info(f"Loaded {dataset.n_measurements} measurements of {dataset.n_samples} samples "
                f"at {dataset.sample_rate} Hz ({convention})")

    return dataset


def describe_dataset(dataset: SpatialDataset) -> Dict[str, Any]:
    """
    Summarise a dataset for logging or display.

    Args:
        dataset: A loaded dataset

    Returns:
        Dictionary of scalar facts about the dataset
    """
    return {
        'convention': dataset.convention,
        'sample_rate': dataset.sample_rate,
        'n_measurements': dataset.n_measurements,
        'n_samples': dataset.n_samples,
        'listener_position': tuple(dataset.listener_position),
        'shared_delays': dataset.delays.shape[0] == 1,
    }
