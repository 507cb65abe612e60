"""
Pytest configuration file for renderer tests.
"""

import os
import pytest
import numpy as np
from netCDF4 import Dataset
from scipy.io import wavfile

from virtualizer.render.config import RenderConfig
from virtualizer.render.sofa_support import SpatialDataset
from virtualizer.render.utils import CartesianVector

# Four horizontal-plane measurements: front, left, back, right
SOURCE_POSITIONS = np.array([
    [0.0, 0.0, 1.5],
    [90.0, 0.0, 1.5],
    [180.0, 0.0, 1.5],
    [-90.0, 0.0, 1.5],
])
SAMPLE_RATE = 44100
DELAYS = np.array([[2.0, 5.0]])


def make_impulse_responses():
    """Responses whose first tap identifies the measurement: +(i+1) left, -(i+1) right."""
    ir = np.zeros((len(SOURCE_POSITIONS), 2, 4))
    for i in range(len(SOURCE_POSITIONS)):
        ir[i, 0, :2] = [i + 1, 0.5]
        ir[i, 1, :2] = [-(i + 1), 0.25]
    return ir


def write_sofa(file_path, source_positions=SOURCE_POSITIONS, ir=None, delays=DELAYS,
               sample_rate=SAMPLE_RATE, listener=(0.0, 0.0, 0.0), source_type="spherical",
               skip=(), conventions="SimpleFreeFieldHRIR"):
    """Write a minimal SimpleFreeFieldHRIR file."""
    if ir is None:
        ir = make_impulse_responses()
    n_measurements, n_receivers, n_samples = ir.shape

    sofa_obj = Dataset(file_path, 'w', format='NETCDF4')
    sofa_obj.Conventions = "SOFA"
    if conventions is not None:
        sofa_obj.SOFAConventions = conventions
    sofa_obj.SOFAConventionsVersion = "1.0"
    sofa_obj.DataType = "FIR"

    sofa_obj.createDimension("M", n_measurements)
    sofa_obj.createDimension("R", n_receivers)
    sofa_obj.createDimension("N", n_samples)
    sofa_obj.createDimension("C", 3)
    sofa_obj.createDimension("I", 1)
    sofa_obj.createDimension("D", delays.shape[0])

    if 'ListenerPosition' not in skip:
        listener_position = sofa_obj.createVariable("ListenerPosition", "f8", ("I", "C"))
        listener_position.Units = "metre"
        listener_position.Type = "cartesian"
        listener_position[:] = np.array([listener])

    if 'SourcePosition' not in skip:
        source_position = sofa_obj.createVariable("SourcePosition", "f8", ("M", "C"))
        source_position.Units = "degree, degree, metre" if source_type == "spherical" else "metre"
        source_position.Type = source_type
        source_position[:] = source_positions

    if 'Data.IR' not in skip:
        data_ir = sofa_obj.createVariable("Data.IR", "f8", ("M", "R", "N"))
        data_ir[:] = ir

    if 'Data.SamplingRate' not in skip:
        data_rate = sofa_obj.createVariable("Data.SamplingRate", "f8", ("I",))
        data_rate.Units = "hertz"
        data_rate[:] = [sample_rate]

    if 'Data.Delay' not in skip:
        data_delay = sofa_obj.createVariable("Data.Delay", "f8", ("D", "R"))
        data_delay[:] = delays

    sofa_obj.close()
    return file_path


@pytest.fixture
def sofa_path(tmp_path):
    """Path to a four-measurement SOFA file."""
    return write_sofa(str(tmp_path / "hrir.sofa"))


@pytest.fixture
def test_dataset():
    """The same four measurements as sofa_path, built in memory."""
    return SpatialDataset(
        listener_position=CartesianVector(0.0, 0.0, 0.0),
        source_positions=SOURCE_POSITIONS,
        sample_rate=SAMPLE_RATE,
        delays=DELAYS,
        impulse_responses=make_impulse_responses(),
    )


@pytest.fixture
def test_audio_mono():
    """A short 16-bit tone burst."""
    t = np.arange(441) / SAMPLE_RATE
    return (8000 * np.sin(2 * np.pi * 440 * t)).astype(np.int16)


@pytest.fixture
def mono_wav_path(tmp_path, test_audio_mono):
    """Mono 16-bit WAV file holding test_audio_mono."""
    path = str(tmp_path / "input.wav")
    wavfile.write(path, SAMPLE_RATE, test_audio_mono)
    return path


@pytest.fixture
def test_config(tmp_path, sofa_path, mono_wav_path):
    """A render configuration pointing at the temporary files."""
    return RenderConfig(
        dataset_path=sofa_path,
        input_path=mono_wav_path,
        output_path=str(tmp_path / "output.wav"),
        source_position=(0.0, 0.0, 1.5),
    )
