"""
Unit tests for SOFA dataset loading.
"""

import pytest
import numpy as np
from conftest import write_sofa, make_impulse_responses, SOURCE_POSITIONS, SAMPLE_RATE
from virtualizer.render.sofa_support import (
    SpatialDataset, SOFAConvention, load_sofa_file, describe_dataset
)
from virtualizer.render.coordinates import to_cartesian_array
from virtualizer.render.utils import CartesianVector
from virtualizer.render.exceptions import (
    FileFormatError, EmptyDatasetError, EmptyResponseError, InvalidDelayError, ChannelMismatchError
)


class TestLoadSofaFile:
    """Tests for reading SOFA containers."""

    def test_load(self, sofa_path):
        dataset = load_sofa_file(sofa_path)
        assert dataset.sample_rate == SAMPLE_RATE
        assert dataset.n_measurements == 4
        assert dataset.n_samples == 4
        assert dataset.convention == "SimpleFreeFieldHRIR"
        assert dataset.listener_position == CartesianVector(0.0, 0.0, 0.0)
        np.testing.assert_array_equal(dataset.source_positions, SOURCE_POSITIONS)
        np.testing.assert_array_equal(dataset.impulse_responses, make_impulse_responses())

    def test_shared_delays(self, sofa_path):
        dataset = load_sofa_file(sofa_path)
        for index in range(dataset.n_measurements):
            measurement = dataset.measurement(index)
            assert measurement.delays == (2, 5)
            assert measurement.index == index

    def test_per_measurement_delays(self, tmp_path):
        delays = np.array([[0, 1], [2, 3], [4, 5], [6, 7]], dtype=float)
        dataset = load_sofa_file(write_sofa(str(tmp_path / "d.sofa"), delays=delays))
        assert dataset.measurement(2).delays == (4, 5)

    def test_measurement_contents(self, sofa_path):
        measurement = load_sofa_file(sofa_path).measurement(1)
        assert measurement.position.azimuth == 90.0
        np.testing.assert_array_equal(measurement.left, [2.0, 0.5, 0.0, 0.0])
        np.testing.assert_array_equal(measurement.right, [-2.0, 0.25, 0.0, 0.0])

    def test_measurement_out_of_range(self, sofa_path):
        with pytest.raises(IndexError):
            load_sofa_file(sofa_path).measurement(4)

    def test_cartesian_source_positions(self, tmp_path):
        cartesian = to_cartesian_array(SOURCE_POSITIONS)
        dataset = load_sofa_file(write_sofa(str(tmp_path / "c.sofa"), source_positions=cartesian,
                                            source_type="cartesian"))
        np.testing.assert_allclose(dataset.cartesian_positions(), cartesian, atol=1e-9)

    def test_listener_position(self, tmp_path):
        dataset = load_sofa_file(write_sofa(str(tmp_path / "l.sofa"), listener=(0.1, 0.2, 0.3)))
        assert dataset.listener_position == CartesianVector(0.1, 0.2, 0.3)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_sofa_file(str(tmp_path / "missing.sofa"))

    def test_not_a_sofa_file(self, tmp_path):
        path = tmp_path / "junk.sofa"
        path.write_bytes(b"this is not netCDF")
        with pytest.raises(FileFormatError):
            load_sofa_file(str(path))

    def test_missing_variable(self, tmp_path):
        path = write_sofa(str(tmp_path / "m.sofa"), skip=('Data.Delay',))
        with pytest.raises(FileFormatError, match="Data.Delay"):
            load_sofa_file(path)

    def test_wrong_receiver_count(self, tmp_path):
        ir = np.ones((4, 3, 8))
        with pytest.raises(ChannelMismatchError):
            load_sofa_file(write_sofa(str(tmp_path / "r.sofa"), ir=ir, delays=np.array([[0.0, 0.0, 0.0]])))

    def test_negative_delay(self, tmp_path):
        with pytest.raises(InvalidDelayError):
            load_sofa_file(write_sofa(str(tmp_path / "n.sofa"), delays=np.array([[-1.0, 0.0]])))

    def test_missing_conventions_attribute(self, tmp_path):
        dataset = load_sofa_file(write_sofa(str(tmp_path / "g.sofa"), conventions=None))
        assert dataset.convention == SOFAConvention.GENERAL_FIR.value
        default = SpatialDataset(listener_position=CartesianVector(0.0, 0.0, 0.0),
                                 source_positions=SOURCE_POSITIONS, sample_rate=SAMPLE_RATE,
                                 delays=np.array([[0, 0]]), impulse_responses=make_impulse_responses())
        assert dataset.convention == default.convention

    def test_non_finite_tap_in_file(self, tmp_path):
        ir = make_impulse_responses()
        ir[1, 0, 2] = np.nan
        with pytest.raises(FileFormatError):
            load_sofa_file(write_sofa(str(tmp_path / "nan.sofa"), ir=ir))

    def test_describe(self, sofa_path):
        info = describe_dataset(load_sofa_file(sofa_path))
        assert info['n_measurements'] == 4
        assert info['shared_delays'] is True


class TestSpatialDataset:
    """Tests for in-memory dataset validation."""

    def make(self, **overrides):
        values = dict(
            listener_position=CartesianVector(0.0, 0.0, 0.0),
            source_positions=SOURCE_POSITIONS,
            sample_rate=SAMPLE_RATE,
            delays=np.array([[0, 0]]),
            impulse_responses=make_impulse_responses(),
        )
        values.update(overrides)
        return SpatialDataset(**values)

    def test_valid(self):
        assert self.make().n_measurements == 4

    def test_empty(self):
        with pytest.raises(EmptyDatasetError):
            self.make(source_positions=np.zeros((0, 3)), impulse_responses=np.zeros((0, 2, 4)))

    def test_zero_length_responses(self):
        with pytest.raises(EmptyResponseError):
            self.make(impulse_responses=np.zeros((4, 2, 0)))

    @pytest.mark.parametrize("value", [np.nan, np.inf, -np.inf])
    def test_non_finite_tap(self, value):
        ir = make_impulse_responses()
        ir[3, 1, 0] = value
        with pytest.raises(FileFormatError, match="measurement 3"):
            self.make(impulse_responses=ir)

    def test_non_finite_source_position(self):
        positions = np.array(SOURCE_POSITIONS, dtype=float)
        positions[2, 0] = np.nan
        with pytest.raises(FileFormatError, match="SourcePosition 2"):
            self.make(source_positions=positions)

    def test_position_count_mismatch(self):
        with pytest.raises(FileFormatError):
            self.make(source_positions=SOURCE_POSITIONS[:3])

    def test_fractional_delay(self):
        with pytest.raises(InvalidDelayError):
            self.make(delays=np.array([[0.5, 0.0]]))

    def test_delay_row_count(self):
        with pytest.raises(ChannelMismatchError):
            self.make(delays=np.zeros((3, 2)))

    def test_bad_sample_rate(self):
        with pytest.raises(FileFormatError):
            self.make(sample_rate=0)
