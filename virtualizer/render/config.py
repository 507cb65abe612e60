"""
Configuration Management Module

This module holds the render configuration: where the dataset, input and
output files live, where the virtual source sits, and how the convolution
is carried out. Configurations round-trip through JSON.
"""

from typing import Dict, Any
from dataclasses import dataclass, field

from .utils import SphericalPosition, ConvolutionMethod, SampleRatePolicy
from .exceptions import ConfigurationError


# =====================================================================================
# Constants
# =====================================================================================

DEFAULT_OUTPUT_SAMPLE_RATE = 44100  # Hz
SUPPORTED_OUTPUT_SAMPLE_RATES = [22050, 44100, 48000, 88200, 96000]

# Default file locations, relative to the working directory
DEFAULT_DATASET_PATH = 'data/RIEC_hrir_subject_069.sofa'
DEFAULT_INPUT_PATH = 'data/sample.wav'
DEFAULT_OUTPUT_PATH = 'data/sample_out.wav'

# 1.5 m away, directly to the left
DEFAULT_SOURCE_POSITION = SphericalPosition(azimuth=-90.0, elevation=0.0, radius=1.5)


# =====================================================================================
# Configuration Classes
# =====================================================================================

@dataclass
class RenderConfig:
    """Configuration for a single binaural render"""

    # File locations
    dataset_path: str = DEFAULT_DATASET_PATH
    input_path: str = DEFAULT_INPUT_PATH
    output_path: str = DEFAULT_OUTPUT_PATH

    # Virtual source
    source_position: SphericalPosition = field(default_factory=lambda: DEFAULT_SOURCE_POSITION)

    # Output format
    output_sample_rate: int = DEFAULT_OUTPUT_SAMPLE_RATE

    # Processing
    convolution_method: ConvolutionMethod = ConvolutionMethod.DIRECT
    use_threading: bool = True
    sample_rate_policy: SampleRatePolicy = SampleRatePolicy.ERROR

    def __post_init__(self):
        """Validate configuration after initialization"""
        if not isinstance(self.source_position, SphericalPosition):
            try:
                self.source_position = SphericalPosition(*(float(v) for v in self.source_position))
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Source position must be (azimuth, elevation, radius): {e}")

        if not self.source_position.is_finite():
            raise ConfigurationError(f"Source position must be finite, got {self.source_position}")

        if self.source_position.radius < 0:
            raise ConfigurationError("Source radius must be non-negative")

        if self.output_sample_rate not in SUPPORTED_OUTPUT_SAMPLE_RATES:
            raise ConfigurationError(f"Sample rate {self.output_sample_rate} not supported. "
                                     f"Use one of: {SUPPORTED_OUTPUT_SAMPLE_RATES}")

        try:
            self.convolution_method = ConvolutionMethod(self.convolution_method)
        except ValueError:
            raise ConfigurationError("Convolution method must be 'direct' or 'fft'")

        try:
            self.sample_rate_policy = SampleRatePolicy(self.sample_rate_policy)
        except ValueError:
            raise ConfigurationError("Sample rate policy must be 'error', 'warn' or 'resample'")

        for name in ('dataset_path', 'input_path', 'output_path'):
            if not getattr(self, name):
                raise ConfigurationError(f"{name} must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization"""
        return {
            'dataset_path': self.dataset_path,
            'input_path': self.input_path,
            'output_path': self.output_path,
            'source_position': {
                'azimuth': self.source_position.azimuth,
                'elevation': self.source_position.elevation,
                'radius': self.source_position.radius
            },
            'output_sample_rate': self.output_sample_rate,
            'convolution_method': self.convolution_method.value,
            'use_threading': self.use_threading,
            'sample_rate_policy': self.sample_rate_policy.value
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'RenderConfig':
        """Create configuration from dictionary"""
        values = dict(config_dict)

        position = values.pop('source_position', None)
        if isinstance(position, dict):
            try:
                position = SphericalPosition(float(position['azimuth']),
                                             float(position['elevation']),
                                             float(position['radius']))
            except KeyError as e:
                raise ConfigurationError(f"Source position is missing {e}")
        if position is not None:
            values['source_position'] = position

        try:
            return cls(**values)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    def save(self, file_path: str) -> None:
        """Save configuration to file"""
        import json
        with open(file_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, file_path: str) -> 'RenderConfig':
        """Load configuration from file"""
        import json
        with open(file_path, 'r') as f:
            return cls.from_dict(json.load(f))
