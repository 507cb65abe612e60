"""
Core Rendering Module

This module contains the BinauralVirtualizer class that ties together
coordinate conversion, measurement selection, impulse-response
construction and convolution, and the render() entry point that adds file
I/O around it.
"""

import math
import time
import numpy as np
import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from scipy import signal as sps

from .utils import (
    SphericalPosition, ConvolutionMethod, SampleRatePolicy, ImpulseResponse, Vector3
)
from .coordinates import to_cartesian
from .selector import select_nearest
from .impulse import build_impulse_responses
from .convolution import convolve_binaural
from .sofa_support import SpatialDataset, load_sofa_file
from .io import read_wav, write_wav, interleave
from .config import RenderConfig, DEFAULT_OUTPUT_SAMPLE_RATE
from .exceptions import SampleRateMismatchError

# Set up logging
logger = logging.getLogger(__name__)


@dataclass
class RenderResult:
    """
    Output of a render.

    Attributes:
        left: Left channel int16 samples
        right: Right channel int16 samples
        sample_rate: Sample rate the output is written at
        dataset_sample_rate: Sampling rate of the HRIR measurements
        measurement_index: Index of the measurement that was used
        elapsed_ms: Wall time spent in convolution
    """
    left: np.ndarray = field(repr=False)
    right: np.ndarray = field(repr=False)
    sample_rate: int
    dataset_sample_rate: int
    measurement_index: int
    elapsed_ms: float = 0.0

    @property
    def n_frames(self) -> int:
        return len(self.left)

    def interleaved(self) -> np.ndarray:
        """Frames of shape (n_frames, 2) in left, right order."""
        return interleave(self.left, self.right)


def _resample(values: np.ndarray, from_rate: int, to_rate: int) -> np.ndarray:
    divisor = math.gcd(from_rate, to_rate)
    return sps.resample_poly(np.asarray(values, dtype=np.float64), to_rate // divisor, from_rate // divisor)


class BinauralVirtualizer:
    """
    Renders mono signals to binaural stereo from a spatial HRIR dataset.

    The dataset is held in memory; each render selects the measurement
    nearest to the requested source position and convolves with it.
    """

    def __init__(self, dataset: SpatialDataset,
                 convolution_method: Union[ConvolutionMethod, str] = ConvolutionMethod.DIRECT,
                 use_threading: bool = True,
                 sample_rate_policy: Union[SampleRatePolicy, str] = SampleRatePolicy.ERROR,
                 output_sample_rate: int = DEFAULT_OUTPUT_SAMPLE_RATE):
        """
        Initialize the virtualizer.

        Args:
            dataset: Loaded HRIR dataset
            convolution_method: Kernel used for convolution
            use_threading: Whether to convolve the two ears on separate threads
            sample_rate_policy: Handling of input, dataset and output rate mismatches
            output_sample_rate: Sample rate the output is rendered and written at
        """
        self.dataset = dataset
        self.convolution_method = ConvolutionMethod(convolution_method)
        self.use_threading = use_threading
        self.sample_rate_policy = SampleRatePolicy(sample_rate_policy)
        self.output_sample_rate = output_sample_rate

        # Dataset positions never change, so convert them once
        self._cartesian_positions = dataset.cartesian_positions()

    @classmethod
    def from_config(cls, config: RenderConfig,
                    dataset: Optional[SpatialDataset] = None) -> 'BinauralVirtualizer':
        """Create a virtualizer from a render configuration, loading the dataset if not given."""
        if dataset is None:
            dataset = load_sofa_file(config.dataset_path)
        return cls(dataset,
                   convolution_method=config.convolution_method,
                   use_threading=config.use_threading,
                   sample_rate_policy=config.sample_rate_policy,
                   output_sample_rate=config.output_sample_rate)

    def select(self, position: Union[SphericalPosition, Vector3]) -> int:
        """
        Find the measurement nearest to a source position.

        Args:
            position: Listener-relative source position

        Returns:
            Measurement index
        """
        target = to_cartesian(position)
        index = select_nearest(target, self._cartesian_positions, self.dataset.listener_position)

        logger.info(f"Selected measurement {index} at {self.dataset.source_positions[index].tolist()} "
                    f"for source {tuple(position)}")
        return index

    def impulse_responses(self, position: Union[SphericalPosition, Vector3]) -> Tuple[ImpulseResponse, ImpulseResponse]:
        """Get the delay-padded (left, right) responses for a source position."""
        return build_impulse_responses(self.dataset.measurement(self.select(position)))

    def _match_sample_rates(self, samples: np.ndarray, sample_rate: int,
                            responses: Tuple[ImpulseResponse, ImpulseResponse]
                            ) -> Tuple[np.ndarray, Tuple[ImpulseResponse, ImpulseResponse]]:
        """
        Bring the input and the responses to the output sample rate.

        The input must match the dataset rate and the dataset must match the
        output rate. Under the resample policy the input and both responses
        are resampled to the output rate instead, so the written header
        always describes the samples.
        """
        dataset_rate = int(self.dataset.sample_rate)
        output_rate = int(self.output_sample_rate)

        mismatches = []
        if sample_rate != dataset_rate:
            mismatches.append(f"Input sample rate {sample_rate} Hz differs from dataset rate {dataset_rate} Hz")
        if dataset_rate != output_rate:
            mismatches.append(f"Dataset rate {dataset_rate} Hz differs from output rate {output_rate} Hz")

        if not mismatches:
            return samples, responses

        message = "; ".join(mismatches)

        if self.sample_rate_policy is SampleRatePolicy.ERROR:
            raise SampleRateMismatchError(message)

        if self.sample_rate_policy is SampleRatePolicy.WARN:
            logger.warning(message)
            return samples, responses

        logger.info(f"{message}, resampling to {output_rate} Hz")
        if sample_rate != output_rate:
            samples = _resample(samples, int(sample_rate), output_rate)
        if dataset_rate != output_rate:
            responses = (_resample(responses[0], dataset_rate, output_rate),
                         _resample(responses[1], dataset_rate, output_rate))

        return samples, responses

    def render(self, samples: np.ndarray, sample_rate: int,
               position: Union[SphericalPosition, Vector3]) -> RenderResult:
        """
        Render a mono signal at a virtual source position.

        Args:
            samples: Mono PCM samples
            sample_rate: Sample rate of the samples
            position: Listener-relative source position

        Returns:
            The rendered stereo result
        """
        index = self.select(position)
        responses = build_impulse_responses(self.dataset.measurement(index))
        samples, responses = self._match_sample_rates(np.asarray(samples), int(sample_rate), responses)

        start = time.perf_counter()
        left, right = convolve_binaural(samples, responses,
                                        method=self.convolution_method,
                                        use_threading=self.use_threading)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        logger.info(f"Rendered {len(left)} frames in {elapsed_ms:.0f} ms "
                    f"({self.convolution_method.value} convolution)")

        return RenderResult(
            left=left,
            right=right,
            sample_rate=self.output_sample_rate,
            dataset_sample_rate=self.dataset.sample_rate,
            measurement_index=index,
            elapsed_ms=elapsed_ms,
        )


def render(config: RenderConfig, virtualizer: Optional[BinauralVirtualizer] = None) -> RenderResult:
    """
    Run a complete render: load the dataset and input, convolve, write the output.

    Args:
        config: Render configuration
        virtualizer: Already-built virtualizer to reuse; when omitted one is
            built from config, loading config.dataset_path

    Returns:
        The rendered stereo result, which has also been written to
        config.output_path
    """
    if virtualizer is None:
        virtualizer = BinauralVirtualizer.from_config(config)

    samples, audio_format = read_wav(config.input_path)
    logger.info(f"Input format: {audio_format}")

    result = virtualizer.render(samples, audio_format.sample_rate, config.source_position)
    write_wav(config.output_path, result.left, result.right, result.sample_rate)

    return result
