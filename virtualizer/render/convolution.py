"""
Convolution Engine

Convolves a mono PCM signal with a left/right impulse response pair and
quantizes the result to 16-bit PCM.

Two kernels are available. The direct kernel is the time-domain
multiply-accumulate reference: every input sample scales the whole response
and is accumulated into the output at its own offset. The FFT kernel uses
scipy.signal.fftconvolve and matches the reference within floating-point
tolerance. The two ears share no mutable state and can be rendered on
separate threads.
"""

import numpy as np
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Sequence, Tuple, Union

from scipy import signal as sps

from .utils import ConvolutionMethod, ImpulseResponse
from .exceptions import EmptyInputError, ChannelMismatchError, LengthMismatchError

# Set up logging
logger = logging.getLogger(__name__)

INT16_MIN = -32768
INT16_MAX = 32767


def _check_non_empty(values: np.ndarray, name: str) -> np.ndarray:
    array = np.asarray(values)
    if array.ndim != 1:
        raise ChannelMismatchError(f"{name} must be one-dimensional, got shape {array.shape}")
    if array.size == 0:
        raise EmptyInputError(f"{name} is empty")
    return array.astype(np.float64, copy=False)


def convolve_direct(input_signal: np.ndarray, response: np.ndarray) -> np.ndarray:
    """
    Brute-force linear convolution.

    For every input sample j the scaled response input[j] * response is
    accumulated into output[j:j + len(response)], which gives
    output[n] = sum_k input[k] * response[n - k].

    Args:
        input_signal: Input samples, shape (L,)
        response: Impulse response, shape (R,)

    Returns:
        Float64 array of shape (L + R - 1,)

    Raises:
        EmptyInputError: If either argument is empty
    """
    x = _check_non_empty(input_signal, "Input signal")
    h = _check_non_empty(response, "Impulse response")

    n_taps = h.size
    output = np.zeros(x.size + n_taps - 1)
    for j, sample in enumerate(x):
        if sample != 0.0:
            output[j:j + n_taps] += sample * h

    return output


def convolve_fft(input_signal: np.ndarray, response: np.ndarray) -> np.ndarray:
    """
    FFT-based linear convolution with the same output as convolve_direct.

    Args:
        input_signal: Input samples, shape (L,)
        response: Impulse response, shape (R,)

    Returns:
        Float64 array of shape (L + R - 1,)
    """
    x = _check_non_empty(input_signal, "Input signal")
    h = _check_non_empty(response, "Impulse response")
    return sps.fftconvolve(x, h, mode='full')


_KERNELS: Dict[ConvolutionMethod, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    ConvolutionMethod.DIRECT: convolve_direct,
    ConvolutionMethod.FFT: convolve_fft,
}


def quantize_int16(values: np.ndarray) -> np.ndarray:
    """
    Truncate floating-point samples to 16-bit PCM.

    Values are truncated toward zero and then clamped to
    [-32768, 32767], so out-of-range peaks saturate instead of wrapping.

    Args:
        values: Float samples

    Returns:
        int16 array with the same shape
    """
    truncated = np.trunc(np.asarray(values, dtype=np.float64))

    n_clipped = int(np.count_nonzero((truncated < INT16_MIN) | (truncated > INT16_MAX)))
    if n_clipped:
        logger.warning(f"Clamped {n_clipped} samples outside the 16-bit range")

    return np.clip(truncated, INT16_MIN, INT16_MAX).astype(np.int16)


def output_length(input_length: int, responses: Sequence[np.ndarray]) -> int:
    """Shared per-channel buffer length for a render."""
    return input_length + max(len(r) for r in responses)


def convolve_binaural(input_signal: np.ndarray,
                      responses: Tuple[ImpulseResponse, ImpulseResponse],
                      method: Union[ConvolutionMethod, str] = ConvolutionMethod.DIRECT,
                      use_threading: bool = True) -> Tuple[np.ndarray, np.ndarray]:
    """
    Render a mono signal through a left/right impulse response pair.

    Both channels are written into buffers of the same length,
    len(input) + max(len(left), len(right)), so they can be interleaved
    frame by frame. Samples past a channel's own convolution support are
    zero.

    Args:
        input_signal: Mono PCM samples, shape (L,)
        responses: (left, right) impulse responses
        method: Convolution kernel to use
        use_threading: Whether to convolve the two ears on separate threads

    Returns:
        Tuple of (left, right) int16 arrays

    Raises:
        EmptyInputError: If the input or either response is empty
        ChannelMismatchError: If the input is not mono or there are not
            exactly two responses
        LengthMismatchError: If the two output buffers end up with different
            lengths
    """
    method = ConvolutionMethod(method)
    kernel = _KERNELS[method]

    if len(responses) != 2:
        raise ChannelMismatchError(f"Expected 2 impulse responses, got {len(responses)}")

    x = _check_non_empty(input_signal, "Input signal")
    left_ir = _check_non_empty(responses[0], "Left impulse response")
    right_ir = _check_non_empty(responses[1], "Right impulse response")

    n_out = output_length(x.size, (left_ir, right_ir))

    def render_ear(response: np.ndarray) -> np.ndarray:
        buffer = np.zeros(n_out)
        convolved = kernel(x, response)
        buffer[:convolved.size] = convolved
        return buffer

    if use_threading:
        with ThreadPoolExecutor(max_workers=2) as executor:
            left_future = executor.submit(render_ear, left_ir)
            right_future = executor.submit(render_ear, right_ir)
            left, right = left_future.result(), right_future.result()
    else:
        left, right = render_ear(left_ir), render_ear(right_ir)

    if left.size != right.size:
        raise LengthMismatchError(f"Left output has {left.size} samples, right has {right.size}")

    return quantize_int16(left), quantize_int16(right)
