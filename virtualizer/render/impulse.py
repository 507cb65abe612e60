"""
Impulse Response Construction

Rebuilds each ear's impulse response from a measurement by restoring the
onset delay the dataset stores separately from the response taps. The
interaural time difference therefore comes from the measured delays, not
from geometry.
"""

import math
import numpy as np
from typing import Tuple

from .utils import Measurement, ImpulseResponse
from .exceptions import EmptyResponseError, InvalidDelayError


def _validate_delay(delay, ear: str) -> int:
    try:
        value = float(delay)
    except (TypeError, ValueError):
        raise InvalidDelayError(f"{ear} delay is not a number: {delay!r}")

    if not math.isfinite(value) or value < 0 or value != int(value):
        raise InvalidDelayError(f"{ear} delay must be a non-negative whole number of samples, got {delay!r}")

    return int(value)


def pad_with_delay(response: np.ndarray, delay: int, ear: str = "response") -> ImpulseResponse:
    """
    Prepend delay zeros to a raw response.

    Args:
        response: Raw response taps
        delay: Onset delay in samples
        ear: Label used in error messages

    Returns:
        Float64 array of length delay + len(response)

    Raises:
        EmptyResponseError: If the raw response has no samples
        InvalidDelayError: If delay is negative, fractional or non-finite
    """
    taps = np.asarray(response, dtype=np.float64).ravel()
    if taps.size == 0:
        raise EmptyResponseError(f"{ear} impulse response is empty")

    n_zeros = _validate_delay(delay, ear)
    return np.concatenate([np.zeros(n_zeros), taps])


def build_impulse_responses(measurement: Measurement) -> Tuple[ImpulseResponse, ImpulseResponse]:
    """
    Build the (left, right) impulse responses for a measurement.

    Args:
        measurement: The selected measurement

    Returns:
        Tuple of (left, right) responses, each zero-padded at the front by
        its own ear's delay. Lengths differ when the delays differ.
    """
    left = pad_with_delay(measurement.left, measurement.left_delay, "Left")
    right = pad_with_delay(measurement.right, measurement.right_delay, "Right")
    return left, right
