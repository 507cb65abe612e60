"""
Custom Exceptions Module

This module defines the exception hierarchy for the binaural renderer.
Every error is raised where it is detected and propagated to the caller;
the renderer never returns a partial result.
"""

class VirtualizerError(Exception):
    """Base exception class for all renderer errors."""
    pass


class ConfigurationError(VirtualizerError):
    """Error in render configuration."""
    pass


class ValidationError(VirtualizerError):
    """Error during parameter validation."""
    pass


class InvalidPositionError(ValidationError):
    """A position has a non-finite coordinate."""
    pass


class InvalidDelayError(ValidationError):
    """An onset delay is negative, fractional or non-finite."""
    pass


class ChannelMismatchError(ValidationError):
    """Data has the wrong number of channels or receivers."""
    pass


class EmptyDatasetError(VirtualizerError):
    """There are no measurements to choose from."""
    pass


class EmptyResponseError(VirtualizerError):
    """A selected measurement has a zero-length impulse response."""
    pass


class EmptyInputError(VirtualizerError):
    """Zero-length input signal or impulse response at convolution time."""
    pass


class LengthMismatchError(VirtualizerError):
    """Per-ear output buffers were computed to different sizes."""
    pass


class SampleRateMismatchError(VirtualizerError):
    """The input sample rate differs from the dataset's measurement rate."""
    pass


class FileFormatError(VirtualizerError):
    """Error in file format handling."""
    pass


class AudioIOError(VirtualizerError):
    """Error during audio file I/O operations."""
    pass
