"""
Binaural Rendering Package

Spatialises a mono signal by convolving it with the HRIR pair measured
nearest to a virtual source position.
"""

from .utils import SphericalPosition, CartesianVector, Measurement, ConvolutionMethod, SampleRatePolicy
from .coordinates import to_cartesian, to_cartesian_array
from .selector import select_nearest
from .impulse import build_impulse_responses
from .convolution import convolve_direct, convolve_fft, convolve_binaural, quantize_int16
from .sofa_support import SpatialDataset, load_sofa_file
from .config import RenderConfig
from .core import BinauralVirtualizer, RenderResult, render
