"""
SOFA Virtualizer

Renders a mono signal to binaural stereo by convolving it with the HRIR pair
measured closest to a virtual source position.
"""

__version__ = '0.1.0'
