"""
Audio File I/O Module

Reads mono 16-bit PCM WAV files and writes interleaved stereo 16-bit PCM
WAV files with scipy.io.wavfile.
"""

import os
import numpy as np
import logging
from dataclasses import dataclass
from typing import Tuple

from scipy.io import wavfile

from .exceptions import AudioIOError, ChannelMismatchError, FileFormatError, LengthMismatchError

# Set up logging
logger = logging.getLogger(__name__)

OUTPUT_CHANNELS = 2
OUTPUT_BIT_DEPTH = 16


@dataclass(frozen=True)
class AudioFormat:
    """Format metadata of a PCM stream."""
    sample_rate: int
    channels: int
    bits_per_sample: int


def read_wav(file_path: str) -> Tuple[np.ndarray, AudioFormat]:
    """
    Read a mono 16-bit PCM WAV file.

    Args:
        file_path: Path to the WAV file

    Returns:
        Tuple of (int16 samples of shape (n_samples,), format metadata)

    Raises:
        FileNotFoundError: If the file doesn't exist
        FileFormatError: If the file is not 16-bit integer PCM
        ChannelMismatchError: If the file has more than one channel
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Audio file not found: {file_path}")

    logger.info(f"Loading audio file: {file_path}")

    try:
        sample_rate, data = wavfile.read(file_path)
    except ValueError as e:
        raise FileFormatError(f"Could not parse WAV file {file_path}: {str(e)}") from e

    if data.dtype != np.int16:
        raise FileFormatError(f"Expected 16-bit integer PCM in {file_path}, got {data.dtype}")

    channels = 1 if data.ndim == 1 else data.shape[1]
    if channels != 1:
        raise ChannelMismatchError(f"Expected a mono input file, {file_path} has {channels} channels")

    audio_format = AudioFormat(sample_rate=int(sample_rate), channels=channels,
                               bits_per_sample=OUTPUT_BIT_DEPTH)
    return data.reshape(-1), audio_format


def interleave(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    """
    Stack two channels into frames.

    Args:
        left: Left channel samples
        right: Right channel samples

    Returns:
        Array of shape (n_samples, 2) read row by row as left, right, left, ...
    """
    if len(left) != len(right):
        raise LengthMismatchError(f"Cannot interleave {len(left)} left samples with {len(right)} right samples")
    return np.column_stack([left, right])


def write_wav(file_path: str, left: np.ndarray, right: np.ndarray, sample_rate: int) -> None:
    """
    Write a 2-channel 16-bit PCM WAV file.

    Args:
        file_path: Output path
        left: Left channel int16 samples
        right: Right channel int16 samples
        sample_rate: Sample rate written into the header
    """
    frames = interleave(np.asarray(left, dtype=np.int16), np.asarray(right, dtype=np.int16))

    logger.info(f"Writing {frames.shape[0]} frames to {file_path}")

    try:
        wavfile.write(file_path, int(sample_rate), frames)
    except OSError as e:
        raise AudioIOError(f"Could not write {file_path}: {str(e)}") from e
