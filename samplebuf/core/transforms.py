"""
Discrete Fourier Transform Bridge

Wraps an FFT kernel so that time buffers become spectrum buffers and back,
with the rate field re-derived on the way.

Technical assumptions:
- The transform runs along the frame axis, independently per channel
- Full complex spectrum (numpy.fft.fft), not the one-sided rfft
- A SpectrumBuffer stores the duration of its source signal in its rate
  field: duration = nframes / samplerate
- The inverse recovers the rate as nframes / duration; since that division
  can land a few ulps away from the source rate, the shortest float whose
  forward duration reproduces the stored one is taken
"""

import logging
import math
from typing import Callable

import numpy as np

from .buffers import SpectrumBuffer, TimeBuffer

logger = logging.getLogger(__name__)

# Neighbouring floats searched on each side of nframes / duration
RATE_SEARCH_ULPS = 4


def recover_samplerate(nframes: int, duration: float) -> float:
    """
    Rate of the time signal a spectrum was computed from.

    Among the floats near ``nframes / duration`` that map back to exactly
    ``duration`` under ``nframes / rate``, the one with the shortest decimal
    representation wins, so 48000.0 comes back as 48000.0 rather than
    47999.99999999999.
    """
    guess = nframes / duration
    candidates = [guess]
    low = high = guess
    for _ in range(RATE_SEARCH_ULPS):
        low = math.nextafter(low, 0.0)
        high = math.nextafter(high, math.inf)
        candidates.extend((low, high))

    exact = [c for c in candidates if c > 0 and nframes / c == duration]
    if not exact:
        return guess
    return min(exact, key=lambda c: (len(repr(c)), abs(c - guess)))


def forward_transform(
    buf: TimeBuffer,
    kernel: Callable = np.fft.fft,
) -> SpectrumBuffer:
    """
    Compute the spectrum of a time buffer.

    Args:
        buf: Time-domain buffer
        kernel: Transform applied to the raw array, called as
            ``kernel(data, axis=0)``

    Returns:
        SpectrumBuffer whose rate field is the duration of ``buf`` in seconds

    Raises:
        TypeError: ``buf`` is not a TimeBuffer
    """
    if not isinstance(buf, TimeBuffer):
        raise TypeError(f"Forward transform requires a TimeBuffer, got {type(buf).__name__}")

    duration = buf.nframes / buf.samplerate
    logger.debug("Forward transform of %d frames (%.6g s)", buf.nframes, duration)
    return SpectrumBuffer._wrap(kernel(buf.data, axis=0), duration)


def inverse_transform(
    buf: SpectrumBuffer,
    kernel: Callable = np.fft.ifft,
) -> TimeBuffer:
    """
    Reconstruct a time buffer from its spectrum.

    The result is complex; for spectra of real signals the imaginary part
    is zero up to rounding.

    Args:
        buf: Frequency-domain buffer
        kernel: Inverse transform, called as ``kernel(data, axis=0)``

    Returns:
        TimeBuffer whose rate is recovered from the duration with
        :func:`recover_samplerate`

    Raises:
        TypeError: ``buf`` is not a SpectrumBuffer
    """
    if not isinstance(buf, SpectrumBuffer):
        raise TypeError(f"Inverse transform requires a SpectrumBuffer, got {type(buf).__name__}")

    rate = recover_samplerate(buf.nframes, buf.samplerate)
    logger.debug("Inverse transform of %d bins (rate %.6g Hz)", buf.nframes, rate)
    return TimeBuffer._wrap(kernel(buf.data, axis=0), rate)
