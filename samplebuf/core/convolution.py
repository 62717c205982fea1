"""
Convolution Bridge

Per-channel linear convolution of buffers using scipy.signal.convolve.

Technical assumptions:
- Full convolution: the result has nframes(a) + nframes(b) - 1 frames
- Rates are compared approximately (relative tolerance), since both
  operands usually come from the same source but may have gone through
  separate arithmetic
- No resampling: operands with different rates are rejected
- No channel broadcasting: multi-channel operands need equal channel counts
"""

import logging
import math
from dataclasses import dataclass
from typing import Literal, Optional

import numpy as np
from scipy import signal

from .buffers import SampleBuffer
from .errors import UnsupportedOperationError, VariantMismatchError

logger = logging.getLogger(__name__)

DEFAULT_RATE_RTOL = math.sqrt(np.finfo(np.float64).eps)


@dataclass
class ConvolutionConfig:
    """
    Configuration for buffer convolution.

    Attributes:
        method: Kernel selection passed to scipy.signal.convolve
        rate_rtol: Relative tolerance when comparing operand rates
    """
    method: Literal["auto", "direct", "fft"] = "auto"
    rate_rtol: float = DEFAULT_RATE_RTOL

    def __post_init__(self):
        if self.method not in ("auto", "direct", "fft"):
            raise ValueError(f"Unknown convolution method: {self.method}")
        if self.rate_rtol < 0:
            raise ValueError("Rate tolerance must not be negative")


def _as_matrix(data: np.ndarray) -> np.ndarray:
    return data[:, np.newaxis] if data.ndim == 1 else data


def convolve(a, b, config: Optional[ConvolutionConfig] = None) -> SampleBuffer:
    """
    Convolve two buffers (or a buffer and a plain array) channel by channel.

    A plain array operand is treated as having the buffer's rate. The
    result has the variant and rate of the buffer operand (of ``a`` if
    both are buffers).

    Args:
        a: Buffer or array, 1D or (frames, channels)
        b: Buffer or array, 1D or (frames, channels)
        config: Convolution configuration

    Returns:
        New buffer with nframes(a) + nframes(b) - 1 frames

    Raises:
        TypeError: Neither operand is a buffer
        VariantMismatchError: Time and spectrum buffers combined
        UnsupportedOperationError: Rates differ, or channel counts differ
    """
    if config is None:
        config = ConvolutionConfig()

    a_is_buffer = isinstance(a, SampleBuffer)
    b_is_buffer = isinstance(b, SampleBuffer)

    if not (a_is_buffer or b_is_buffer):
        raise TypeError("convolve requires at least one buffer operand")

    if a_is_buffer and b_is_buffer:
        if type(a) is not type(b):
            raise VariantMismatchError(
                f"Cannot convolve {type(a).__name__} with {type(b).__name__}"
            )
        if not math.isclose(a.samplerate, b.samplerate, rel_tol=config.rate_rtol):
            raise UnsupportedOperationError(
                f"Resampling convolution not supported "
                f"({a.samplerate} vs {b.samplerate})"
            )

    template = a if a_is_buffer else b
    x = np.asarray(a)
    y = np.asarray(b)

    if x.ndim == 1 and y.ndim == 1:
        result = signal.convolve(x, y, mode="full", method=config.method)
        return type(template)._wrap(result, template.samplerate)

    x = _as_matrix(x)
    y = _as_matrix(y)
    if x.shape[1] != y.shape[1]:
        raise UnsupportedOperationError(
            f"Broadcasting convolution not supported "
            f"({x.shape[1]} vs {y.shape[1]} channels)"
        )

    channels = x.shape[1]
    logger.debug(
        "Convolving %d channels (%d and %d frames)",
        channels, x.shape[0], y.shape[0],
    )
    out = type(template).allocate(
        np.result_type(x.dtype, y.dtype),
        template.samplerate,
        x.shape[0] + y.shape[0] - 1,
        channels,
    )
    for ch in range(channels):
        out.data[:, ch] = signal.convolve(x[:, ch], y[:, ch], mode="full", method=config.method)

    return out
