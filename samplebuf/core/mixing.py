"""
Channel Mixing

Linear combination of channels through a coefficient matrix.

Technical assumptions:
- To mix an M-channel source into N channels the matrix is M x N;
  dest[t, n] = sum over m of src[t, m] * coefficients[m, n]
- 1D sources and destinations are treated as single-channel matrices,
  no reshaping needed by the caller
- Mono downmix is the arithmetic mean (no energy compensation)
- In-place variants require that source and destination do not share
  memory; this is a documented precondition and is not checked
"""

import logging

import numpy as np

from .buffers import SampleBuffer, nchannels, nframes
from .errors import ShapeMismatchError

logger = logging.getLogger(__name__)


def _as_matrix(x) -> np.ndarray:
    """View buffer or array data as (frames, channels)."""
    data = x.data if isinstance(x, SampleBuffer) else np.asarray(x)
    if data.ndim == 1:
        return data[:, np.newaxis]
    return data


def _similar(src, dtype, shape: tuple):
    if isinstance(src, SampleBuffer):
        return src.similar(dtype, shape)
    return np.empty(shape, dtype=dtype, order="F")


def mix_into(dest, src, coefficients):
    """
    Mix the channels of ``src`` into ``dest`` in place.

    ``src`` and ``dest`` must not share memory.

    Args:
        dest: Destination buffer or array, 1D or (frames, N)
        src: Source buffer or array, 1D or (frames, M)
        coefficients: M x N mix matrix

    Returns:
        ``dest``

    Raises:
        ShapeMismatchError: Matrix is not M x N, or frame counts differ
    """
    src_matrix = _as_matrix(src)
    dest_matrix = _as_matrix(dest)
    coefficients = np.asarray(coefficients)

    inchans = src_matrix.shape[1]
    outchans = dest_matrix.shape[1]
    if coefficients.shape != (inchans, outchans):
        raise ShapeMismatchError(
            f"Mix matrix should be {inchans}x{outchans}, "
            f"got {'x'.join(str(n) for n in coefficients.shape)}"
        )
    if src_matrix.shape[0] != dest_matrix.shape[0]:
        raise ShapeMismatchError(
            f"Source has {src_matrix.shape[0]} frames but destination "
            f"has {dest_matrix.shape[0]}"
        )

    logger.debug("Mixing %d channels into %d over %d frames", inchans, outchans, src_matrix.shape[0])
    np.matmul(src_matrix, coefficients, out=dest_matrix)
    return dest


def mix(src, coefficients):
    """
    Mix the channels of ``src`` into a new (frames, N) result.

    A buffer source gives a buffer of the same variant and rate, a plain
    array gives a plain array. The element type is the numpy promotion of
    source and coefficients.

    Args:
        src: Source buffer or array with M channels
        coefficients: M x N mix matrix

    Returns:
        Mixed data with N channels

    Raises:
        ShapeMismatchError: Matrix is not M x N
    """
    coefficients = np.asarray(coefficients)
    if coefficients.ndim != 2:
        raise ShapeMismatchError(
            f"Mix matrix should be {nchannels(src)}xN, "
            f"got {coefficients.ndim}D coefficients"
        )

    dtype = np.result_type(_as_matrix(src).dtype, coefficients.dtype)
    dest = _similar(src, dtype, (nframes(src), coefficients.shape[1]))
    return mix_into(dest, src, coefficients)


def _mono_coefficients(src) -> np.ndarray:
    inchans = nchannels(src)
    return np.full((inchans, 1), 1.0 / inchans)


def mono_into(dest, src):
    """Average the channels of ``src`` into the single-channel ``dest``."""
    return mix_into(dest, src, _mono_coefficients(src))


def mono(src):
    """
    Average the channels of ``src``.

    Returns:
        (frames, 1) buffer or array holding the per-frame channel mean
    """
    return mix(src, _mono_coefficients(src))
