"""
Index Resolution

Translates unit-aware indices into indices numpy understands natively.

Technical assumptions:
- Indices are zero-based: ``0 * frames`` and ``0 * s`` both select the
  first frame
- Time and frequency quantities are rounded half to even after scaling
  with the buffer rate
- Closed intervals are inclusive on both ends
- Only the frame position of a key is unit-aware; channels are always
  addressed by plain integers, slices or masks
"""

import numbers

import numpy as np

from .errors import BoundsError, UnitMismatchError, UnsupportedOperationError
from .units import ClosedInterval, Dimension, Quantity, frames, inframes


def to_index(buf, index):
    """
    Convert a single frame index into a native numpy index.

    Integers, slices, integer arrays, boolean masks and Ellipsis are
    returned unchanged.

    Args:
        buf: Buffer the index refers to
        index: Native index, Quantity or ClosedInterval

    Returns:
        Integer frame index or slice

    Raises:
        UnitMismatchError: Quantity dimension does not match the buffer domain
        BoundsError: Quantity resolves outside the buffer
        UnsupportedOperationError: Vector of quantities
    """
    if isinstance(index, Quantity):
        return _quantity_index(buf, index)
    if isinstance(index, ClosedInterval):
        return _interval_index(buf, index)
    if _contains_quantities(index):
        raise UnsupportedOperationError(
            "Indexing with a vector of quantities is not supported"
        )
    return index


def resolve_key(buf, key):
    """
    Resolve a full ``buf[...]`` key.

    The frame position goes through :func:`to_index`. A scalar frame index
    keeps the frame axis when the result would otherwise lose it while
    still holding several channels, so ``buf[5, 0:2]`` is a 1-frame
    two-channel buffer rather than two frames of one channel.
    """
    if isinstance(key, tuple):
        if not key:
            return key
        frame_key, channel_keys = key[0], key[1:]
    else:
        frame_key, channel_keys = key, ()

    frame_key = to_index(buf, frame_key)

    for channel_key in channel_keys:
        if isinstance(channel_key, (Quantity, ClosedInterval)):
            raise UnitMismatchError(
                f"Channels are indexed by position, not by quantity: {channel_key!r}"
            )

    if _is_integer(frame_key) and buf.ndim == 2:
        if not channel_keys or not _is_integer(channel_keys[0]):
            frame_key = _single_frame_slice(buf, frame_key)

    if channel_keys:
        return (frame_key, *channel_keys)
    return frame_key


def _quantity_index(buf, quantity: Quantity) -> int:
    dimension = quantity.dimension

    if dimension is Dimension.FRAMES:
        position = inframes(quantity)
    elif dimension is buf.native_dimension:
        position = inframes(quantity, buf.samplerate)
    else:
        raise UnitMismatchError(
            f"Cannot index {type(buf).__name__} with {dimension.value} "
            f"quantity {quantity}, expected {buf.native_dimension.value}"
        )

    index = int(round(float(position)))
    if not 0 <= index < buf.nframes:
        raise BoundsError(
            f"{quantity} resolves to frame {index}, "
            f"valid range is 0..{buf.nframes - 1}"
        )
    return index


def _interval_index(buf, interval: ClosedInterval) -> slice:
    lo, hi = interval.lo, interval.hi
    if not isinstance(lo, Quantity):
        lo, hi = lo * frames, hi * frames
    return slice(_quantity_index(buf, lo), _quantity_index(buf, hi) + 1)


def _single_frame_slice(buf, index: int) -> slice:
    n = buf.nframes
    if not -n <= index < n:
        raise BoundsError(f"Frame {index} out of range for {n}-frame buffer")
    index %= n
    return slice(index, index + 1)


def _is_integer(index) -> bool:
    return isinstance(index, numbers.Integral) and not isinstance(index, (bool, np.bool_))


def _contains_quantities(index) -> bool:
    if isinstance(index, (list, tuple)):
        return any(isinstance(item, (Quantity, ClosedInterval)) for item in index)
    if isinstance(index, np.ndarray) and index.dtype == object:
        return any(isinstance(item, (Quantity, ClosedInterval)) for item in index.flat)
    return False
