"""
Sample Buffers

Regularly sampled, multi-channel numpy arrays that carry their own rate.

Technical assumptions:
- Data is 1D (one channel) or 2D with shape (frames, channels)
- Storage is column-major (Fortran order), so every channel is one
  contiguous run of memory
- A buffer owns its array: construction from an existing array copies it
- The rate is metadata only; changing it never resamples the data

Terminology:
- sample: a single value of one channel at one instant (or bin)
- channel: one of the parallel sample streams
- frame: the samples of all channels taken at the same instant (or bin)
"""

import numbers
import operator
from collections.abc import Sequence
from typing import Optional, Union

import numpy as np
from numpy.lib.mixins import NDArrayOperatorsMixin

from .errors import BoundsError, UnitMismatchError
from .indexing import resolve_key
from .units import Dimension, Quantity, inframes


def _validate_samplerate(rate: float) -> float:
    rate = float(rate)
    if not np.isfinite(rate) or rate <= 0:
        raise ValueError(f"Samplerate must be positive and finite, got {rate}")
    return rate


def _validate_data(data: np.ndarray) -> np.ndarray:
    if data.ndim not in (1, 2):
        raise ValueError(f"Buffer data must be 1D or 2D, got {data.ndim}D")
    return data


class Domain(Sequence):
    """
    Lazy sequence of the time (or frequency) coordinate of every frame.

    Values start at 0 and are spaced ``1 / samplerate`` apart. The rate is
    captured at creation; iterating again restarts from the first frame.
    """

    def __init__(self, length: int, samplerate: float):
        self._length = length
        self._samplerate = samplerate

    @property
    def step(self) -> float:
        return 1.0 / self._samplerate

    def __len__(self) -> int:
        return self._length

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(self._length))]
        index = operator.index(index)
        if index < 0:
            index += self._length
        if not 0 <= index < self._length:
            raise IndexError(f"Domain index out of range for length {self._length}")
        return index / self._samplerate

    def __iter__(self):
        for i in range(self._length):
            yield i / self._samplerate

    def __array__(self, dtype=None, copy=None):
        values = np.arange(self._length) / self._samplerate
        if dtype is not None:
            values = values.astype(dtype)
        return values

    def __repr__(self) -> str:
        return f"Domain(length={self._length}, step={self.step})"


class LinearView:
    """
    Element access by position in the column-major storage.

    Element ``i`` of a (frames, channels) buffer is frame
    ``i % nframes`` of channel ``i // nframes``. Only integer positions
    are accepted; reads return scalars, writes go to the buffer.
    """

    def __init__(self, buf: "SampleBuffer"):
        self._buf = buf

    def __len__(self) -> int:
        return self._buf.size

    def _position(self, index) -> tuple:
        data = self._buf.data
        index = operator.index(index)
        if index < 0:
            index += data.size
        if not 0 <= index < data.size:
            raise BoundsError(
                f"Linear index {index} out of range for {data.size}-element buffer"
            )
        return np.unravel_index(index, data.shape, order="F")

    def __getitem__(self, index):
        return self._buf.data[self._position(index)]

    def __setitem__(self, index, value) -> None:
        self._buf.data[self._position(index)] = value

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]


class SampleBuffer(NDArrayOperatorsMixin):
    """
    Common base of :class:`TimeBuffer` and :class:`SpectrumBuffer`.

    Arithmetic operators and numpy ufuncs go through the broadcast policy
    in :mod:`samplebuf.core.broadcast`: all buffer operands must share one
    rate and the result is a new buffer of the same variant.

    Class attributes:
        native_dimension: Quantity dimension accepted for indexing
        domain_unit: Unit symbol of the domain coordinates
        rate_unit: Unit symbol of the rate field
    """

    native_dimension: Dimension
    domain_unit: str
    rate_unit: str

    __hash__ = None

    def __init__(self, data, samplerate: float):
        """
        Create a buffer from array data.

        Args:
            data: Array-like, shape (frames,) or (frames, channels). Copied.
            samplerate: Positive, finite rate
        """
        if type(self) is SampleBuffer:
            raise TypeError("SampleBuffer is abstract, use TimeBuffer or SpectrumBuffer")
        self._data = _validate_data(np.array(data, order="F"))
        self._samplerate = _validate_samplerate(samplerate)

    @classmethod
    def _wrap(cls, data: np.ndarray, samplerate: float) -> "SampleBuffer":
        """Wrap a freshly computed array without copying it again."""
        buf = cls.__new__(cls)
        buf._data = _validate_data(np.asfortranarray(data))
        buf._samplerate = _validate_samplerate(samplerate)
        return buf

    @classmethod
    def allocate(
        cls,
        dtype,
        samplerate: float,
        length: Union[int, Quantity],
        channels: Optional[int] = None,
    ) -> "SampleBuffer":
        """
        Allocate an uninitialized buffer.

        Args:
            dtype: Element type
            samplerate: Rate of the new buffer
            length: Number of frames, or a frame/native-unit quantity
                converted with the rate
            channels: Channel count; None gives a 1D buffer

        Returns:
            New buffer with undefined contents

        Raises:
            UnitMismatchError: Length quantity of the other domain
        """
        samplerate = _validate_samplerate(samplerate)
        if isinstance(length, Quantity):
            if length.dimension not in (Dimension.FRAMES, cls.native_dimension):
                raise UnitMismatchError(
                    f"Cannot size {cls.__name__} with {length.dimension.value} "
                    f"quantity {length}, expected {cls.native_dimension.value}"
                )
            length = int(round(inframes(length, samplerate)))
        shape = (length,) if channels is None else (length, channels)
        return cls._wrap(np.empty(shape, dtype=dtype, order="F"), samplerate)

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    def data(self) -> np.ndarray:
        """Backing array, shape (frames,) or (frames, channels)."""
        return self._data

    @property
    def samplerate(self) -> float:
        return self._samplerate

    @samplerate.setter
    def samplerate(self, rate: float) -> None:
        self._samplerate = _validate_samplerate(rate)

    def set_samplerate(self, rate: float) -> "SampleBuffer":
        """
        Change the rate without touching the data.

        In effect this speeds up or slows down the signal when it is
        played back at the original rate.

        Returns:
            The buffer itself
        """
        self.samplerate = rate
        return self

    @property
    def nframes(self) -> int:
        return self._data.shape[0]

    @property
    def nchannels(self) -> int:
        return 1 if self._data.ndim == 1 else self._data.shape[1]

    @property
    def shape(self) -> tuple:
        return self._data.shape

    @property
    def ndim(self) -> int:
        return self._data.ndim

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def size(self) -> int:
        return self._data.size

    def __len__(self) -> int:
        return self.nframes

    def domain(self) -> Domain:
        """Time (or frequency) coordinate of every frame."""
        return Domain(self.nframes, self._samplerate)

    def similar(self, dtype=None, shape: Optional[tuple] = None) -> "SampleBuffer":
        """
        New uninitialized buffer of the same variant and rate.

        Args:
            dtype: Element type, defaults to this buffer's
            shape: Shape, defaults to this buffer's
        """
        data = np.empty(
            self.shape if shape is None else shape,
            dtype=self.dtype if dtype is None else dtype,
            order="F",
        )
        return self._wrap(data, self._samplerate)

    def copy(self) -> "SampleBuffer":
        return self._wrap(self._data.copy(order="F"), self._samplerate)

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------

    def __getitem__(self, key):
        index = resolve_key(self, key)
        try:
            result = self._data[index]
        except IndexError as exc:
            raise BoundsError(str(exc)) from exc

        if np.ndim(result) == 0:
            return result
        return self._wrap(np.array(result, order="F"), self._samplerate)

    def __setitem__(self, key, value) -> None:
        index = resolve_key(self, key)
        if isinstance(value, SampleBuffer):
            value = value.data
        try:
            self._data[index] = value
        except IndexError as exc:
            raise BoundsError(str(exc)) from exc

    def __iter__(self):
        for i in range(self.nframes):
            yield self[i]

    @property
    def linear(self) -> LinearView:
        """Single-integer access to every element in storage order."""
        return LinearView(self)

    # ------------------------------------------------------------------
    # Raw storage access
    # ------------------------------------------------------------------

    def channel_offset(self, channel: int, frame_offset: int = 0) -> int:
        """Element offset of ``channel`` (zero-based) into the flat storage."""
        return channel_offset(self._data, channel, frame_offset)

    def channel_address(self, channel: int, frame_offset: int = 0) -> int:
        """
        Memory address of a channel's contiguous run.

        Meant for handing one channel to a native routine that reads or
        fills it in place. The address is only valid while the buffer
        is alive.
        """
        offset = self.channel_offset(channel, frame_offset)
        return self._data.ctypes.data + offset * self._data.itemsize

    # ------------------------------------------------------------------
    # numpy interop
    # ------------------------------------------------------------------

    def __array__(self, dtype=None, copy=None):
        if dtype is not None and np.dtype(dtype) != self._data.dtype:
            return self._data.astype(dtype)
        if copy:
            return self._data.copy()
        return self._data

    _HANDLED_TYPES = (np.ndarray, np.generic, numbers.Number, list, tuple)

    def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
        from .broadcast import apply_ufunc

        operands = inputs + kwargs.get("out", ())
        for operand in operands:
            if not isinstance(operand, self._HANDLED_TYPES + (SampleBuffer,)):
                return NotImplemented
        return apply_ufunc(ufunc, method, *inputs, **kwargs)

    def __eq__(self, other):
        if not isinstance(other, SampleBuffer):
            return NotImplemented
        return (
            self._samplerate == other._samplerate
            and np.array_equal(self._data, other._data)
        )

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(nframes={self.nframes}, "
            f"nchannels={self.nchannels}, samplerate={self._samplerate}, "
            f"dtype={self.dtype})"
        )


class TimeBuffer(SampleBuffer):
    """
    Time-domain buffer; ``samplerate`` is in samples per second.

    A 1-second stereo signal sampled at 44100 Hz with float32 samples is a
    TimeBuffer of shape (44100, 2) and dtype float32.
    """
    native_dimension = Dimension.TIME
    domain_unit = "s"
    rate_unit = "Hz"


class SpectrumBuffer(SampleBuffer):
    """
    Frequency-domain buffer holding the spectrum of a TimeBuffer.

    By convention ``samplerate`` holds the duration in seconds of the
    time signal the spectrum was computed from, so the bin spacing is
    ``1 / samplerate`` Hz and frequency indices convert with
    ``round(f * samplerate)``.
    """
    native_dimension = Dimension.FREQUENCY
    domain_unit = "Hz"
    rate_unit = "s"


# ----------------------------------------------------------------------
# Functional accessors (buffers and plain arrays)
# ----------------------------------------------------------------------

def nframes(x) -> int:
    """Length of ``x`` in frames."""
    if isinstance(x, SampleBuffer):
        return x.nframes
    return np.shape(x)[0]


def nchannels(x) -> int:
    """Number of channels of ``x``; 1D data is a single channel."""
    if isinstance(x, SampleBuffer):
        return x.nchannels
    shape = np.shape(x)
    return 1 if len(shape) == 1 else shape[1]


def samplerate(buf: SampleBuffer) -> float:
    return buf.samplerate


def set_samplerate(buf: SampleBuffer, rate: float) -> SampleBuffer:
    """Metadata-only rate change, see :meth:`SampleBuffer.set_samplerate`."""
    return buf.set_samplerate(rate)


def domain(buf: SampleBuffer) -> Domain:
    return buf.domain()


def channel_offset(x, channel: int, frame_offset: int = 0) -> int:
    """
    Element offset of a channel's run in column-major storage.

    Args:
        x: Buffer or column-major array
        channel: Zero-based channel number
        frame_offset: Frame within the channel

    Returns:
        ``channel * nframes(x) + frame_offset``
    """
    if not 0 <= channel < nchannels(x):
        raise BoundsError(
            f"Channel {channel} out of range for {nchannels(x)}-channel data"
        )
    return channel * nframes(x) + frame_offset
