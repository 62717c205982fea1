"""
Core module - rate-carrying buffers and the operations defined on them.

This module contains all numeric logic:
- Time and spectrum buffers with unit-aware indexing
- Samplerate-checked broadcasting
- Channel mixing
- FFT and convolution bridges
"""

from .errors import (
    SampleBufError,
    RateMismatchError,
    ShapeMismatchError,
    UnitMismatchError,
    UnsupportedOperationError,
    BoundsError,
    VariantMismatchError,
)
from .units import (
    Dimension,
    Unit,
    Quantity,
    ClosedInterval,
    interval,
    inframes,
    s,
    ms,
    us,
    minute,
    Hz,
    kHz,
    MHz,
    frames,
)
from .buffers import (
    SampleBuffer,
    TimeBuffer,
    SpectrumBuffer,
    Domain,
    LinearView,
    nframes,
    nchannels,
    samplerate,
    set_samplerate,
    domain,
    channel_offset,
)
from .indexing import to_index, resolve_key
from .broadcast import (
    broadcast,
    find_samplerates,
    check_samplerates,
    find_buffer_type,
)
from .mixing import mix, mix_into, mono, mono_into
from .transforms import forward_transform, inverse_transform, recover_samplerate
from .convolution import convolve, ConvolutionConfig

__all__ = [
    "SampleBufError",
    "RateMismatchError",
    "ShapeMismatchError",
    "UnitMismatchError",
    "UnsupportedOperationError",
    "BoundsError",
    "VariantMismatchError",
    "Dimension",
    "Unit",
    "Quantity",
    "ClosedInterval",
    "interval",
    "inframes",
    "s",
    "ms",
    "us",
    "minute",
    "Hz",
    "kHz",
    "MHz",
    "frames",
    "SampleBuffer",
    "TimeBuffer",
    "SpectrumBuffer",
    "Domain",
    "LinearView",
    "nframes",
    "nchannels",
    "samplerate",
    "set_samplerate",
    "domain",
    "channel_offset",
    "to_index",
    "resolve_key",
    "broadcast",
    "find_samplerates",
    "check_samplerates",
    "find_buffer_type",
    "mix",
    "mix_into",
    "mono",
    "mono_into",
    "forward_transform",
    "inverse_transform",
    "recover_samplerate",
    "convolve",
    "ConvolutionConfig",
]
