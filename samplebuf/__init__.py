"""
samplebuf - regularly sampled, multi-channel buffers that carry their rate.

Time-domain and frequency-domain signals can be indexed by physical unit,
combined elementwise with samplerate checking, mixed through coefficient
matrices, transformed and convolved without losing their metadata.

Usage:
    import numpy as np
    from samplebuf import TimeBuffer, interval, mono, s

    buf = TimeBuffer(np.zeros((44100, 2)), 44100)
    first_half = buf[interval(0 * s, 0.5 * s)]
    downmix = mono(buf)
"""

from .core import *  # noqa: F401,F403
from .core import __all__

__version__ = "0.1.0"
