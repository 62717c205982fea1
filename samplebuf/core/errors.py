"""
Error types raised by the buffer core.

Every error also derives from the builtin exception a numpy user would
catch for the same situation, so ``except ValueError`` keeps working.
Errors are raised at the call that detects the problem; nothing is
corrected silently.
"""


class SampleBufError(Exception):
    """Base error for the samplebuf library."""


class RateMismatchError(SampleBufError, ValueError):
    """Raised when buffers with different sample rates are combined."""


class ShapeMismatchError(SampleBufError, ValueError):
    """Raised when a mix matrix or frame count does not fit the buffers."""


class UnitMismatchError(SampleBufError, ValueError):
    """Raised when an index quantity has the wrong physical dimension."""


class UnsupportedOperationError(SampleBufError, NotImplementedError):
    """Raised for operations this library deliberately does not implement."""


class BoundsError(SampleBufError, IndexError):
    """Raised when an index falls outside the frame or channel range."""


class VariantMismatchError(SampleBufError, TypeError):
    """Raised when time-domain and frequency-domain buffers are combined."""
