"""
Physical Units for Indexing

Small unit system used to address buffers by time, frequency or frame
count instead of raw offsets.

Technical assumptions:
- Three dimensions only: time (base unit s), frequency (base unit Hz)
  and frame count (base unit frames)
- Quantities are built by multiplying a number with a unit: ``1.5 * s``
- Conversion to frames always goes through the base unit
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .errors import UnitMismatchError


class Dimension(Enum):
    """Physical dimension of a unit."""
    TIME = "time"
    FREQUENCY = "frequency"
    FRAMES = "frames"


@dataclass(frozen=True)
class Unit:
    """
    A named unit with its scale relative to the dimension's base unit.

    Attributes:
        symbol: Printable symbol (e.g. "ms")
        dimension: Physical dimension
        scale: Factor converting one of this unit into the base unit
    """
    symbol: str
    dimension: Dimension
    scale: float = 1.0

    # numpy scalars must defer to __rmul__ instead of building object arrays
    __array_ufunc__ = None

    def __rmul__(self, value: float) -> "Quantity":
        return Quantity(value, self)


@dataclass(frozen=True)
class Quantity:
    """
    A numeric value tagged with a unit.

    Quantities are only used as index inputs; they are never stored
    inside a buffer.
    """
    value: float
    unit: Unit

    @property
    def dimension(self) -> Dimension:
        return self.unit.dimension

    def to_base(self) -> float:
        """Value expressed in the base unit (s, Hz or frames)."""
        return self.value * self.unit.scale

    def _check_comparable(self, other: object) -> "Quantity":
        if not isinstance(other, Quantity):
            return NotImplemented
        if other.dimension != self.dimension:
            raise UnitMismatchError(
                f"Cannot compare {self.dimension.value} with {other.dimension.value}"
            )
        return other

    def __lt__(self, other: object) -> bool:
        other = self._check_comparable(other)
        if other is NotImplemented:
            return NotImplemented
        return self.to_base() < other.to_base()

    def __le__(self, other: object) -> bool:
        other = self._check_comparable(other)
        if other is NotImplemented:
            return NotImplemented
        return self.to_base() <= other.to_base()

    def __gt__(self, other: object) -> bool:
        other = self._check_comparable(other)
        if other is NotImplemented:
            return NotImplemented
        return self.to_base() > other.to_base()

    def __ge__(self, other: object) -> bool:
        other = self._check_comparable(other)
        if other is NotImplemented:
            return NotImplemented
        return self.to_base() >= other.to_base()

    def __str__(self) -> str:
        return f"{self.value} {self.unit.symbol}"


# Time
s = Unit("s", Dimension.TIME)
ms = Unit("ms", Dimension.TIME, 1e-3)
us = Unit("us", Dimension.TIME, 1e-6)
minute = Unit("min", Dimension.TIME, 60.0)

# Frequency
Hz = Unit("Hz", Dimension.FREQUENCY)
kHz = Unit("kHz", Dimension.FREQUENCY, 1e3)
MHz = Unit("MHz", Dimension.FREQUENCY, 1e6)

# Frame count
frames = Unit("frames", Dimension.FRAMES)


IntervalEnd = Union[int, Quantity]


@dataclass(frozen=True)
class ClosedInterval:
    """
    Closed interval ``[lo, hi]`` of frame positions.

    Both ends are either plain integers (frame counts) or quantities of
    the same dimension. The interval must be ascending.
    """
    lo: IntervalEnd
    hi: IntervalEnd

    def __post_init__(self):
        lo_is_quantity = isinstance(self.lo, Quantity)
        hi_is_quantity = isinstance(self.hi, Quantity)

        if lo_is_quantity != hi_is_quantity:
            raise UnitMismatchError(
                f"Interval ends must both be quantities or both be integers, "
                f"got {self.lo!r} and {self.hi!r}"
            )
        if lo_is_quantity and self.lo.dimension != self.hi.dimension:
            raise UnitMismatchError(
                f"Interval ends have different dimensions: "
                f"{self.lo.dimension.value} and {self.hi.dimension.value}"
            )
        if self.lo > self.hi:
            raise ValueError(f"Interval must be ascending, got [{self.lo}, {self.hi}]")


def interval(lo: IntervalEnd, hi: IntervalEnd) -> ClosedInterval:
    """Shortcut for ``ClosedInterval(lo, hi)``."""
    return ClosedInterval(lo, hi)


def inframes(quantity: Quantity, rate: Optional[float] = None) -> float:
    """
    Convert a quantity into a (fractional) number of frames.

    Frame quantities pass through unchanged. Time and frequency quantities
    are multiplied by ``rate``: samples per second for time, the source
    duration in seconds for frequency (spectrum buffers).

    Args:
        quantity: Quantity to convert
        rate: Rate of the buffer the frames refer to

    Returns:
        Number of frames as float (not rounded)

    Raises:
        ValueError: A time or frequency quantity without a rate
    """
    if quantity.dimension is Dimension.FRAMES:
        return quantity.to_base()
    if rate is None:
        raise ValueError(
            f"A rate is required to convert {quantity.dimension.value} into frames"
        )
    return quantity.to_base() * rate
