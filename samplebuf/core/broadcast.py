"""
Broadcast Policy

Elementwise operations over buffers must produce a buffer with exactly one
rate. The policy runs as explicit steps before the numeric kernel:

1. collect the rate of every buffer operand (nested groups included)
2. reject the expression unless all rates are identical
3. determine the single buffer variant (time or spectrum)
4. unwrap buffers into plain arrays and run the kernel
5. wrap the result into a new buffer carrying the agreed rate

Technical assumptions:
- Rates are compared exactly; there is no averaging or coercion
- numpy broadcasting rules apply to the unwrapped arrays, except that a
  1D buffer is treated as one column (frames, 1) as soon as any operand
  is 2D, so mono and multi-channel buffers combine frame-wise
"""

import logging
from typing import Callable

import numpy as np

from .buffers import SampleBuffer
from .errors import RateMismatchError, VariantMismatchError

logger = logging.getLogger(__name__)


def find_samplerates(operands) -> list[float]:
    """
    Collect the rates of all buffers in an operand tree.

    Tuples and lists are searched recursively; duplicates are kept.
    """
    rates = []
    for operand in operands:
        if isinstance(operand, SampleBuffer):
            rates.append(operand.samplerate)
        elif isinstance(operand, (tuple, list)):
            rates.extend(find_samplerates(operand))
    return rates


def check_samplerates(rates: list[float]) -> float:
    """
    Validate collected rates and return the agreed one.

    Raises:
        ValueError: No buffer operand at all
        RateMismatchError: Any rate differs from the first
    """
    if not rates:
        raise ValueError("Broadcasting expression contains no buffer operand")

    first = rates[0]
    if any(rate != first for rate in rates):
        raise RateMismatchError(
            f"All samplerates in a broadcasting expression must match, got {rates}"
        )
    return first


def find_buffer_type(operands) -> type:
    """
    Determine the buffer variant of an operand tree.

    Raises:
        ValueError: No buffer operand at all
        VariantMismatchError: Time and spectrum buffers are mixed
    """
    types = set()
    _collect_buffer_types(operands, types)

    if not types:
        raise ValueError("Broadcasting expression contains no buffer operand")
    if len(types) > 1:
        names = ", ".join(sorted(t.__name__ for t in types))
        raise VariantMismatchError(f"Cannot broadcast different buffer types: {names}")
    return types.pop()


def _collect_buffer_types(operands, types: set) -> None:
    for operand in operands:
        if isinstance(operand, SampleBuffer):
            types.add(type(operand))
        elif isinstance(operand, (tuple, list)):
            _collect_buffer_types(operand, types)


def unwrap_operands(operands) -> tuple:
    """
    Replace buffers by their arrays.

    When any operand is 2D, 1D buffers become (frames, 1) views so that
    they broadcast against the channel axis instead of the frame axis.
    """
    as_column = _max_ndim(operands) == 2
    return tuple(_unwrap(operand, as_column) for operand in operands)


def _max_ndim(operands) -> int:
    ndim = 0
    for operand in operands:
        if isinstance(operand, (tuple, list)) and not _is_numeric_sequence(operand):
            ndim = max(ndim, _max_ndim(operand))
        else:
            ndim = max(ndim, np.ndim(operand))
    return ndim


def _is_numeric_sequence(operand) -> bool:
    return not any(isinstance(item, SampleBuffer) for item in operand)


def _unwrap(operand, as_column: bool):
    if isinstance(operand, SampleBuffer):
        data = operand.data
        if as_column and data.ndim == 1:
            return data[:, np.newaxis]
        return data
    if isinstance(operand, (tuple, list)) and not _is_numeric_sequence(operand):
        return type(operand)(_unwrap(item, as_column) for item in operand)
    return operand


def _operand_arrays(operands):
    for operand in operands:
        if isinstance(operand, np.ndarray):
            yield operand
        elif isinstance(operand, (tuple, list)):
            yield from _operand_arrays(operand)


def wrap_result(result, buffer_type: type, rate: float, operands=()):
    """
    Wrap a kernel result into a buffer.

    0-d results stay scalars, tuples (e.g. from ``divmod``) are wrapped
    element by element. A result that may share memory with one of the
    unwrapped ``operands`` is copied first, so the new buffer never
    aliases an input.
    """
    if isinstance(result, tuple):
        return tuple(wrap_result(item, buffer_type, rate, operands) for item in result)
    if np.ndim(result) == 0:
        return result
    if isinstance(result, np.ndarray) and any(
        np.may_share_memory(result, array) for array in _operand_arrays(operands)
    ):
        result = result.copy(order="F")
    return buffer_type._wrap(result, rate)


def broadcast(func: Callable, *operands, **kwargs):
    """
    Apply an elementwise function to buffers under the rate policy.

    Example:
        mixed = broadcast(lambda a, b: 0.5 * (a + b), left, right)

    Args:
        func: Kernel operating on plain numpy arrays
        *operands: Buffers, arrays or scalars; tuples and lists are
            searched for buffers as well
        **kwargs: Passed to ``func``

    Returns:
        New buffer of the operands' variant carrying their common rate

    Raises:
        RateMismatchError: Buffers with different rates
        VariantMismatchError: Time and spectrum buffers mixed
    """
    rate = check_samplerates(find_samplerates(operands))
    buffer_type = find_buffer_type(operands)
    logger.debug("Broadcasting %s over %s at rate %s", func, buffer_type.__name__, rate)

    args = unwrap_operands(operands)
    result = func(*args, **kwargs)
    return wrap_result(result, buffer_type, rate, args)


def apply_ufunc(ufunc: np.ufunc, method: str, *inputs, **kwargs):
    """
    numpy ``__array_ufunc__`` entry point for buffers.

    Buffers passed through ``out=`` take part in the rate check and are
    filled in place. Methods other than ``__call__`` (``reduce``,
    ``accumulate``, ...) are validated but return plain numpy results,
    since they generally do not keep the frame axis.
    """
    out = kwargs.pop("out", ())
    operands = inputs + tuple(out)

    rate = check_samplerates(find_samplerates(operands))
    buffer_type = find_buffer_type(operands)

    args = unwrap_operands(inputs)
    if out:
        kwargs["out"] = tuple(
            o.data if isinstance(o, SampleBuffer) else o for o in out
        )

    if method != "__call__":
        return getattr(ufunc, method)(*args, **kwargs)

    logger.debug("Applying ufunc %s over %s at rate %s", ufunc.__name__, buffer_type.__name__, rate)
    result = ufunc(*args, **kwargs)

    if out:
        return out[0] if len(out) == 1 else tuple(out)
    return wrap_result(result, buffer_type, rate, args)
