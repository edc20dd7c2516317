"""Fixed-point helpers and element-wise q7 arithmetic."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

_Q7_BITS = 8


def ssat(value: int, bits: int) -> int:
    """Saturate ``value`` to a signed integer of ``bits`` bits."""
    if bits < 1:
        raise ValueError(f"bits must be positive, got {bits}")
    high = (1 << (bits - 1)) - 1
    low = -(1 << (bits - 1))
    return max(low, min(high, value))


def usat(value: int, bits: int) -> int:
    """Saturate ``value`` to an unsigned integer of ``bits`` bits."""
    if bits < 0:
        raise ValueError(f"bits must not be negative, got {bits}")
    return max(0, min((1 << bits) - 1, value))


def wrap(value: int, bits: int) -> int:
    """Reduce ``value`` to a two's-complement signed integer of ``bits`` bits."""
    if bits < 1:
        raise ValueError(f"bits must be positive, got {bits}")
    masked = value & ((1 << bits) - 1)
    if masked >> (bits - 1):
        return masked - (1 << bits)
    return masked


def round_half(shift: int) -> int:
    """Rounding offset added before an arithmetic right shift by ``shift``."""
    if shift < 0:
        raise ValueError(f"shift must not be negative, got {shift}")
    return (1 << shift) >> 1


def c_div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    if b == 0:
        raise ZeroDivisionError("integer division by zero")
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _requantise(value: int, out_shift: int) -> int:
    return ssat((value + round_half(out_shift)) >> out_shift, _Q7_BITS)


def _elementwise(
    a: Sequence[int], b: Sequence[int], out_shift: int, op: Callable[[int, int], int]
) -> list[int]:
    if len(a) != len(b):
        raise ValueError(f"operand lengths differ: {len(a)} and {len(b)}")
    return [_requantise(op(x, y), out_shift) for x, y in zip(a, b)]


def add(a: Sequence[int], b: Sequence[int], out_shift: int) -> list[int]:
    """Element-wise saturating q7 addition followed by a rounded right shift."""
    return _elementwise(a, b, out_shift, lambda x, y: x + y)


def sub(a: Sequence[int], b: Sequence[int], out_shift: int) -> list[int]:
    """Element-wise saturating q7 subtraction followed by a rounded right shift."""
    return _elementwise(a, b, out_shift, lambda x, y: x - y)


def mult(a: Sequence[int], b: Sequence[int], out_shift: int) -> list[int]:
    """Element-wise saturating q7 multiplication followed by a rounded right shift."""
    return _elementwise(a, b, out_shift, lambda x, y: x * y)


def _columns(sources: Sequence[Sequence[int]]) -> Iterable[tuple[int, ...]]:
    if not sources:
        raise ValueError("at least one source is required")
    length = len(sources[0])
    if any(len(src) != length for src in sources):
        raise ValueError("all sources must have the same length")
    return zip(*sources)


def multiple_add(sources: Sequence[Sequence[int]], out_shift: int) -> list[int]:
    """Sum any number of equally sized q7 blocks element by element."""
    return [_requantise(sum(column), out_shift) for column in _columns(sources)]


def multiple_sub(sources: Sequence[Sequence[int]], out_shift: int) -> list[int]:
    """Subtract every later block from the first one, element by element."""
    return [
        _requantise(column[0] - sum(column[1:]), out_shift)
        for column in _columns(sources)
    ]


def multiple_mult(sources: Sequence[Sequence[int]], out_shift: int) -> list[int]:
    """Multiply any number of equally sized q7 blocks element by element."""
    result = []
    for column in _columns(sources):
        product = 1
        for value in column:
            product = wrap(product * value, 32)
        result.append(_requantise(product, out_shift))
    return result


def q7_to_q15(values: Iterable[int]) -> list[int]:
    """Widen q7 values to q15 by shifting them into the upper byte."""
    return [wrap(v << 8, 16) for v in values]


def q7_to_q15_no_shift(values: Iterable[int]) -> list[int]:
    """Widen q7 values to q15 keeping their numeric value."""
    return [int(v) for v in values]


def q15_to_q7(values: Iterable[int], shift: int) -> list[int]:
    """Narrow q15 values to q7 with an arithmetic right shift."""
    if shift < 0:
        raise ValueError(f"shift must not be negative, got {shift}")
    return [wrap(v >> shift, _Q7_BITS) for v in values]