"""Activation functions on q7 data."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .qmath import c_div, ssat, usat, wrap

_TABLE_SIZE = 256


def softmax(values: Iterable[int]) -> list[int]:
    """Approximate softmax of q7 inputs, giving q0.7 confidences."""
    data = list(values)
    if not data:
        return []
    # Values more than 8 below the maximum vanish after narrowing to q7.
    base = max(max(data), -257) - 8
    total = sum(1 << usat(v - base, 5) for v in data if v > base)
    output_base = 0x100000 // total
    return [
        ssat(output_base >> usat(13 + base - v, 5), 8) if v > base else 0
        for v in data
    ]


def hard_sigmoid(values: Iterable[int], dec_bit: int) -> list[int]:
    """Piecewise linear sigmoid, 0.2 * x + 0.5, saturated outside +-2.5."""
    if dec_bit < 0:
        raise ValueError(f"dec_bit must not be negative, got {dec_bit}")
    limit = wrap(int(2.5 * (1 << dec_bit) - 1), 16)
    offset = 64
    mult = 26
    result = []
    for v in values:
        if v <= -limit:
            result.append(0)
        elif v >= limit:
            result.append(127)
        else:
            result.append(wrap((wrap(v * mult, 16) >> dec_bit) + offset, 8))
    return result


def hard_tanh(values: Iterable[int], dec_bit: int) -> list[int]:
    """Clip the input to +-1 and rescale it to q0.7."""
    if dec_bit < 0:
        raise ValueError(f"dec_bit must not be negative, got {dec_bit}")
    data = list(values)
    if dec_bit == 7:
        return data
    int_bit = 7 - dec_bit
    limit = 1 << dec_bit
    result = []
    for v in data:
        if v <= -limit:
            result.append(-128)
        elif v >= limit:
            result.append(127)
        elif int_bit < 0:
            result.append(wrap(v >> -int_bit, 8))
        else:
            result.append(wrap(v << int_bit, 8))
    return result


def _check_table(table: Sequence[int]) -> None:
    if len(table) != _TABLE_SIZE:
        raise ValueError(
            f"lookup table must have {_TABLE_SIZE} entries, got {len(table)}"
        )


def _lookup(values: Iterable[int], int_width: int, table: Sequence[int]) -> list[int]:
    shift = 3 - int_width
    return [table[(v >> shift) & 0xFF] for v in values]


def sigmoid(values: Iterable[int], int_width: int, table: Sequence[int]) -> list[int]:
    """Table-driven sigmoid; inputs with more than 3 integer bits saturate."""
    _check_table(table)
    if int_width > 3:
        return [127 if v > 0 else 0 for v in values]
    return _lookup(values, int_width, table)


def tanh(values: Iterable[int], int_width: int, table: Sequence[int]) -> list[int]:
    """Table-driven tanh; inputs with more than 3 integer bits saturate."""
    _check_table(table)
    if int_width > 3:
        return [127 if v > 0 else 0 if v == 0 else -128 for v in values]
    return _lookup(values, int_width, table)


def relu(values: Iterable[int]) -> list[int]:
    """Replace negative values with zero."""
    return [v if v >= 0 else 0 for v in values]


def leaky_relu(values: Iterable[int], alpha: int) -> list[int]:
    """Scale negative values by ``alpha`` given in q0.7."""
    return [wrap(c_div(v * alpha, 128), 8) if v < 0 else v for v in values]


def adv_relu(
    values: Iterable[int], negative_slope: int, max_value: int, threshold: int
) -> list[int]:
    """ReLU with an upper clip, a threshold and a q0.7 slope below the threshold."""
    result = []
    for v in values:
        if v > max_value:
            v = max_value
        if v < threshold:
            v = wrap(c_div((v - threshold) * negative_slope, 128), 8)
        result.append(v)
    return result