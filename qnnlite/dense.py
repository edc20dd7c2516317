"""Dot products and fully connected layers on q7 vectors."""

from __future__ import annotations

from collections.abc import Sequence

from .qmath import round_half, ssat, wrap

# Position of (column, row) inside each 16-value block of the interleaved layout.
_BLOCK_OFFSETS = (
    (0, 1, 4, 5),
    (8, 9, 12, 13),
    (2, 3, 6, 7),
    (10, 11, 14, 15),
)


def _check(vector: Sequence[int], matrix: Sequence[int], rows: int) -> None:
    if rows < 0:
        raise ValueError(f"rows must not be negative, got {rows}")
    expected = rows * len(vector)
    if len(matrix) != expected:
        raise ValueError(f"expected {expected} matrix values, got {len(matrix)}")


def _check_bias(bias: Sequence[int] | None, rows: int, bias_shift: int) -> None:
    if bias is None:
        return
    if len(bias) < rows:
        raise ValueError(f"bias needs at least {rows} entries, got {len(bias)}")
    if bias_shift < 0:
        raise ValueError(f"bias_shift must not be negative, got {bias_shift}")


def _narrow(acc: int, out_shift: int) -> int:
    return ssat(wrap(acc, 32) >> out_shift, 8)


def _row_major(
    vector: Sequence[int], matrix: Sequence[int], starts: Sequence[int], out_shift: int
) -> list[int]:
    dim = len(vector)
    return [
        _narrow(
            start + sum(a * b for a, b in zip(vector, matrix[i * dim:(i + 1) * dim])),
            out_shift,
        )
        for i, start in enumerate(starts)
    ]


def _interleaved(
    vector: Sequence[int],
    matrix: Sequence[int],
    rows: int,
    group_starts: Sequence[int],
    tail_starts: Sequence[int],
    out_shift: int,
) -> list[int]:
    dim = len(vector)
    groups = rows // 4
    full_cols = dim - dim % 4
    out: list[int] = []
    pos = 0
    for g in range(groups):
        sums = list(group_starts[4 * g:4 * g + 4])
        for col in range(0, full_cols, 4):
            block = matrix[pos:pos + 16]
            for c, offsets in enumerate(_BLOCK_OFFSETS):
                a = vector[col + c]
                for r, offset in enumerate(offsets):
                    sums[r] += a * block[offset]
            pos += 16
        for a in vector[full_cols:]:
            for r in range(4):
                sums[r] += a * matrix[pos + r]
            pos += 4
        out.extend(_narrow(s, out_shift) for s in sums)
    for start in tail_starts:
        row = matrix[pos:pos + dim]
        out.append(_narrow(start + sum(a * b for a, b in zip(vector, row)), out_shift))
        pos += dim
    return out


def dot(
    vector: Sequence[int], matrix: Sequence[int], rows: int, out_shift: int = 0
) -> list[int]:
    """Multiply a row-major ``rows`` by ``len(vector)`` matrix with a vector."""
    _check(vector, matrix, rows)
    return _row_major(vector, matrix, [round_half(out_shift)] * rows, out_shift)


def dot_interleaved(
    vector: Sequence[int], matrix: Sequence[int], rows: int, out_shift: int = 0
) -> list[int]:
    """Matrix-vector product with the matrix in four-row interleaved order."""
    _check(vector, matrix, rows)
    start = round_half(out_shift)
    groups = rows // 4
    return _interleaved(
        vector, matrix, rows, [start] * (4 * groups), [start] * (rows % 4), out_shift
    )


def fully_connected(
    vector: Sequence[int],
    matrix: Sequence[int],
    rows: int,
    bias: Sequence[int] | None = None,
    bias_shift: int = 0,
    out_shift: int = 0,
) -> list[int]:
    """Row-major fully connected layer with an optional left-shifted bias."""
    _check(vector, matrix, rows)
    _check_bias(bias, rows, bias_shift)
    rounding = round_half(out_shift)
    if bias is None:
        starts = [rounding] * rows
    else:
        starts = [(b << bias_shift) + rounding for b in bias[:rows]]
    return _row_major(vector, matrix, starts, out_shift)


def fully_connected_interleaved(
    vector: Sequence[int],
    matrix: Sequence[int],
    rows: int,
    bias: Sequence[int] | None = None,
    bias_shift: int = 0,
    out_shift: int = 0,
) -> list[int]:
    """Fully connected layer with the matrix in four-row interleaved order.

    Rows left over after the groups of four take their bias from the start
    of ``bias`` again.
    """
    _check(vector, matrix, rows)
    _check_bias(bias, rows, bias_shift)
    rounding = round_half(out_shift)
    groups = rows // 4
    if bias is None:
        group_starts = [rounding] * (4 * groups)
        tail_starts = [rounding] * (rows % 4)
    else:
        group_starts = [(b << bias_shift) + rounding for b in bias[:4 * groups]]
        tail_starts = [(b << bias_shift) + rounding for b in bias[:rows % 4]]
    return _interleaved(vector, matrix, rows, group_starts, tail_starts, out_shift)