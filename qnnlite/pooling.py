"""Average, max and sum pooling over q7 feature maps."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass

from .qmath import c_div, wrap
from .shapes import Layout

_EMPTY_MAX = -129


@dataclass(frozen=True)
class PoolWindow:
    """Geometry of a pooling operation: input, window, stride, padding, output."""

    in_w: int
    in_h: int
    channels: int
    kernel_w: int
    kernel_h: int
    out_w: int
    out_h: int
    stride_w: int = 1
    stride_h: int = 1
    pad_w: int = 0
    pad_h: int = 0

    def __post_init__(self) -> None:
        for name in ("in_w", "in_h", "channels", "kernel_w", "kernel_h",
                     "out_w", "out_h", "pad_w", "pad_h"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.stride_w < 1 or self.stride_h < 1:
            raise ValueError("strides must be positive")

    @property
    def input_size(self) -> int:
        return self.in_w * self.in_h * self.channels

    @property
    def output_size(self) -> int:
        return self.out_w * self.out_h * self.channels


def _index(layout: Layout, c: int, y: int, x: int, w: int, h: int, channels: int) -> int:
    if layout is Layout.HWC:
        return (y * w + x) * channels + c
    return c * w * h + y * w + x


def _windows(
    data: Sequence[int], window: PoolWindow, layout: Layout
) -> Iterator[tuple[int, list[int]]]:
    """Yield the output index and the in-bounds input values of every window."""
    if len(data) != window.input_size:
        raise ValueError(
            f"expected {window.input_size} input values, got {len(data)}"
        )
    for c in range(window.channels):
        for oy in range(window.out_h):
            y0 = oy * window.stride_h - window.pad_h
            ys = range(max(y0, 0), min(y0 + window.kernel_h, window.in_h))
            for ox in range(window.out_w):
                x0 = ox * window.stride_w - window.pad_w
                xs = range(max(x0, 0), min(x0 + window.kernel_w, window.in_w))
                values = [
                    data[_index(layout, c, y, x, window.in_w, window.in_h, window.channels)]
                    for y in ys
                    for x in xs
                ]
                out_index = _index(
                    layout, c, oy, ox, window.out_w, window.out_h, window.channels
                )
                yield out_index, values


def _pool(
    data: Sequence[int],
    window: PoolWindow,
    layout: Layout,
    reduce: Callable[[list[int]], int],
) -> list[int]:
    result = [0] * window.output_size
    for out_index, values in _windows(data, window, layout):
        result[out_index] = reduce(values)
    return result


def avgpool(
    data: Sequence[int],
    window: PoolWindow,
    output_shift: int = 0,
    layout: Layout = Layout.HWC,
) -> list[int]:
    """Average pooling; the divisor is the in-bounds count shifted right by ``output_shift``."""
    if output_shift < 0:
        raise ValueError(f"output_shift must not be negative, got {output_shift}")

    def average(values: list[int]) -> int:
        return wrap(c_div(sum(values), len(values) >> output_shift), 8)

    return _pool(data, window, layout, average)


def maxpool(
    data: Sequence[int], window: PoolWindow, layout: Layout = Layout.HWC
) -> list[int]:
    """Max pooling over the in-bounds part of each window."""
    return _pool(
        data, window, layout, lambda values: wrap(max(values, default=_EMPTY_MAX), 8)
    )


def sumpool(
    data: Sequence[int], window: PoolWindow, layout: Layout = Layout.HWC
) -> list[int]:
    """Sum pooling; results are kept as 32-bit sums without narrowing."""
    return _pool(data, window, layout, lambda values: wrap(sum(values), 32))