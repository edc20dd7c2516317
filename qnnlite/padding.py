"""Up-sampling, zero padding and cropping of feature maps."""

from __future__ import annotations

from collections.abc import Sequence

from .shapes import Border, Layout


def _check_input(data: Sequence[int], in_w: int, in_h: int, channels: int) -> None:
    expected = in_w * in_h * channels
    if len(data) != expected:
        raise ValueError(f"expected {expected} input values, got {len(data)}")


def _put(out: list[int], offset: int, values: Sequence[int]) -> None:
    end = offset + len(values)
    if end > len(out):
        raise ValueError("up-sampling kernel does not fit the output size")
    out[offset:end] = values


def up_sampling(
    data: Sequence[int],
    in_w: int,
    in_h: int,
    channels: int,
    kernel_w: int,
    kernel_h: int,
    out_w: int,
    out_h: int,
    layout: Layout = Layout.HWC,
) -> list[int]:
    """Repeat every input pixel over a ``kernel_w`` by ``kernel_h`` block."""
    _check_input(data, in_w, in_h, channels)
    out = [0] * (out_w * out_h * channels)
    block_rows = in_w * kernel_w * kernel_h
    if layout is Layout.HWC:
        row_stride = channels * in_w * kernel_w
        for iy in range(in_h):
            for ix in range(in_w):
                start = (iy * in_w + ix) * channels
                pixel = list(data[start:start + channels])
                base = (iy * block_rows + ix * kernel_h) * channels
                _put(out, base, pixel * kernel_w)
                first_row = out[base:base + channels * kernel_w]
                for i in range(1, kernel_h):
                    _put(out, base + i * row_stride, first_row)
    else:
        row_stride = in_w * kernel_w
        for c in range(channels):
            plane_in = c * in_w * in_h
            plane_out = c * out_w * out_h
            for iy in range(in_h):
                for ix in range(in_w):
                    value = data[plane_in + iy * in_w + ix]
                    base = plane_out + iy * block_rows + ix * kernel_h
                    _put(out, base, [value] * kernel_w)
                    first_row = out[base:base + kernel_w]
                    for i in range(1, kernel_h):
                        _put(out, base + i * row_stride, first_row)
    return out


def _check_border(
    small_w: int, small_h: int, large_w: int, large_h: int, pad: Border
) -> None:
    if small_w + pad.left + pad.right != large_w:
        raise ValueError("width does not match the border")
    if small_h + pad.top + pad.bottom != large_h:
        raise ValueError("height does not match the border")


def zero_padding(
    data: Sequence[int],
    in_w: int,
    in_h: int,
    channels: int,
    pad: Border,
    out_w: int,
    out_h: int,
    layout: Layout = Layout.HWC,
) -> list[int]:
    """Surround the feature map with zeros on each side given by ``pad``."""
    _check_input(data, in_w, in_h, channels)
    _check_border(in_w, in_h, out_w, out_h, pad)
    out: list[int] = []
    if layout is Layout.HWC:
        row = in_w * channels
        out.extend([0] * (out_w * channels * pad.top))
        for i in range(in_h):
            out.extend([0] * (channels * pad.left))
            out.extend(data[i * row:(i + 1) * row])
            out.extend([0] * (channels * pad.right))
        out.extend([0] * (out_w * channels * pad.bottom))
    else:
        for c in range(channels):
            plane = c * in_w * in_h
            out.extend([0] * (out_w * pad.top))
            for i in range(in_h):
                start = plane + i * in_w
                out.extend([0] * pad.left)
                out.extend(data[start:start + in_w])
                out.extend([0] * pad.right)
            out.extend([0] * (out_w * pad.bottom))
    return out


def cropping(
    data: Sequence[int],
    in_w: int,
    in_h: int,
    channels: int,
    pad: Border,
    out_w: int,
    out_h: int,
    layout: Layout = Layout.HWC,
) -> list[int]:
    """Remove the border given by ``pad`` from each side of the feature map."""
    _check_input(data, in_w, in_h, channels)
    _check_border(out_w, out_h, in_w, in_h, pad)
    out: list[int] = []
    if layout is Layout.HWC:
        row = in_w * channels
        for y in range(pad.top, pad.top + out_h):
            start = y * row + pad.left * channels
            out.extend(data[start:start + out_w * channels])
    else:
        for c in range(channels):
            plane = c * in_w * in_h
            for y in range(pad.top, pad.top + out_h):
                start = plane + y * in_w + pad.left
                out.extend(data[start:start + out_w])
    return out