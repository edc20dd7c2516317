"""Two-dimensional convolutions on q7 feature maps."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .qmath import c_div, round_half, ssat, wrap
from .shapes import Layout

ShiftSpec = int | Sequence[int]


@dataclass(frozen=True)
class ConvGeometry:
    """Sizes, strides, padding and dilation of a convolution."""

    in_w: int
    in_h: int
    in_ch: int
    out_ch: int
    kernel_w: int
    kernel_h: int
    out_w: int
    out_h: int
    stride_w: int = 1
    stride_h: int = 1
    pad_w: int = 0
    pad_h: int = 0
    dilation_w: int = 1
    dilation_h: int = 1

    def __post_init__(self) -> None:
        for name in ("in_w", "in_h", "in_ch", "out_ch", "kernel_w", "kernel_h",
                     "out_w", "out_h", "pad_w", "pad_h"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        for name in ("stride_w", "stride_h", "dilation_w", "dilation_h"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be positive")

    @property
    def input_size(self) -> int:
        return self.in_w * self.in_h * self.in_ch

    @property
    def output_size(self) -> int:
        return self.out_w * self.out_h * self.out_ch


def _shift_table(value: ShiftSpec, name: str, needed: int) -> tuple[int, ...]:
    table = (value,) if isinstance(value, int) else tuple(value)
    if len(table) < max(needed, 1):
        raise ValueError(f"{name} needs at least {max(needed, 1)} entries")
    if any(s < 0 for s in table):
        raise ValueError(f"{name} must not hold negative shifts")
    return table


def _check_sizes(
    image: Sequence[int], weights: Sequence[int], expected_weights: int,
    geometry: ConvGeometry,
) -> None:
    if len(image) != geometry.input_size:
        raise ValueError(
            f"expected {geometry.input_size} input values, got {len(image)}"
        )
    if len(weights) != expected_weights:
        raise ValueError(f"expected {expected_weights} weights, got {len(weights)}")


def _check_bias(bias: Sequence[int] | None, count: int) -> None:
    if bias is not None and len(bias) < count:
        raise ValueError(f"bias needs at least {count} entries, got {len(bias)}")


def _initial(bias: Sequence[int] | None, index: int, bias_shift: int, out_shift: int) -> int:
    if bias is None:
        return round_half(out_shift)
    return (bias[index] << bias_shift) + round_half(out_shift)


def _kernel_range(base: int, dilation: int, kernel: int, size: int) -> range:
    """Kernel taps whose dilated position falls inside the input."""
    start = max(0, c_div(-(base - (dilation - 1)), dilation))
    end = min(kernel, c_div(size - base + (dilation - 1), dilation))
    return range(start, end)


def conv2d(
    image: Sequence[int],
    weights: Sequence[int],
    geometry: ConvGeometry,
    bias: Sequence[int] | None = None,
    bias_shift: ShiftSpec = 0,
    out_shift: ShiftSpec = 0,
    per_axis: bool = False,
    layout: Layout = Layout.HWC,
) -> list[int]:
    """Standard convolution with optional per-channel quantisation shifts."""
    g = geometry
    _check_sizes(image, weights, g.in_ch * g.kernel_h * g.kernel_w * g.out_ch, g)
    _check_bias(bias, g.out_ch)
    needed = g.out_ch if per_axis else 1
    bshift = _shift_table(bias_shift, "bias_shift", needed)
    oshift = _shift_table(out_shift, "out_shift", needed)
    out = [0] * g.output_size
    plane_in = g.in_w * g.in_h
    plane_out = g.out_w * g.out_h

    for i in range(g.out_ch):
        s = i if per_axis else 0
        for j in range(g.out_h):
            base_y = g.stride_h * j - g.pad_h
            for k in range(g.out_w):
                base_x = g.stride_w * k - g.pad_w
                acc = _initial(bias, i, bshift[s], oshift[s])
                if layout is Layout.HWC:
                    for m in _kernel_range(base_y, g.dilation_h, g.kernel_h, g.in_h):
                        in_row = base_y + m * g.dilation_h
                        for n in _kernel_range(base_x, g.dilation_w, g.kernel_w, g.in_w):
                            in_col = base_x + n * g.dilation_w
                            pix = (in_row * g.in_w + in_col) * g.in_ch
                            wt = (i * g.in_ch * g.kernel_h * g.kernel_w
                                  + (m * g.kernel_w + n) * g.in_ch)
                            acc += sum(
                                a * b for a, b in zip(
                                    image[pix:pix + g.in_ch], weights[wt:wt + g.in_ch]
                                )
                            )
                    value = wrap(acc, 32)
                    out[i + (j * g.out_w + k) * g.out_ch] = ssat(value >> oshift[s], 8)
                else:
                    for m in range(g.kernel_h):
                        in_row = base_y + m * g.dilation_h
                        if not 0 <= in_row < g.in_h:
                            continue
                        for n in range(g.kernel_w):
                            in_col = base_x + n * g.dilation_w
                            if not 0 <= in_col < g.in_w:
                                continue
                            pix = in_row * g.in_w + in_col
                            wt = (m * g.kernel_w + n) * g.in_ch * g.out_ch + i
                            pixels = image[pix:pix + g.in_ch * plane_in:plane_in]
                            taps = weights[wt:wt + g.in_ch * g.out_ch:g.out_ch]
                            acc += sum(a * b for a, b in zip(pixels, taps))
                    value = wrap(acc, 64)
                    out[i * plane_out + j * g.out_w + k] = ssat(value >> oshift[s], 8)
    return out


def _deconv_position(
    pos: int, stride: int, padding: int, dim_kernel: int, dim_in: int
) -> tuple[bool, int, int, int]:
    """Return (no contribution, first input index, first kernel tap, last kernel tap)."""
    in_start = c_div(pos, stride)
    of = pos % stride
    kernel_start = padding - of
    if kernel_start >= 0:
        adj = min(in_start, c_div(kernel_start, stride))
        kernel_start -= adj * stride
        in_start -= adj
    else:
        adj = -kernel_start + dim_kernel
        if adj <= stride:
            return True, in_start, kernel_start, kernel_start
        adj = min(dim_in - 1 - in_start, c_div(adj, stride))
        kernel_start += adj * stride
        in_start += adj
    of = dim_kernel - 1 - kernel_start
    adj = min(dim_in - 1 - in_start, c_div(of, stride))
    return False, in_start, kernel_start, kernel_start + adj * stride


def conv2d_transpose(
    image: Sequence[int],
    weights: Sequence[int],
    geometry: ConvGeometry,
    bias: Sequence[int] | None = None,
    bias_shift: int = 0,
    out_shift: int = 0,
) -> list[int]:
    """Transposed convolution on HWC data; a missing bias counts as zeros."""
    g = geometry
    _check_sizes(image, weights, g.in_ch * g.kernel_h * g.kernel_w * g.out_ch, g)
    _check_bias(bias, g.out_ch)
    if bias_shift < 0 or out_shift < 0:
        raise ValueError("shifts must not be negative")
    biases = list(bias) if bias is not None else [0] * g.out_ch
    out = [0] * g.output_size
    kernel_plane = g.in_ch * g.kernel_h * g.kernel_w

    for i in range(g.out_ch):
        start = (biases[i] << bias_shift) + round_half(out_shift)
        for j in range(g.out_h):
            row_zero, in_row_start, ky_start, ky_end = _deconv_position(
                j, g.stride_h, g.pad_h, g.kernel_h, g.in_h
            )
            if row_zero:
                value = ssat(wrap(start, 32) >> out_shift, 8)
                for k in range(g.out_w):
                    out[i + (j * g.out_w + k) * g.out_ch] = value
                continue
            for k in range(g.out_w):
                acc = start
                col_zero, in_col_start, kx_start, kx_end = _deconv_position(
                    k, g.stride_w, g.pad_w, g.kernel_w, g.in_w
                )
                if col_zero:
                    # The bias term is stored without the output shift here.
                    out[i + (j * g.out_w + k) * g.out_ch] = wrap(acc, 8)
                    continue
                for dy, m in enumerate(range(ky_start, ky_end + 1, g.stride_h)):
                    in_row = in_row_start + dy
                    if not (0 <= in_row < g.in_h and 0 <= m < g.kernel_h):
                        continue
                    for dx, n in enumerate(range(kx_start, kx_end + 1, g.stride_w)):
                        in_col = in_col_start + dx
                        if not (0 <= in_col < g.in_w and 0 <= n < g.kernel_w):
                            continue
                        pix = (in_row * g.in_w + in_col) * g.in_ch
                        wt = i * kernel_plane + (m * g.kernel_w + n) * g.in_ch
                        acc += sum(
                            a * b for a, b in zip(
                                image[pix:pix + g.in_ch], weights[wt:wt + g.in_ch]
                            )
                        )
                out[i + (j * g.out_w + k) * g.out_ch] = ssat(wrap(acc, 32) >> out_shift, 8)
    return out


def depthwise_conv2d(
    image: Sequence[int],
    weights: Sequence[int],
    geometry: ConvGeometry,
    bias: Sequence[int] | None = None,
    bias_shift: ShiftSpec = 0,
    out_shift: ShiftSpec = 0,
    per_axis: bool = False,
    layout: Layout = Layout.HWC,
) -> list[int]:
    """Depthwise convolution; each input channel feeds ``out_ch // in_ch`` outputs."""
    g = geometry
    if g.in_ch == 0 or g.out_ch % g.in_ch:
        raise ValueError("out_ch must be a multiple of in_ch")
    ch_mult = g.out_ch // g.in_ch
    _check_sizes(image, weights, g.kernel_h * g.kernel_w * g.out_ch, g)
    _check_bias(bias, g.out_ch)
    needed = g.out_ch if per_axis else 1
    bshift = _shift_table(bias_shift, "bias_shift", needed)
    oshift = _shift_table(out_shift, "out_shift", needed)
    out = [0] * g.output_size
    plane_in = g.in_w * g.in_h
    plane_out = g.out_w * g.out_h

    for oy in range(g.out_h):
        base_y = g.stride_h * oy - g.pad_h
        ys = _kernel_range(base_y, g.dilation_h, g.kernel_h, g.in_h)
        for ox in range(g.out_w):
            base_x = g.stride_w * ox - g.pad_w
            xs = _kernel_range(base_x, g.dilation_w, g.kernel_w, g.in_w)
            for ch_in in range(g.in_ch):
                for mult in range(ch_mult):
                    ch_out = mult + ch_in * ch_mult
                    s = ch_out if per_axis else 0
                    acc = _initial(bias, ch_out, bshift[s], oshift[s])
                    for ky in ys:
                        idx_y = base_y + ky * g.dilation_h
                        for kx in xs:
                            idx_x = base_x + kx * g.dilation_w
                            tap = (ky * g.kernel_w + kx) * g.out_ch + ch_out
                            if layout is Layout.HWC:
                                pix = (idx_y * g.in_w + idx_x) * g.in_ch + ch_in
                            else:
                                pix = idx_y * g.in_w + idx_x + ch_in * plane_in
                            acc += image[pix] * weights[tap]
                    value = ssat(wrap(acc, 32) >> oshift[s], 8)
                    if layout is Layout.HWC:
                        out[(oy * g.out_w + ox) * g.out_ch + ch_out] = value
                    else:
                        out[ch_out * plane_out + oy * g.out_w + ox] = value
    return out