"""Max pooling layer."""

from __future__ import annotations

from enum import Enum

from .graph import Layer, LayerType, Tensor
from .pooling import PoolWindow, maxpool
from .shapes import Layout, Shape3D


class Padding(Enum):
    """How a pooling window treats the edges of the input."""

    VALID = "valid"
    SAME = "same"


def _ceil_div(value: int, divisor: int) -> int:
    return (value + divisor - 1) // divisor


class MaxPoolLayer(Layer):
    """Max pooling over the height and width of a three-dimensional tensor."""

    def __init__(
        self,
        kernel: Shape3D,
        stride: Shape3D,
        padding: Padding = Padding.VALID,
        layout: Layout = Layout.HWC,
    ) -> None:
        super().__init__(LayerType.MAXPOOL)
        if kernel.h < 1 or kernel.w < 1:
            raise ValueError("kernel height and width must be positive")
        if stride.h < 1 or stride.w < 1:
            raise ValueError("stride height and width must be positive")
        self.kernel = kernel
        self.stride = stride
        self.padding = padding
        self.layout = layout
        if padding is Padding.SAME:
            # The channel field carries no meaning for the padding.
            self.pad = Shape3D((kernel.h - 1) // 2, (kernel.w - 1) // 2, 1)
        else:
            self.pad = Shape3D(0, 0, 0)

    def build(self) -> None:
        source = self._attach_inputs()
        if source.num_dim != 3:
            raise ValueError(
                f"max pooling needs a three-dimensional input, got {source.dims}"
            )
        h, w, c = source.dims
        if self.padding is Padding.SAME:
            out_h = _ceil_div(h, self.stride.h)
            out_w = _ceil_div(w, self.stride.w)
        else:
            if h < self.kernel.h or w < self.kernel.w:
                raise ValueError("kernel is larger than the input")
            out_h = _ceil_div(h - self.kernel.h + 1, self.stride.h)
            out_w = _ceil_div(w - self.kernel.w + 1, self.stride.w)
        self.out_io.tensor = Tensor(
            dims=[out_h, out_w, c],
            q_dec=list(source.q_dec),
            q_offset=list(source.q_offset),
            bitwidth=source.bitwidth,
        )

    def run(self) -> None:
        out = self._require_built()
        source = self.in_io.tensor
        assert source is not None
        h, w, c = source.dims
        window = PoolWindow(
            in_w=w,
            in_h=h,
            channels=c,
            kernel_w=self.kernel.w,
            kernel_h=self.kernel.h,
            out_w=out.dims[1],
            out_h=out.dims[0],
            stride_w=self.stride.w,
            stride_h=self.stride.h,
            pad_w=self.pad.w,
            pad_h=self.pad.h,
        )
        out.data = maxpool(source.data, window, self.layout)