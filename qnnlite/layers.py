"""Input, output, lambda, reshape and softmax layers."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from math import prod
from typing import Any

from .activations import softmax
from .graph import Layer, LayerType, Tensor
from .shapes import Shape3D, shape

LayerCallback = Callable[[Layer], None]


def _expand_to_3d(tensor: Tensor) -> Shape3D:
    dims = tensor.dims
    if tensor.num_dim == 1:
        return shape(1, 1, dims[0])
    if tensor.num_dim == 2:
        return shape(1, dims[0], dims[1])
    if tensor.num_dim >= 3:
        return shape(dims[0], dims[1], dims[2])
    raise ValueError("tensor must have at least one dimension")


class InputLayer(Layer):
    """Feeds values from a user buffer into the network as an HWC tensor."""

    def __init__(
        self, input_shape: Shape3D, buffer: Sequence[int], dec_bit: int = 7
    ) -> None:
        super().__init__(LayerType.INPUT)
        self.shape = input_shape
        self.buffer = buffer
        self.dec_bit = dec_bit
        self.in_io.tensor = Tensor(
            dims=[input_shape.h, input_shape.w, input_shape.c],
            q_dec=[dec_bit],
            q_offset=[0],
            bitwidth=8,
        )

    @classmethod
    def from_tensor(cls, tensor: Tensor) -> InputLayer:
        """Input whose shape, format and buffer come from ``tensor``.

        One- and two-dimensional tensors are expanded to height 1 (and width 1).
        """
        return cls(_expand_to_3d(tensor), tensor.data, tensor.q_dec[0])

    def build(self) -> None:
        assert self.in_io.tensor is not None
        self.out_io.tensor = self.in_io.tensor.like()

    def run(self) -> None:
        out = self._require_built()
        size = out.size
        if len(self.buffer) < size:
            raise ValueError(
                f"input buffer holds {len(self.buffer)} values, {size} needed"
            )
        values = list(self.buffer[:size])
        assert self.in_io.tensor is not None
        self.in_io.tensor.data = values
        out.data = values


class OutputLayer(Layer):
    """Copies the values that reach it into a user buffer."""

    def __init__(self, output_shape: Shape3D, buffer: list[int] | None = None) -> None:
        super().__init__(LayerType.OUTPUT)
        self.shape = output_shape
        self.buffer = buffer if buffer is not None else [0] * output_shape.size
        self.dec_bit = 7

    @classmethod
    def from_tensor(cls, tensor: Tensor) -> OutputLayer:
        """Output writing into the data of ``tensor``."""
        layer = cls(_expand_to_3d(tensor), tensor.data)
        layer.dec_bit = tensor.q_dec[0]
        return layer

    def build(self) -> None:
        super().build()

    def run(self) -> None:
        out = self._require_built()
        size = out.size
        if len(self.buffer) < size:
            raise ValueError(
                f"output buffer holds {len(self.buffer)} values, {size} needed"
            )
        assert self.in_io.tensor is not None
        values = list(self.in_io.tensor.data[:size])
        self.buffer[:size] = values
        out.data = values


class LambdaLayer(Layer):
    """Layer whose build and run steps are supplied by the caller.

    Without a build function the output takes the input's shape; without a
    run function the input is copied to the output.
    """

    def __init__(
        self,
        run: LayerCallback | None = None,
        build: LayerCallback | None = None,
        free: LayerCallback | None = None,
        parameters: Any = None,
    ) -> None:
        super().__init__(LayerType.LAMBDA)
        self.run_func = run
        self.build_func = build
        self.free_func = free
        self.parameters = parameters

    def build(self) -> None:
        if self.build_func is None:
            super().build()
        else:
            self.build_func(self)

    def run(self) -> None:
        if self.run_func is None:
            super().run()
        else:
            self.run_func(self)


class ReshapeLayer(Layer):
    """Gives the input values new dimensions without changing them."""

    def __init__(self, dims: Sequence[int]) -> None:
        super().__init__(LayerType.RESHAPE)
        if not dims:
            raise ValueError("reshape needs at least one dimension")
        self.dims = list(dims)

    def build(self) -> None:
        source = self._attach_inputs()
        if prod(self.dims) != source.size:
            raise ValueError(
                f"cannot reshape {source.size} elements to {self.dims}"
            )
        self.out_io.tensor = Tensor(
            dims=list(self.dims),
            q_dec=list(source.q_dec),
            q_offset=list(source.q_offset),
            bitwidth=8,
        )

    def run(self) -> None:
        out = self._require_built()
        assert self.in_io.tensor is not None
        out.data = list(self.in_io.tensor.data[: out.size])


class SoftmaxLayer(Layer):
    """Softmax over all input values; the output is always q0.7."""

    def __init__(self) -> None:
        super().__init__(LayerType.SOFTMAX)

    def build(self) -> None:
        source = self._attach_inputs()
        out = source.like()
        out.q_dec[0] = 7
        self.out_io.tensor = out

    def run(self) -> None:
        out = self._require_built()
        assert self.in_io.tensor is not None
        out.data = softmax(self.in_io.tensor.data[: out.size])