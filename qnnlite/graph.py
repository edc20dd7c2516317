"""Tensors, layer inputs and outputs, and the base layer of a network graph."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto
from math import prod


class LayerType(Enum):
    """Kind of a layer in the graph."""

    INPUT = auto()
    OUTPUT = auto()
    LAMBDA = auto()
    ADD = auto()
    SUB = auto()
    MULT = auto()
    SOFTMAX = auto()
    RESHAPE = auto()
    MAXPOOL = auto()
    RNN = auto()


@dataclass
class Tensor:
    """Quantised tensor: dimensions, fixed-point format and its values."""

    dims: list[int]
    q_dec: list[int] = field(default_factory=lambda: [0])
    q_offset: list[int] = field(default_factory=lambda: [0])
    bitwidth: int = 8
    data: list[int] | None = None

    def __post_init__(self) -> None:
        self.dims = list(self.dims)
        if any(d < 0 for d in self.dims):
            raise ValueError(f"dimensions must not be negative: {self.dims}")
        self.q_dec = list(self.q_dec)
        self.q_offset = list(self.q_offset)
        if self.data is None:
            self.data = [0] * self.size
        elif len(self.data) != self.size:
            raise ValueError(
                f"tensor of {self.size} elements given {len(self.data)} values"
            )

    @property
    def num_dim(self) -> int:
        return len(self.dims)

    @property
    def size(self) -> int:
        """Number of elements."""
        return prod(self.dims) if self.dims else 0

    @property
    def num_channel(self) -> int:
        """Size of the last dimension."""
        return self.dims[-1] if self.dims else 0

    def like(self) -> Tensor:
        """A zero-filled tensor with the same dimensions and format."""
        return Tensor(
            dims=list(self.dims),
            q_dec=list(self.q_dec),
            q_offset=list(self.q_offset),
            bitwidth=self.bitwidth,
        )


@dataclass(eq=False, repr=False)
class LayerIO:
    """One input or output port of a layer.

    ``hook`` points to the output port of the upstream layer; ``aux`` links
    further input ports of the same layer.
    """

    owner: Layer
    hook: LayerIO | None = None
    tensor: Tensor | None = None
    aux: LayerIO | None = None

    def add_aux(self) -> LayerIO:
        """Append a new port owned by the same layer and return it."""
        if self.aux is not None:
            raise ValueError("this port already has an auxiliary port")
        self.aux = LayerIO(self.owner)
        return self.aux

    def _chain(self) -> Iterator[LayerIO]:
        io: LayerIO | None = self
        while io is not None:
            yield io
            io = io.aux


class Layer:
    """Base layer: passes its input tensor through unchanged."""

    def __init__(self, layer_type: LayerType) -> None:
        self.type = layer_type
        self.in_io = LayerIO(self)
        self.out_io = LayerIO(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.type.name})"

    def connect(self, previous: Layer) -> Layer:
        """Feed the output of ``previous`` into the next free input port."""
        io = self.in_io
        while io.hook is not None:
            io = io.aux if io.aux is not None else io.add_aux()
        io.hook = previous.out_io
        return self

    def _input_ios(self) -> list[LayerIO]:
        return list(self.in_io._chain())

    def _attach_inputs(self) -> Tensor:
        """Take every input tensor from the upstream outputs; return the first."""
        for io in self._input_ios():
            if io.hook is None:
                raise RuntimeError(f"{self!r} has an unconnected input")
            if io.hook.tensor is None:
                raise RuntimeError(f"the layer feeding {self!r} is not built")
            io.tensor = io.hook.tensor
        assert self.in_io.tensor is not None
        return self.in_io.tensor

    def _require_built(self) -> Tensor:
        if self.in_io.tensor is None or self.out_io.tensor is None:
            raise RuntimeError(f"{self!r} is not built")
        return self.out_io.tensor

    def build(self) -> None:
        """Create the output tensor with the shape and format of the input."""
        source = self._attach_inputs()
        self.out_io.tensor = source.like()

    def run(self) -> None:
        """Copy the input values to the output."""
        out = self._require_built()
        assert self.in_io.tensor is not None
        out.data = list(self.in_io.tensor.data[: out.size])