"""Element-wise add, subtract and multiply layers over several inputs."""

from __future__ import annotations

from enum import Enum

from . import qmath
from .graph import Layer, LayerType


class MatrixOp(Enum):
    """Element-wise operation of a matrix layer."""

    ADD = "add"
    SUB = "sub"
    MULT = "mult"


_LAYER_TYPES = {
    MatrixOp.ADD: LayerType.ADD,
    MatrixOp.SUB: LayerType.SUB,
    MatrixOp.MULT: LayerType.MULT,
}

_PAIRWISE = {
    MatrixOp.ADD: qmath.add,
    MatrixOp.SUB: qmath.sub,
    MatrixOp.MULT: qmath.mult,
}

_MULTIPLE = {
    MatrixOp.ADD: qmath.multiple_add,
    MatrixOp.SUB: qmath.multiple_sub,
    MatrixOp.MULT: qmath.multiple_mult,
}


class MatrixLayer(Layer):
    """Combines equally shaped inputs element by element.

    Further inputs are added with :meth:`connect`; subtraction takes every
    later input away from the first one.
    """

    def __init__(self, op: MatrixOp, output_shift: int = 0) -> None:
        if output_shift < 0:
            raise ValueError(f"output_shift must not be negative, got {output_shift}")
        super().__init__(_LAYER_TYPES[op])
        self.op = op
        self.output_shift = output_shift

    def build(self) -> None:
        first = self._attach_inputs()
        self.out_io.tensor = first.like()

    def run(self) -> None:
        out = self._require_built()
        size = out.size
        sources = [io.tensor.data[:size] for io in self._input_ios()]
        if len(sources) == 2:
            out.data = _PAIRWISE[self.op](sources[0], sources[1], self.output_shift)
        else:
            out.data = _MULTIPLE[self.op](sources, self.output_shift)