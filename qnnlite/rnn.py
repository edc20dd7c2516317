"""Recurrent layer and the simple recurrent cell."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Protocol

from . import activations, qmath
from .dense import dot_interleaved, fully_connected_interleaved
from .graph import Layer, LayerType, Tensor

_TABLE_SIZE = 256


class CellActivation(Enum):
    """Activation applied by a recurrent cell."""

    SIGMOID = "sigmoid"
    TANH = "tanh"
    RELU = "relu"


class _Cell(Protocol):
    units: int
    state_size: int
    macc: int

    def build(self, input_dec: int, feature_size: int) -> None: ...

    def step(
        self, inputs: Sequence[int], state: Sequence[int]
    ) -> tuple[list[int], list[int]]: ...


class SimpleCell:
    """Fully connected recurrent cell: act(W x + b + R h).

    The weight matrices are in four-row interleaved order. Only sigmoid and
    tanh activations are supported; ``lookup_table`` holds the 256 q7 values
    of the chosen activation.
    """

    def __init__(
        self,
        units: int,
        weights: Tensor,
        recurrent_weights: Tensor,
        bias: Tensor,
        activation: CellActivation,
        lookup_table: Sequence[int],
        q_dec_iw: int,
        q_dec_hw: int,
        q_dec_h: int,
    ) -> None:
        if units < 1:
            raise ValueError(f"units must be positive, got {units}")
        if len(lookup_table) != _TABLE_SIZE:
            raise ValueError(
                f"lookup table must have {_TABLE_SIZE} entries, got {len(lookup_table)}"
            )
        self.units = units
        self.weights = weights
        self.recurrent_weights = recurrent_weights
        self.bias = bias
        self.activation = activation
        self.lookup_table = list(lookup_table)
        self.q_dec_iw = q_dec_iw
        self.q_dec_hw = q_dec_hw
        self.q_dec_h = q_dec_h
        self.feature_size = 0
        self.state_size = units
        self.macc = 0
        self.oshift_hw = 0
        self.oshift_iw = 0
        self.bias_shift = 0
        self._built = False

    def build(self, input_dec: int, feature_size: int) -> None:
        """Work out the shifts and sizes for inputs of the given format and width."""
        if self.activation not in (CellActivation.SIGMOID, CellActivation.TANH):
            raise ValueError(f"unsupported cell activation: {self.activation.name}")
        if feature_size < 1:
            raise ValueError(f"feature_size must be positive, got {feature_size}")
        if self.weights.size != self.units * feature_size:
            raise ValueError("weights do not match units and feature size")
        if self.recurrent_weights.size != self.units * self.units:
            raise ValueError("recurrent weights do not match the units")
        if self.bias.size < self.units:
            raise ValueError("bias is shorter than the number of units")

        # Both products are added, so they must share one q format.
        q_hw_iw = min(self.q_dec_hw, self.q_dec_iw)
        oshift_hw = self.q_dec_h + self.recurrent_weights.q_dec[0] - q_hw_iw
        oshift_iw = input_dec + self.weights.q_dec[0] - q_hw_iw
        bias_shift = input_dec + self.weights.q_dec[0] - self.bias.q_dec[0]
        if min(oshift_hw, oshift_iw, bias_shift) < 0:
            raise ValueError("the q formats give a negative shift")

        self.oshift_hw = oshift_hw
        self.oshift_iw = oshift_iw
        self.bias_shift = bias_shift
        self.feature_size = feature_size
        self.state_size = self.units
        self.macc = feature_size * self.units + self.units * self.units
        self._built = True

    def step(
        self, inputs: Sequence[int], state: Sequence[int]
    ) -> tuple[list[int], list[int]]:
        """Process one timestamp; return the output and the new state."""
        if not self._built:
            raise RuntimeError("cell is not built")
        if len(inputs) != self.feature_size:
            raise ValueError(
                f"expected {self.feature_size} input values, got {len(inputs)}"
            )
        if len(state) != self.units:
            raise ValueError(f"expected {self.units} state values, got {len(state)}")

        recurrent = dot_interleaved(
            state, self.recurrent_weights.data, self.units, self.oshift_hw
        )
        projected = fully_connected_interleaved(
            inputs,
            self.weights.data,
            self.units,
            self.bias.data,
            self.bias_shift,
            self.oshift_iw,
        )
        summed = qmath.add(projected, recurrent, 0)
        act_int_bit = 7 - min(self.q_dec_hw, self.q_dec_iw)
        if self.activation is CellActivation.TANH:
            output = activations.tanh(summed, act_int_bit, self.lookup_table)
        else:
            output = activations.sigmoid(summed, act_int_bit, self.lookup_table)
        return output, list(output)


class RNNLayer(Layer):
    """Runs a recurrent cell over the timestamps of its input."""

    def __init__(
        self,
        cell: _Cell,
        return_sequence: bool = False,
        stateful: bool = False,
        go_backwards: bool = False,
    ) -> None:
        super().__init__(LayerType.RNN)
        self.cell = cell
        self.return_sequence = return_sequence
        self.stateful = stateful
        self.go_backwards = go_backwards
        self.timestamp_size = 0
        self.macc = 0
        self._state: list[int] = []

    def build(self) -> None:
        source = self._attach_inputs()
        if source.num_dim < 2:
            raise ValueError("recurrent input needs timestamp and feature dimensions")
        self.timestamp_size = source.dims[1] if source.num_dim > 2 else source.dims[0]
        units = self.cell.units
        dims = [self.timestamp_size, units] if self.return_sequence else [units]
        self.cell.build(source.q_dec[0], source.num_channel)
        self.out_io.tensor = Tensor(
            dims=dims,
            q_dec=[15 if source.bitwidth == 16 else 7],
            bitwidth=source.bitwidth,
        )
        self._state = [0] * self.cell.state_size
        self.macc = self.cell.macc * self.timestamp_size

    def run(self) -> None:
        out = self._require_built()
        source = self.in_io.tensor
        assert source is not None
        steps = source.dims[-2]
        features = source.num_channel
        units = self.cell.units
        if self.return_sequence and steps != out.dims[0]:
            raise ValueError("timestamp count does not match the output tensor")

        state = list(self._state) if self.stateful else [0] * self.cell.state_size
        growth = units if self.return_sequence else 0
        data = list(out.data)
        for round_ in range(steps):
            index = steps - 1 - round_ if self.go_backwards else round_
            inputs = source.data[features * index:features * (index + 1)]
            output, state = self.cell.step(inputs, state)
            start = growth * index
            data[start:start + units] = output
        self._state = state
        out.data = data