# qnnlite

Integer-only neural network inference in pure Python. Tensor values are
plain Python integers in signed 8-bit (Q7) fixed-point form. Each tensor
records how many of its bits are fractional (`q_dec`). Every kernel
saturates or wraps its result the way 8- and 32-bit integer hardware
arithmetic would.

## Installing

```
pip install .
```

The package has no runtime dependencies. To run the tests:

```
pip install ".[test]"
pytest
```

## Kernels

The kernels are stateless functions over flat lists of integers. They
return new lists and never change their inputs. When the arguments do not
fit together, for example when sizes do not match or a shift is negative,
they raise `ValueError`.

- `qnnlite.qmath` provides the basic fixed-point operations:
  - `ssat`, `usat` and `wrap` saturate or wrap a value to a bit width.
  - `round_half` gives the rounding offset for a right shift.
  - `c_div` divides and truncates toward zero.
  - `add`, `sub` and `mult` work element-wise on two operands.
  - `multiple_add`, `multiple_sub` and `multiple_mult` take any number of
    operands.
  - `q7_to_q15`, `q7_to_q15_no_shift` and `q15_to_q7` convert between widths.
- `qnnlite.activations` provides `softmax`, `sigmoid`, `tanh`,
  `hard_sigmoid`, `hard_tanh`, `relu`, `leaky_relu` and `adv_relu`.
  `sigmoid` and `tanh` take a 256-entry lookup table from the caller.
- `qnnlite.pooling` provides `maxpool`, `avgpool` and `sumpool`. A
  `PoolWindow` describes the input size, the window, the stride, the
  padding and the output size.
- `qnnlite.padding` provides `zero_padding`, `cropping` and `up_sampling`.
  The sides are given by a `Border`.
- `qnnlite.convolution` provides `conv2d`, `depthwise_conv2d` and
  `conv2d_transpose`. A `ConvGeometry` describes the sizes, strides,
  padding and dilation. `conv2d` and `depthwise_conv2d` accept per-channel
  shifts when `per_axis=True`. `conv2d_transpose` works on HWC data only.
- `qnnlite.dense` provides `dot` and `fully_connected` for a row-major
  matrix, and `dot_interleaved` and `fully_connected_interleaved` for a
  matrix stored in four-row interleaved order.

Feature maps are laid out as HWC or CHW. You choose the layout with
`qnnlite.shapes.Layout`; the default is HWC.

```python
from qnnlite import qmath, activations

qmath.ssat(300, 8)                      # 127
qmath.add([100, -20], [100, 5], 1)      # element-wise, shifted and saturated
activations.relu([-3, 4, -1])           # [0, 4, 0]
activations.softmax([4, 12, 40, 7])     # [0, 0, 127, 0]
```

## Layers

Layers form a small graph:

- `qnnlite.graph` holds `Tensor`, `LayerIO`, the base `Layer` and
  `LayerType`.
- `qnnlite.layers` holds `InputLayer`, `OutputLayer`, `LambdaLayer`,
  `ReshapeLayer` and `SoftmaxLayer`.
- `qnnlite.matrix_layers` holds `MatrixLayer`, which applies a `MatrixOp`
  (ADD, SUB or MULT) across two or more inputs.
- `qnnlite.pool_layers` holds `MaxPoolLayer`, which takes a `Padding` of
  VALID or SAME.
- `qnnlite.rnn` holds `RNNLayer`, which drives a `SimpleCell` that uses a
  sigmoid or tanh `CellActivation`.

Shapes are made with `qnnlite.shapes`:

- `shape(h, w, c)`
- `kernel(h, w)`
- `stride(h, w)`
- `dilation(h, w)`
- `border(top, bottom, left, right)`

To use the graph:

1. Call `layer.connect(previous)` to link the layers. Calling it again on
   the same layer adds a further input, which a `MatrixLayer` uses.
2. Build every layer. `build()` works out the output tensor's shape and
   Q format.
3. Run every layer. `run()` computes the output values.

Running or building a layer before its inputs are built raises
`RuntimeError`.

```python
from qnnlite.shapes import shape
from qnnlite.layers import InputLayer, SoftmaxLayer, OutputLayer

data = [4, 12, 40, 7]
result = [0] * 4

inp = InputLayer(shape(1, 1, 4), data)
soft = SoftmaxLayer().connect(inp)
out = OutputLayer(shape(1, 1, 4), result).connect(soft)

for layer in (inp, soft, out):
    layer.build()
for layer in (inp, soft, out):
    layer.run()

print(result)   # [0, 0, 127, 0]
```

`OutputLayer` copies its result into the buffer you pass in.

## What the package does not do

- There are no 16-bit (Q15) versions of the pooling, convolution, dense or
  activation kernels. Only conversion to and from Q15 is provided.
- There is no LSTM cell. `SimpleCell` is the only recurrent cell.
- No sigmoid or tanh lookup tables are included. You must supply them.
- There is no loader for trained models or weight files. You set up the
  weights and graph in code.
- There is no command-line program.