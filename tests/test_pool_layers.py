import pytest

from qnnlite.layers import InputLayer, ReshapeLayer
from qnnlite.pool_layers import MaxPoolLayer, Padding
from qnnlite.pooling import PoolWindow, maxpool
from qnnlite.shapes import Layout, kernel, shape, stride

DATA = list(range(-16, 16))


def _network(layer, data=DATA, dims=(4, 4, 2)):
    inp = InputLayer(shape(*dims), data)
    inp.build()
    layer.connect(inp)
    layer.build()
    inp.run()
    layer.run()
    return inp, layer


def test_same_padding_offsets():
    layer = MaxPoolLayer(kernel(3, 3), stride(1, 1), Padding.SAME)
    assert layer.pad == shape(1, 1, 1)


def test_valid_padding_has_no_offsets():
    layer = MaxPoolLayer(kernel(3, 3), stride(1, 1), Padding.VALID)
    assert layer.pad == shape(0, 0, 0)


def test_same_stride_two_dims():
    _, layer = _network(MaxPoolLayer(kernel(3, 3), stride(2, 2), Padding.SAME))
    assert layer.out_io.tensor.dims == [2, 2, 2]


def test_valid_dims():
    _, layer = _network(MaxPoolLayer(kernel(2, 2), stride(1, 1), Padding.VALID))
    assert layer.out_io.tensor.dims == [3, 3, 2]


def test_same_stride_one_keeps_dims():
    inp, layer = _network(MaxPoolLayer(kernel(3, 3), stride(1, 1), Padding.SAME))
    assert layer.out_io.tensor.dims == inp.out_io.tensor.dims


def test_kernel_one_is_identity():
    _, layer = _network(MaxPoolLayer(kernel(1, 1), stride(1, 1), Padding.VALID))
    assert layer.out_io.tensor.data == DATA


def test_format_copied_from_input():
    inp, layer = _network(MaxPoolLayer(kernel(2, 2), stride(2, 2)))
    assert layer.out_io.tensor.q_dec == inp.out_io.tensor.q_dec


def test_valid_run_matches_maxpool():
    _, layer = _network(MaxPoolLayer(kernel(2, 2), stride(2, 2), Padding.VALID))
    out = layer.out_io.tensor
    window = PoolWindow(
        in_w=4, in_h=4, channels=2, kernel_w=2, kernel_h=2,
        out_w=out.dims[1], out_h=out.dims[0], stride_w=2, stride_h=2,
    )
    assert out.data == maxpool(DATA, window)


def test_same_run_matches_maxpool():
    layer = MaxPoolLayer(kernel(3, 3), stride(2, 2), Padding.SAME)
    _network(layer)
    out = layer.out_io.tensor
    window = PoolWindow(
        in_w=4, in_h=4, channels=2, kernel_w=3, kernel_h=3,
        out_w=out.dims[1], out_h=out.dims[0], stride_w=2, stride_h=2,
        pad_w=layer.pad.w, pad_h=layer.pad.h,
    )
    assert out.data == maxpool(DATA, window)


def test_chw_run_matches_maxpool():
    layer = MaxPoolLayer(kernel(2, 2), stride(2, 2), Padding.VALID, Layout.CHW)
    _network(layer)
    out = layer.out_io.tensor
    window = PoolWindow(
        in_w=4, in_h=4, channels=2, kernel_w=2, kernel_h=2,
        out_w=out.dims[1], out_h=out.dims[0], stride_w=2, stride_h=2,
    )
    assert out.data == maxpool(DATA, window, Layout.CHW)


def test_outputs_never_exceed_input_max():
    _, layer = _network(MaxPoolLayer(kernel(2, 2), stride(1, 1)))
    assert max(layer.out_io.tensor.data) <= max(DATA)
    assert min(layer.out_io.tensor.data) >= min(DATA)


def test_run_before_build_raises():
    layer = MaxPoolLayer(kernel(2, 2), stride(2, 2))
    with pytest.raises(RuntimeError):
        layer.run()


def test_kernel_larger_than_input_raises():
    inp = InputLayer(shape(2, 2, 1), [0, 0, 0, 0])
    inp.build()
    layer = MaxPoolLayer(kernel(3, 3), stride(1, 1), Padding.VALID)
    layer.connect(inp)
    with pytest.raises(ValueError):
        layer.build()


def test_two_dimensional_input_raises():
    inp = InputLayer(shape(4, 4, 2), DATA)
    inp.build()
    reshape = ReshapeLayer([16, 2])
    reshape.connect(inp)
    reshape.build()
    layer = MaxPoolLayer(kernel(2, 2), stride(2, 2))
    layer.connect(reshape)
    with pytest.raises(ValueError):
        layer.build()


def test_zero_stride_raises():
    with pytest.raises(ValueError):
        MaxPoolLayer(kernel(2, 2), shape(0, 1, 1))