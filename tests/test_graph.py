import pytest

from qnnlite.graph import Layer, LayerIO, LayerType, Tensor


def _source(dims, data, q_dec=5):
    layer = Layer(LayerType.INPUT)
    layer.out_io.tensor = Tensor(dims, q_dec=[q_dec], data=data)
    return layer


def test_tensor_size_and_channels():
    t = Tensor([2, 3, 4])
    assert t.size == 24
    assert t.num_dim == 3
    assert t.num_channel == 4
    assert t.data == [0] * 24


def test_tensor_rejects_wrong_data_length():
    with pytest.raises(ValueError):
        Tensor([2, 2], data=[1, 2, 3])


def test_tensor_rejects_negative_dims():
    with pytest.raises(ValueError):
        Tensor([2, -1])


def test_tensor_like_copies_format_not_data():
    t = Tensor([2, 2], q_dec=[4], q_offset=[1], bitwidth=16, data=[1, 2, 3, 4])
    copy = t.like()
    assert copy.dims == t.dims
    assert copy.q_dec == [4]
    assert copy.q_offset == [1]
    assert copy.bitwidth == 16
    assert copy.data == [0, 0, 0, 0]
    copy.dims.append(9)
    assert t.dims == [2, 2]


def test_add_aux_creates_port_of_same_owner():
    layer = Layer(LayerType.ADD)
    aux = layer.in_io.add_aux()
    assert isinstance(aux, LayerIO)
    assert aux.owner is layer
    assert layer.in_io.aux is aux


def test_add_aux_twice_raises():
    layer = Layer(LayerType.ADD)
    layer.in_io.add_aux()
    with pytest.raises(ValueError):
        layer.in_io.add_aux()


def test_connect_fills_ports_in_order():
    a = _source([2], [1, 2])
    b = _source([2], [3, 4])
    c = _source([2], [5, 6])
    layer = Layer(LayerType.ADD)
    assert layer.connect(a) is layer
    layer.connect(b).connect(c)
    hooks = [io.hook for io in layer._input_ios()]
    assert hooks == [a.out_io, b.out_io, c.out_io]


def test_build_copies_upstream_format():
    src = _source([1, 2, 3], list(range(6)), q_dec=3)
    layer = Layer(LayerType.LAMBDA).connect(src)
    layer.build()
    assert layer.in_io.tensor is src.out_io.tensor
    assert layer.out_io.tensor.dims == [1, 2, 3]
    assert layer.out_io.tensor.q_dec == [3]
    assert layer.out_io.tensor is not src.out_io.tensor


def test_run_copies_input_values():
    src = _source([4], [-1, 2, -3, 4])
    layer = Layer(LayerType.LAMBDA).connect(src)
    layer.build()
    layer.run()
    assert layer.out_io.tensor.data == [-1, 2, -3, 4]


def test_build_without_connection_raises():
    with pytest.raises(RuntimeError):
        Layer(LayerType.LAMBDA).build()


def test_build_before_upstream_is_built_raises():
    upstream = Layer(LayerType.LAMBDA)
    layer = Layer(LayerType.LAMBDA).connect(upstream)
    with pytest.raises(RuntimeError):
        layer.build()


def test_run_before_build_raises():
    layer = Layer(LayerType.LAMBDA).connect(_source([1], [0]))
    with pytest.raises(RuntimeError):
        layer.run()