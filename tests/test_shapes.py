import dataclasses

import pytest

from qnnlite.shapes import Border, Layout, Shape3D, border, dilation, kernel, shape, stride


def test_shape_fields_and_size():
    s = shape(3, 5, 7)
    assert (s.h, s.w, s.c) == (3, 5, 7)
    assert s.size == 3 * 5 * 7
    assert s.as_tuple() == (3, 5, 7)


def test_zero_dimension_gives_zero_size():
    assert shape(0, 5, 7).size == 0


@pytest.mark.parametrize("factory", [kernel, stride, dilation])
def test_two_dimensional_helpers_fix_channel_to_one(factory):
    s = factory(2, 9)
    assert s == Shape3D(2, 9, 1)
    assert s.size == 2 * 9


def test_border_fields():
    b = border(1, 2, 3, 4)
    assert b == Border(top=1, bottom=2, left=3, right=4)


def test_shape_is_immutable():
    s = shape(1, 2, 3)
    with pytest.raises(dataclasses.FrozenInstanceError):
        s.h = 4
    assert s.as_tuple() == (1, 2, 3)


@pytest.mark.parametrize("args", [(-1, 1, 1), (1, -1, 1), (1, 1, -1)])
def test_negative_shape_rejected(args):
    with pytest.raises(ValueError):
        shape(*args)


def test_negative_border_rejected():
    with pytest.raises(ValueError):
        border(0, 0, -2, 0)


def test_layouts_are_distinct():
    assert Layout("hwc") is Layout.HWC
    assert Layout("chw") is Layout.CHW