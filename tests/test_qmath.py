import pytest

from qnnlite import qmath


def test_ssat_clamps_to_q7_bounds():
    assert qmath.ssat(1000, 8) == 127
    assert qmath.ssat(-1000, 8) == -128
    assert qmath.ssat(5, 8) == 5


def test_ssat_q15_bounds():
    assert qmath.ssat(10**6, 16) == 32767
    assert qmath.ssat(-(10**6), 16) == -32768


def test_ssat_rejects_zero_bits():
    with pytest.raises(ValueError):
        qmath.ssat(1, 0)


def test_usat_bounds():
    assert qmath.usat(-3, 5) == 0
    assert qmath.usat(100, 5) == 31
    assert qmath.usat(7, 5) == 7


def test_wrap_identity_in_range():
    assert [qmath.wrap(v, 8) for v in range(-128, 128)] == list(range(-128, 128))


def test_wrap_is_periodic():
    for v in range(-300, 300, 7):
        assert qmath.wrap(v + 256, 8) == qmath.wrap(v, 8)
    assert qmath.wrap(128, 8) == -128


def test_round_half():
    assert qmath.round_half(0) == 0
    for s in range(1, 12):
        assert qmath.round_half(s) * 2 == 1 << s


def test_round_half_negative_shift():
    with pytest.raises(ValueError):
        qmath.round_half(-1)


@pytest.mark.parametrize("a,b", [(7, 2), (-7, 2), (7, -2), (-7, -2), (0, 3)])
def test_c_div_truncates_toward_zero(a, b):
    q = qmath.c_div(a, b)
    assert abs(q) == abs(a) // abs(b)
    assert q == 0 or (q < 0) == ((a < 0) != (b < 0))


def test_c_div_by_zero():
    with pytest.raises(ZeroDivisionError):
        qmath.c_div(1, 0)


def test_add_saturates_and_commutes():
    a = [100, -100, 3, 0]
    b = [100, -100, -3, 9]
    assert qmath.add(a, b, 0) == qmath.add(b, a, 0)
    result = qmath.add(a, b, 0)
    assert result[:3] == [127, -128, 0]
    assert result[3] == 9


def test_sub_of_self_is_zero():
    a = [-128, -5, 0, 17, 127]
    assert qmath.sub(a, a, 3) == [0] * len(a)


def test_mult_by_one_is_identity():
    a = [-128, -5, 0, 17, 127]
    assert qmath.mult(a, [1] * len(a), 0) == a


def test_mult_with_shift():
    assert qmath.mult([64], [64], 12) == [1]


def test_length_mismatch_rejected():
    with pytest.raises(ValueError):
        qmath.add([1, 2], [1], 0)


def test_multiple_ops_match_two_operand_ops():
    a = [10, -20, 127, -128, 5]
    b = [3, 40, 1, -1, -5]
    for shift in (0, 1, 3):
        assert qmath.multiple_add([a, b], shift) == qmath.add(a, b, shift)
        assert qmath.multiple_sub([a, b], shift) == qmath.sub(a, b, shift)
        assert qmath.multiple_mult([a, b], shift) == qmath.mult(a, b, shift)


def test_multiple_single_source_is_identity():
    a = [10, -20, 127, -128]
    assert qmath.multiple_add([a], 0) == a
    assert qmath.multiple_sub([a], 0) == a
    assert qmath.multiple_mult([a], 0) == a


def test_multiple_add_three_sources_saturates():
    assert qmath.multiple_add([[60], [60], [60]], 0) == [127]


def test_multiple_requires_sources():
    with pytest.raises(ValueError):
        qmath.multiple_sub([], 0)


def test_multiple_requires_equal_lengths():
    with pytest.raises(ValueError):
        qmath.multiple_add([[1, 2], [1]], 0)


def test_q7_q15_round_trip():
    values = list(range(-128, 128))
    widened = qmath.q7_to_q15(values)
    assert all(-32768 <= v <= 32767 for v in widened)
    assert qmath.q15_to_q7(widened, 8) == values


def test_q7_to_q15_no_shift_keeps_values():
    values = [-128, -1, 0, 1, 127]
    assert qmath.q7_to_q15_no_shift(values) == values


def test_q15_to_q7_wraps_like_narrowing():
    values = [1000, -1000, 300]
    assert qmath.q15_to_q7(values, 0) == [qmath.wrap(v, 8) for v in values]