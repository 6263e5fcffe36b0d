import math

import pytest

from posixlab import calc


@pytest.mark.parametrize("a,b", [(20, 12), (0, 5), (-7, 3), (100, -100)])
def test_add_and_subtract_are_inverse(a, b):
    assert calc.subtract(calc.add(a, b), b) == a


@pytest.mark.parametrize("a,b", [(20, 12), (-4, 9), (0, 0)])
def test_add_is_commutative(a, b):
    assert calc.add(a, b) == calc.add(b, a)


@pytest.mark.parametrize("a", [0, 1, -5, 123])
def test_multiply_identity_and_zero(a):
    assert calc.multiply(a, 1) == a
    assert calc.multiply(a, 0) == 0


@pytest.mark.parametrize("a,b", [(20, 12), (-3, 7), (9, -2)])
def test_divide_undoes_multiply(a, b):
    assert calc.divide(calc.multiply(a, b), b) == a


def test_divide_yields_fraction():
    assert calc.divide(7, 2) == 3.5


def test_divide_by_zero_follows_float_rules():
    assert calc.divide(1, 0) == math.inf
    assert calc.divide(-1, 0) == -math.inf
    assert math.isnan(calc.divide(0, 0))


def test_main_prints_report(capsys):
    assert calc.main() == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 5
    assert lines[0] == "a = 20, b = 12"
    assert lines[1] == f"a + b = {calc.add(20, 12)}"
    value = float(lines[4].split("= ", 1)[1])
    assert value == pytest.approx(calc.divide(20, 12), abs=1e-6)