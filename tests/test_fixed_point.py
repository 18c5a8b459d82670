from decimal import Decimal

import pytest

from fixed_yield_lab.core import ONE, div_down, div_up, from_wei, mul_down, mul_up, to_wei
from fixed_yield_lab.core.fixed_point import complement, int_div_up


def test_mul_rounding_direction() -> None:
    assert mul_down(1, 1) == 0
    assert mul_up(1, 1) == 1
    assert mul_up(0, 5) == 0
    assert mul_down(3 * ONE, ONE // 2) == 3 * ONE // 2


def test_div_rounding_direction() -> None:
    assert div_down(1, 3) == 333333333333333333
    assert div_up(1, 3) == 333333333333333334
    assert div_up(0, 3) == 0


def test_division_by_zero_raises() -> None:
    with pytest.raises(ZeroDivisionError):
        div_down(ONE, 0)
    with pytest.raises(ZeroDivisionError):
        div_up(ONE, 0)
    with pytest.raises(ZeroDivisionError):
        int_div_up(1, 0)


def test_complement_clamps_at_zero() -> None:
    assert complement(ONE // 4) == 3 * ONE // 4
    assert complement(2 * ONE) == 0


def test_int_div_up() -> None:
    assert int_div_up(7, 2) == 4
    assert int_div_up(8, 2) == 4
    assert int_div_up(0, 2) == 0


def test_wei_conversions_are_exact_for_decimal_inputs() -> None:
    assert to_wei(0.1) == 10**17
    assert to_wei("1.5") == 15 * 10**17
    assert to_wei(2) == 2 * ONE
    assert to_wei(1, decimals=6) == 10**6
    assert from_wei(15 * 10**17) == Decimal("1.5")
