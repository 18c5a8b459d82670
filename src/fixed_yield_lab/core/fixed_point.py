"""Integer fixed-point arithmetic with explicit rounding direction.

Every amount, rate and percentage in the package is an ``int`` scaled by
:data:`ONE`.  Helpers come in ``down``/``up`` pairs so callers choose the
rounding that favours the pool: payouts round down, required inputs round up.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_DOWN

from .constants import ONE


def mul_down(a: int, b: int) -> int:
    return (a * b) // ONE


def mul_up(a: int, b: int) -> int:
    product = a * b
    if product == 0:
        return 0
    return (product - 1) // ONE + 1


def div_down(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("fixed-point division by zero")
    return (a * ONE) // b


def div_up(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("fixed-point division by zero")
    if a == 0:
        return 0
    return (a * ONE - 1) // b + 1


def complement(x: int) -> int:
    """Return ``ONE - x`` clamped at zero."""

    return ONE - x if x < ONE else 0


def int_div_up(a: int, b: int) -> int:
    """Plain integer division rounding up (no fixed-point scaling)."""

    if b == 0:
        raise ZeroDivisionError("integer division by zero")
    if a == 0:
        return 0
    return (a - 1) // b + 1


def to_wei(value: int | float | str | Decimal, decimals: int = 18) -> int:
    """Convert a human-readable quantity to its fixed-point integer form.

    Floats go through ``str`` first so ``to_wei(0.1)`` yields exactly
    ``10**17`` rather than the binary approximation.
    """

    if isinstance(value, float):
        value = str(value)
    scaled = Decimal(value) * (Decimal(10) ** decimals)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_wei(value: int, decimals: int = 18) -> Decimal:
    return Decimal(value) / (Decimal(10) ** decimals)


__all__ = [
    "mul_down",
    "mul_up",
    "div_down",
    "div_up",
    "complement",
    "int_div_up",
    "to_wei",
    "from_wei",
]
