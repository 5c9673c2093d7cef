"""Fixed-point arithmetic on plain Python ints scaled by 1e18.

Every quantity in the engine is an int where ``PRECISE_UNIT`` means one
whole unit. Each multiply/divide names its rounding direction: ``*_down``
floors toward -inf (Python ``//``), ``*_up`` rounds toward +inf.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext

PRECISE_UNIT: int = 10**18
ZERO: int = 0


def mul_down(a: int, b: int) -> int:
    """``a * b / 1e18`` rounded down."""
    return (a * b) // PRECISE_UNIT


def mul_up(a: int, b: int) -> int:
    """``a * b / 1e18`` rounded up."""
    return -((-(a * b)) // PRECISE_UNIT)


def div_down(a: int, b: int) -> int:
    """``a * 1e18 / b`` rounded down."""
    if b == 0:
        raise ZeroDivisionError("fixed-point division by zero")
    return (a * PRECISE_UNIT) // b


def div_up(a: int, b: int) -> int:
    """``a * 1e18 / b`` rounded up."""
    if b == 0:
        raise ZeroDivisionError("fixed-point division by zero")
    return -((-(a * PRECISE_UNIT)) // b)


def abs_diff(a: int, b: int) -> int:
    return a - b if a >= b else b - a


def to_fixed(value: str | int | Decimal) -> int:
    """Scale a decimal literal to a 1e18 fixed-point int.

    Examples:
        "2.3" -> 2_300_000_000_000_000_000
        1     -> 1_000_000_000_000_000_000

    Floats are rejected; anything finer than 1e-18 is truncated toward zero.
    Non-numeric text raises ``ValueError``.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"Fixed-point values must not be floats: {value!r}")
    with localcontext() as ctx:
        ctx.prec = 78
        try:
            return int(Decimal(value) * PRECISE_UNIT)
        except (InvalidOperation, OverflowError):
            raise ValueError(f"Not a decimal number: {value!r}") from None


def ether(value: str | int | Decimal) -> int:
    """Alias of :func:`to_fixed` for 18-decimal token amounts."""
    return to_fixed(value)


def from_fixed(value: int) -> Decimal:
    """Convert a fixed-point int back to a ``Decimal`` for display."""
    return Decimal(value) / PRECISE_UNIT


def format_fixed(value: int, places: int = 4) -> str:
    return f"{from_fixed(value):,.{places}f}"
