"""Leverage ratio recentering — pure functions, no I/O."""
from __future__ import annotations

from ..fixed_point import PRECISE_UNIT, div_down, mul_down


def new_leverage_ratio(
    current_leverage_ratio: int,
    target_leverage_ratio: int,
    min_leverage_ratio: int,
    max_leverage_ratio: int,
    recentering_speed: int,
) -> int:
    """Blend the current ratio toward target, then clamp into [min, max].

        candidate = target * speed + current * (1 - speed)
        result    = max(min, min(candidate, max))

    Both products round down. ``recentering_speed`` must already be within
    [0, 1]; this function does not check it.
    """
    a = mul_down(target_leverage_ratio, recentering_speed)
    b = mul_down(PRECISE_UNIT - recentering_speed, current_leverage_ratio)
    candidate = a + b

    bounded = candidate if candidate < max_leverage_ratio else max_leverage_ratio
    return min_leverage_ratio if min_leverage_ratio >= bounded else bounded


def current_leverage_ratio(collateral_value: int, borrow_value: int) -> int:
    """Collateral value over equity value.

    Raises ZeroDivisionError when equity is zero.
    """
    return div_down(collateral_value, collateral_value - borrow_value)
