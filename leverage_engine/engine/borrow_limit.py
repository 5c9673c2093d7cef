"""Borrow headroom during delever.

Both presentations bound the same quantity: the collateral-denominated
amount that may be withdrawn and swapped before the position reaches its
buffered collateralization limit. Results may be negative; a value <= 0
means the safety buffer is already breached.
"""
from __future__ import annotations

from ..fixed_point import PRECISE_UNIT, div_down, mul_down
from ..models import AccountLiquidity

# Account-data thresholds are basis points; 1 bps = 1e14 in 1e18 units.
BPS_TO_PRECISE: int = 10**14


def net_borrow_limit(
    collateral_value: int,
    collateral_factor: int,
    unutilized_leverage_percentage: int,
) -> int:
    """``collateral_value * collateral_factor * (1 - buffer)``, rounded down."""
    return mul_down(
        mul_down(collateral_value, collateral_factor),
        PRECISE_UNIT - unutilized_leverage_percentage,
    )


def _headroom_in_collateral(
    collateral_balance: int, net_limit: int, borrow_value: int
) -> int:
    return div_down(mul_down(collateral_balance, net_limit - borrow_value), net_limit)


def max_borrow_for_delever(
    collateral_balance: int,
    collateral_factor: int,
    unutilized_leverage_percentage: int,
    collateral_price: int,
    borrow_price: int,
    borrow_balance: int,
) -> int:
    """Price/factor form of the delever borrow bound.

        collateral_value = collateral_balance * collateral_price
        borrow_value     = borrow_balance * borrow_price
        net_limit        = collateral_value * factor * (1 - buffer)
        result           = collateral_balance * (net_limit - borrow_value) / net_limit
    """
    collateral_value = mul_down(collateral_balance, collateral_price)
    borrow_value = mul_down(borrow_balance, borrow_price)
    net_limit = net_borrow_limit(
        collateral_value, collateral_factor, unutilized_leverage_percentage
    )
    return _headroom_in_collateral(collateral_balance, net_limit, borrow_value)


def max_borrow_for_delever_from_liquidity(
    collateral_balance: int,
    liquidity: AccountLiquidity,
    unutilized_leverage_percentage: int,
) -> int:
    """Same bound computed from an aggregated account-liquidity readout."""
    collateral_factor = liquidity.liquidation_threshold_bps * BPS_TO_PRECISE
    net_limit = net_borrow_limit(
        liquidity.total_collateral_base,
        collateral_factor,
        unutilized_leverage_percentage,
    )
    return _headroom_in_collateral(
        collateral_balance, net_limit, liquidity.total_debt_base
    )


def is_buffer_breached(max_borrow: int) -> bool:
    """True when the headroom signals an emergency rebalance."""
    return max_borrow <= 0
