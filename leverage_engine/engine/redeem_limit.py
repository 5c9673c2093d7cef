"""Redeem allowance for a full unwind to 1x leverage."""
from __future__ import annotations

from ..fixed_point import PRECISE_UNIT, div_up, mul_up
from .rebalance_sizer import total_rebalance_notional


def max_redeem_for_delever_to_zero(
    current_leverage_ratio: int,
    new_leverage_ratio: int,
    collateral_balance: int,
    total_supply: int,
    slippage_tolerance: int,
) -> int:
    """Per-unit collateral to redeem when unwinding all debt.

    The unwind notional is inflated by ``1 + slippage_tolerance`` so an
    adverse move during execution still closes the position. The inflation
    and the per-unit division round up.
    """
    rebalance_notional = total_rebalance_notional(
        current_leverage_ratio, new_leverage_ratio, collateral_balance
    )
    notional_redeem_quantity = mul_up(
        rebalance_notional, PRECISE_UNIT + slippage_tolerance
    )
    return div_up(notional_redeem_quantity, total_supply)
