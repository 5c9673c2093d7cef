"""Compose the recentering and sizing steps into a RebalanceResult."""
from __future__ import annotations

from ..models import ExecutionState, Methodology, RebalanceResult
from .leverage_ratio import new_leverage_ratio
from .rebalance_sizer import total_rebalance_notional, units_for_notional


def compute_rebalance(
    state: ExecutionState,
    methodology: Methodology,
    new_ratio: int | None = None,
) -> RebalanceResult:
    """Recenter leverage for ``state`` and size the full move.

    ``new_ratio`` overrides the recentering step (ripcord and disengage
    target a fixed ratio).
    """
    if new_ratio is None:
        new_ratio = new_leverage_ratio(
            state.current_leverage_ratio,
            methodology.target_leverage_ratio,
            methodology.min_leverage_ratio,
            methodology.max_leverage_ratio,
            methodology.recentering_speed,
        )

    notional = total_rebalance_notional(
        state.current_leverage_ratio, new_ratio, state.collateral_balance
    )
    return RebalanceResult(
        new_leverage_ratio=new_ratio,
        collateral_rebalance_units=units_for_notional(notional, state.total_supply),
        is_lever=new_ratio > state.current_leverage_ratio,
        total_rebalance_notional=notional,
    )
