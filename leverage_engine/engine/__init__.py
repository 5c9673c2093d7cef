"""Pure leverage calculators."""
from .borrow_limit import (
    is_buffer_breached,
    max_borrow_for_delever,
    max_borrow_for_delever_from_liquidity,
)
from .leverage_ratio import current_leverage_ratio, new_leverage_ratio
from .rebalance import compute_rebalance
from .rebalance_sizer import (
    chunk_rebalance_notional,
    collateral_rebalance_units,
    collateral_rebalance_units_for_market,
    total_rebalance_notional,
)
from .redeem_limit import max_redeem_for_delever_to_zero

__all__ = [
    "chunk_rebalance_notional",
    "collateral_rebalance_units",
    "collateral_rebalance_units_for_market",
    "compute_rebalance",
    "current_leverage_ratio",
    "is_buffer_breached",
    "max_borrow_for_delever",
    "max_borrow_for_delever_from_liquidity",
    "max_redeem_for_delever_to_zero",
    "new_leverage_ratio",
    "total_rebalance_notional",
]
