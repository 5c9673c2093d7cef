"""Aave V3 market: borrow bound taken from aggregated account data."""
from __future__ import annotations

import logging
from typing import Any

from ..engine.borrow_limit import (
    max_borrow_for_delever,
    max_borrow_for_delever_from_liquidity,
)
from ..models import ExecutionState, MarketKind
from .parser import read_fixed

logger = logging.getLogger(__name__)


class AaveV3Market:
    """Rebasing collateral balance; headroom from ``getUserAccountData``."""

    @property
    def market_kind(self) -> MarketKind:
        return MarketKind.AAVE_V3

    def collateral_balance(self, readout: dict[str, Any]) -> int:
        return read_fixed(readout, "collateral_balance")

    def max_borrow_for_delever(
        self, state: ExecutionState, unutilized_leverage_percentage: int
    ) -> int:
        if state.account_liquidity is None:
            logger.debug("No account liquidity readout, using price/factor bound")
            return max_borrow_for_delever(
                state.collateral_balance,
                state.collateral_factor,
                unutilized_leverage_percentage,
                state.collateral_price,
                state.borrow_price,
                state.borrow_balance,
            )
        return max_borrow_for_delever_from_liquidity(
            state.collateral_balance,
            state.account_liquidity,
            unutilized_leverage_percentage,
        )
