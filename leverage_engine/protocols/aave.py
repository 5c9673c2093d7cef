"""Aave-style market: rebasing aToken balance used directly."""
from __future__ import annotations

from typing import Any

from ..engine.borrow_limit import max_borrow_for_delever
from ..models import ExecutionState, MarketKind
from .parser import read_fixed


class AaveMarket:
    """Collateral balance is the aToken balance itself."""

    @property
    def market_kind(self) -> MarketKind:
        return MarketKind.AAVE

    def collateral_balance(self, readout: dict[str, Any]) -> int:
        return read_fixed(readout, "collateral_balance")

    def max_borrow_for_delever(
        self, state: ExecutionState, unutilized_leverage_percentage: int
    ) -> int:
        return max_borrow_for_delever(
            state.collateral_balance,
            state.collateral_factor,
            unutilized_leverage_percentage,
            state.collateral_price,
            state.borrow_price,
            state.borrow_balance,
        )
