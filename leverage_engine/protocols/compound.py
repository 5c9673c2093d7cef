"""Compound-style market: collateral held as cTokens."""
from __future__ import annotations

from typing import Any

from ..engine.borrow_limit import max_borrow_for_delever
from ..fixed_point import mul_down
from ..models import ExecutionState, MarketKind
from .parser import read_fixed


def collateral_from_shares(shares: int, exchange_rate: int) -> int:
    """Underlying collateral for ``shares`` cTokens (rounded down)."""
    return mul_down(shares, exchange_rate)


class CompoundMarket:
    """Converts cToken balances via the stored exchange rate."""

    @property
    def market_kind(self) -> MarketKind:
        return MarketKind.COMPOUND

    def collateral_balance(self, readout: dict[str, Any]) -> int:
        shares = read_fixed(readout, "collateral_shares")
        exchange_rate = read_fixed(readout, "exchange_rate")
        return collateral_from_shares(shares, exchange_rate)

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
