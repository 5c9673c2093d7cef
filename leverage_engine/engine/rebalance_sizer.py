"""Rebalance sizing — converts a leverage ratio move into collateral amounts."""
from __future__ import annotations

from typing import Any

from ..fixed_point import abs_diff, div_down, mul_down
from ..interfaces.money_market import MoneyMarket


def total_rebalance_notional(
    current_leverage_ratio: int,
    new_leverage_ratio: int,
    collateral_balance: int,
) -> int:
    """Total collateral that must move to go from current to new ratio.

        notional = |current - new| / current * collateral_balance

    The fraction is taken against the pre-trade ratio. Division and the
    multiply both round down.
    """
    delta = abs_diff(current_leverage_ratio, new_leverage_ratio)
    fraction = div_down(delta, current_leverage_ratio)
    return mul_down(fraction, collateral_balance)


def collateral_rebalance_units(
    current_leverage_ratio: int,
    new_leverage_ratio: int,
    collateral_balance: int,
    total_supply: int,
) -> int:
    """Per position-token collateral amount to trade (rounded down)."""
    notional = total_rebalance_notional(
        current_leverage_ratio, new_leverage_ratio, collateral_balance
    )
    return div_down(notional, total_supply)


def chunk_rebalance_notional(
    total_notional: int,
    max_trade_size: int,
    max_borrow: int | None = None,
) -> int:
    """Cap a total rebalance notional to one TWAP chunk.

    ``max_borrow`` only applies on the delever path and may be negative,
    in which case it is returned as-is for the caller to reject.
    """
    chunk = min(total_notional, max_trade_size)
    if max_borrow is not None:
        chunk = min(chunk, max_borrow)
    return chunk


def units_for_notional(notional: int, total_supply: int) -> int:
    return div_down(notional, total_supply)


def collateral_rebalance_units_for_market(
    current_leverage_ratio: int,
    new_leverage_ratio: int,
    market: MoneyMarket,
    readout: dict[str, Any],
    total_supply: int,
) -> int:
    """As :func:`collateral_rebalance_units`, with the collateral balance
    first read through a money-market adapter (cToken exchange rate or
    rebasing balance).
    """
    collateral_balance = market.collateral_balance(readout)
    return collateral_rebalance_units(
        current_leverage_ratio, new_leverage_ratio, collateral_balance, total_supply
    )
