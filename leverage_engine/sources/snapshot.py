"""YAML snapshot position source.

A snapshot is a single consistent readout of the position, taken at one
block height by whatever collects it:

    market: compound
    collateral_shares: "4950.0"     # compound only
    exchange_rate: "0.0202"         # compound only
    collateral_balance: "100.0"     # aave / aave_v3
    borrow_balance: "75000"
    total_supply: "10"
    collateral_price: "1500"
    borrow_price: "1"
    collateral_factor: "0.75"
    last_rebalance_timestamp: 1700000000
    last_trade_timestamp: 1700000000  # defaults to last_rebalance_timestamp
    twap_leverage_ratio: "0"        # non-zero while a TWAP is in progress
    timestamp: 1700090000
    account_liquidity:              # aave_v3 only, optional
      total_collateral_base: "150000"
      total_debt_base: "75000"
      liquidation_threshold_bps: 8250
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ..engine.leverage_ratio import current_leverage_ratio
from ..fixed_point import format_fixed, mul_down
from ..models import ExecutionState, MarketKind
from ..protocols import get_market
from ..protocols.parser import parse_account_liquidity, read_fixed, read_int

logger = logging.getLogger(__name__)


def parse_snapshot(
    raw: dict[str, Any], default_market: MarketKind = MarketKind.AAVE
) -> ExecutionState:
    """Build an ExecutionState from a raw snapshot mapping.

    The current leverage ratio is derived from balances and prices, never
    read from the snapshot, so it cannot disagree with them.
    """
    market = get_market(raw.get("market", default_market))
    collateral_balance = market.collateral_balance(raw)
    borrow_balance = read_fixed(raw, "borrow_balance")
    collateral_price = read_fixed(raw, "collateral_price")
    borrow_price = read_fixed(raw, "borrow_price")

    collateral_value = mul_down(collateral_balance, collateral_price)
    borrow_value = mul_down(borrow_balance, borrow_price)
    if collateral_value <= borrow_value:
        raise ValueError("Snapshot position has no positive equity")

    liquidity_raw = raw.get("account_liquidity")
    last_rebalance_timestamp = read_int(raw, "last_rebalance_timestamp", 0)
    twap_raw = raw.get("twap_leverage_ratio")
    return ExecutionState(
        current_leverage_ratio=current_leverage_ratio(collateral_value, borrow_value),
        collateral_balance=collateral_balance,
        borrow_balance=borrow_balance,
        total_supply=read_fixed(raw, "total_supply"),
        collateral_price=collateral_price,
        borrow_price=borrow_price,
        collateral_factor=read_fixed(raw, "collateral_factor"),
        last_rebalance_timestamp=last_rebalance_timestamp,
        timestamp=read_int(raw, "timestamp", 0),
        market=market.market_kind,
        account_liquidity=(
            parse_account_liquidity(liquidity_raw) if liquidity_raw else None
        ),
        twap_leverage_ratio=read_fixed(raw, "twap_leverage_ratio") if twap_raw else 0,
        last_trade_timestamp=read_int(
            raw, "last_trade_timestamp", last_rebalance_timestamp
        ),
    )


class SnapshotFileSource:
    """Read the position from a YAML snapshot file on every call."""

    def __init__(
        self, path: str | Path, default_market: MarketKind = MarketKind.AAVE
    ) -> None:
        self._path = Path(path)
        self._default_market = default_market

    async def read_state(self) -> ExecutionState:
        if not self._path.exists():
            raise FileNotFoundError(f"Snapshot file not found: {self._path}")

        with open(self._path) as f:
            try:
                raw = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid snapshot file {self._path}: {e}") from e

        state = parse_snapshot(raw, self._default_market)
        logger.info(
            "Snapshot %s — %s  leverage %sx  collateral %s  borrow %s  supply %s",
            self._path.name,
            state.market.value,
            format_fixed(state.current_leverage_ratio),
            format_fixed(state.collateral_balance),
            format_fixed(state.borrow_balance),
            format_fixed(state.total_supply),
        )
        return state
