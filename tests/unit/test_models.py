"""Unit tests for data models."""
from __future__ import annotations

import pytest

from leverage_engine.fixed_point import ether
from leverage_engine.models import (
    ExecutionState,
    MarketKind,
    Methodology,
    RebalanceMode,
    RebalancePlan,
    RebalanceResult,
)


class TestMethodology:
    def test_frozen(self, methodology: Methodology) -> None:
        with pytest.raises(AttributeError):
            methodology.target_leverage_ratio = ether("3")  # type: ignore[misc]

    def test_default_interval(self) -> None:
        m = Methodology(ether("2"), ether("1.7"), ether("2.3"), ether("0.05"))
        assert m.rebalance_interval == 86400


class TestExecutionState:
    def test_defaults(self, make_state) -> None:
        state: ExecutionState = make_state()
        assert state.current_leverage_ratio == ether("2")
        assert state.market is MarketKind.AAVE
        assert state.account_liquidity is None

    def test_frozen(self, make_state) -> None:
        state = make_state()
        with pytest.raises(AttributeError):
            state.total_supply = 0  # type: ignore[misc]


class TestRebalanceResult:
    def test_delever(self) -> None:
        r = RebalanceResult(
            new_leverage_ratio=ether("1.8"),
            collateral_rebalance_units=ether("10"),
            is_lever=False,
            total_rebalance_notional=ether("100"),
        )
        assert r.is_delever
        assert not r.is_lever

    def test_lever(self) -> None:
        r = RebalanceResult(
            new_leverage_ratio=ether("2"),
            collateral_rebalance_units=ether("10"),
            is_lever=True,
            total_rebalance_notional=ether("100"),
        )
        assert not r.is_delever

    def test_delever_smaller_than_one_wei_per_unit(self) -> None:
        # Direction comes from the notional, not the floored per-unit size
        r = RebalanceResult(
            new_leverage_ratio=ether("1.8"),
            collateral_rebalance_units=0,
            is_lever=False,
            total_rebalance_notional=5,
        )
        assert r.is_delever

    def test_noop_is_neither(self) -> None:
        r = RebalanceResult(new_leverage_ratio=ether("2"), collateral_rebalance_units=0, is_lever=False)
        assert not r.is_delever
        assert not r.is_lever


class TestRebalancePlan:
    def test_defaults(self) -> None:
        plan = RebalancePlan(mode=RebalanceMode.NONE)
        assert plan.result is None
        assert plan.executable is False
        assert plan.emergency is False
        assert plan.max_borrow is None

    def test_mode_values(self) -> None:
        assert RebalanceMode("ripcord") is RebalanceMode.RIPCORD
        assert MarketKind("aave_v3") is MarketKind.AAVE_V3
