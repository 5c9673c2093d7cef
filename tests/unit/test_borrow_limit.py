"""Unit tests for the delever borrow bound."""
from __future__ import annotations

import pytest

from leverage_engine.engine.borrow_limit import (
    is_buffer_breached,
    max_borrow_for_delever,
    max_borrow_for_delever_from_liquidity,
    net_borrow_limit,
)
from leverage_engine.fixed_point import ether
from leverage_engine.models import AccountLiquidity


def _max_borrow(borrow_balance: str = "500", unutilized: str = "0.01") -> int:
    return max_borrow_for_delever(
        collateral_balance=ether("1000"),
        collateral_factor=ether("0.75"),
        unutilized_leverage_percentage=ether(unutilized),
        collateral_price=ether("1"),
        borrow_price=ether("1"),
        borrow_balance=ether(borrow_balance),
    )


class TestNetBorrowLimit:
    def test_buffered_limit(self) -> None:
        assert net_borrow_limit(ether("1000"), ether("0.75"), ether("0.01")) == ether("742.5")


class TestMaxBorrowForDelever:
    def test_healthy_position(self) -> None:
        # 1000 * (742.5 - 500) / 742.5
        assert _max_borrow("500") == (242500 * 10**36) // (7425 * 10**17)

    def test_past_buffer_is_negative(self) -> None:
        # borrow value 760 > buffered limit 742.5
        result = _max_borrow("760")
        assert result < 0
        assert is_buffer_breached(result)

    def test_exactly_at_buffer_is_breached(self) -> None:
        result = _max_borrow("742.5")
        assert result == 0
        assert is_buffer_breached(result)

    def test_strictly_decreasing_in_borrow_balance(self) -> None:
        results = [_max_borrow(b) for b in ("0", "100", "500", "700", "760")]
        assert all(a > b for a, b in zip(results, results[1:]))

    def test_strictly_decreasing_in_unutilized_percentage(self) -> None:
        results = [_max_borrow("500", u) for u in ("0", "0.01", "0.05", "0.1")]
        assert all(a > b for a, b in zip(results, results[1:]))

    def test_prices_scale_values(self) -> None:
        # 2x position: 150000 of collateral value against 75000 of debt
        result = max_borrow_for_delever(
            collateral_balance=ether("100"),
            collateral_factor=ether("0.75"),
            unutilized_leverage_percentage=ether("0.01"),
            collateral_price=ether("1500"),
            borrow_price=ether("1"),
            borrow_balance=ether("75000"),
        )
        assert not is_buffer_breached(result)
        assert ether("32") < result < ether("33")

    def test_no_collateral_raises(self) -> None:
        with pytest.raises(ZeroDivisionError):
            max_borrow_for_delever(0, ether("0.75"), ether("0.01"), ether("1"), ether("1"), 0)


class TestMaxBorrowFromLiquidity:
    def test_matches_price_form(self) -> None:
        liquidity = AccountLiquidity(
            total_collateral_base=ether("1000"),
            total_debt_base=ether("500"),
            liquidation_threshold_bps=7500,
        )
        result = max_borrow_for_delever_from_liquidity(ether("1000"), liquidity, ether("0.01"))
        assert result == _max_borrow("500")

    def test_breached_readout(self) -> None:
        liquidity = AccountLiquidity(
            total_collateral_base=ether("1000"),
            total_debt_base=ether("760"),
            liquidation_threshold_bps=7500,
        )
        result = max_borrow_for_delever_from_liquidity(ether("1000"), liquidity, ether("0.01"))
        assert is_buffer_breached(result)
