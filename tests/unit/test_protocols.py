"""Unit tests for money market adapters and readout parsing."""
from __future__ import annotations

from dataclasses import replace

import pytest

from leverage_engine.engine.borrow_limit import max_borrow_for_delever
from leverage_engine.fixed_point import ether, mul_down
from leverage_engine.models import AccountLiquidity, MarketKind
from leverage_engine.protocols import (
    AaveMarket,
    AaveV3Market,
    CompoundMarket,
    get_market,
)
from leverage_engine.protocols.compound import collateral_from_shares
from leverage_engine.protocols.parser import (
    parse_account_liquidity,
    read_fixed,
    read_int,
)


class TestGetMarket:
    @pytest.mark.parametrize(
        ("kind", "cls"),
        [("compound", CompoundMarket), ("aave", AaveMarket), ("aave_v3", AaveV3Market)],
    )
    def test_by_string(self, kind: str, cls: type) -> None:
        market = get_market(kind)
        assert isinstance(market, cls)
        assert market.market_kind is MarketKind(kind)

    def test_by_enum(self) -> None:
        assert isinstance(get_market(MarketKind.COMPOUND), CompoundMarket)

    def test_unknown_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown market"):
            get_market("morpho")


class TestParser:
    def test_read_fixed_string(self) -> None:
        assert read_fixed({"x": "0.75"}, "x") == ether("0.75")

    def test_read_fixed_yaml_float(self) -> None:
        assert read_fixed({"x": 0.1}, "x") == ether("0.1")

    def test_read_fixed_missing_raises(self) -> None:
        with pytest.raises(ValueError, match="Missing market field 'x'"):
            read_fixed({}, "x")

    def test_read_fixed_non_numeric_raises(self) -> None:
        with pytest.raises(ValueError, match="Not a decimal number"):
            read_fixed({"x": "abc"}, "x")

    def test_read_int_default(self) -> None:
        assert read_int({}, "ts", 0) == 0
        assert read_int({"ts": "17"}, "ts") == 17

    def test_read_int_missing_raises(self) -> None:
        with pytest.raises(ValueError):
            read_int({}, "ts")

    def test_parse_account_liquidity(self) -> None:
        liq = parse_account_liquidity(
            {
                "total_collateral_base": "150000",
                "total_debt_base": "75000",
                "liquidation_threshold_bps": 8250,
            }
        )
        assert liq == AccountLiquidity(ether("150000"), ether("75000"), 8250)


class TestCompoundMarket:
    def test_collateral_from_shares(self) -> None:
        assert collateral_from_shares(ether("50000"), ether("0.02")) == ether("1000")

    def test_collateral_balance_rounds_down(self) -> None:
        readout = {"collateral_shares": "4950", "exchange_rate": "0.0202020202020202"}
        assert CompoundMarket().collateral_balance(readout) == mul_down(
            ether("4950"), ether("0.0202020202020202")
        )


class TestAaveV3Market:
    def test_uses_liquidity_when_present(self, make_state) -> None:
        state = replace(
            make_state(),
            account_liquidity=AccountLiquidity(ether("150000"), ether("75000"), 7500),
        )
        via_liquidity = AaveV3Market().max_borrow_for_delever(state, ether("0.01"))
        via_prices = AaveMarket().max_borrow_for_delever(state, ether("0.01"))
        assert via_liquidity == via_prices

    def test_falls_back_to_prices(self, make_state) -> None:
        state = make_state()
        result = AaveV3Market().max_borrow_for_delever(state, ether("0.01"))
        assert result == max_borrow_for_delever(
            state.collateral_balance,
            state.collateral_factor,
            ether("0.01"),
            state.collateral_price,
            state.borrow_price,
            state.borrow_balance,
        )
