"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable

import pytest

from leverage_engine.config import (
    AppConfig,
    NotificationsConfig,
    PositionConfig,
    PriceOracleConfig,
    PythConfig,
    StrategyConfig,
    TelegramConfig,
)
from leverage_engine.engine import current_leverage_ratio
from leverage_engine.fixed_point import ether, mul_down
from leverage_engine.models import (
    AccountLiquidity,
    ExecutionParameters,
    ExecutionState,
    IncentiveParameters,
    MarketKind,
    Methodology,
)


# ---------------------------------------------------------------------------
# Strategy fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def methodology() -> Methodology:
    return Methodology(
        target_leverage_ratio=ether("2"),
        min_leverage_ratio=ether("1.7"),
        max_leverage_ratio=ether("2.3"),
        recentering_speed=ether("0.05"),
        rebalance_interval=86400,
    )


@pytest.fixture()
def execution() -> ExecutionParameters:
    return ExecutionParameters(
        unutilized_leverage_percentage=ether("0.01"),
        slippage_tolerance=ether("0.01"),
        twap_max_trade_size=ether("50"),
        twap_cooldown_period=3000,
    )


@pytest.fixture()
def incentive() -> IncentiveParameters:
    return IncentiveParameters(
        incentivized_leverage_ratio=ether("2.6"),
        incentivized_slippage_tolerance=ether("0.05"),
        incentivized_twap_max_trade_size=ether("100"),
        incentivized_twap_cooldown_period=60,
    )


@pytest.fixture()
def strategy_config(
    methodology: Methodology,
    execution: ExecutionParameters,
    incentive: IncentiveParameters,
) -> StrategyConfig:
    return StrategyConfig(
        methodology=methodology,
        execution=execution,
        incentive=incentive,
        market=MarketKind.AAVE,
    )


@pytest.fixture()
def sample_app_config(strategy_config: StrategyConfig, tmp_path: Path) -> AppConfig:
    return AppConfig(
        strategy=strategy_config,
        position=PositionConfig(snapshot_path=str(tmp_path / "snapshot.yaml")),
        price_oracle=PriceOracleConfig(
            provider="none",
            pyth=PythConfig(
                hermes_url="https://hermes.example.com",
                feeds={"collateral": "aaa111", "borrow": "bbb222"},
            ),
        ),
        notifications=NotificationsConfig(
            telegram=TelegramConfig(
                enabled=True,
                alert_bot_token="fake-alert-token",
                log_bot_token="fake-log-token",
                chat_id="12345",
            ),
        ),
        watch_interval_minutes=5,
    )


# ---------------------------------------------------------------------------
# State fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_state() -> Callable[..., ExecutionState]:
    """Build an ExecutionState from decimal-string balances and prices."""

    def _make(
        collateral_balance: str = "100",
        borrow_balance: str = "75000",
        collateral_price: str = "1500",
        borrow_price: str = "1",
        total_supply: str = "10",
        collateral_factor: str = "0.75",
        last_rebalance_timestamp: int = 1_700_000_000,
        timestamp: int = 1_700_000_100,
        market: MarketKind = MarketKind.AAVE,
        last_trade_timestamp: int | None = None,
        twap_leverage_ratio: str = "0",
        account_liquidity: AccountLiquidity | None = None,
    ) -> ExecutionState:
        collateral = ether(collateral_balance)
        borrow = ether(borrow_balance)
        c_price = ether(collateral_price)
        b_price = ether(borrow_price)
        return ExecutionState(
            current_leverage_ratio=current_leverage_ratio(
                mul_down(collateral, c_price), mul_down(borrow, b_price)
            ),
            collateral_balance=collateral,
            borrow_balance=borrow,
            total_supply=ether(total_supply),
            collateral_price=c_price,
            borrow_price=b_price,
            collateral_factor=ether(collateral_factor),
            last_rebalance_timestamp=last_rebalance_timestamp,
            timestamp=timestamp,
            market=market,
            account_liquidity=account_liquidity,
            twap_leverage_ratio=ether(twap_leverage_ratio),
            last_trade_timestamp=(
                last_rebalance_timestamp
                if last_trade_timestamp is None
                else last_trade_timestamp
            ),
        )

    return _make


# ---------------------------------------------------------------------------
# YAML fixtures
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    watch_interval_minutes: 5
    strategy:
      market: compound
      methodology:
        target_leverage_ratio: "2"
        min_leverage_ratio: "1.7"
        max_leverage_ratio: "2.3"
        recentering_speed: "0.05"
        rebalance_interval: 86400
      execution:
        unutilized_leverage_percentage: "0.01"
        slippage_tolerance: "0.01"
        twap_max_trade_size: "0.5"
        twap_cooldown_period: 3000
      incentive:
        incentivized_leverage_ratio: "2.6"
        incentivized_slippage_tolerance: "0.05"
        incentivized_twap_max_trade_size: "2"
        incentivized_twap_cooldown_period: 60
    position:
      snapshot_path: "snap.yaml"
    price_oracle:
      provider: pyth
      pyth:
        hermes_url: "https://hermes.example.com"
        feeds: {collateral: "aaa", borrow: "bbb"}
    notifications:
      telegram:
        enabled: true
        alert_bot_token: "tok1"
        log_bot_token: "tok2"
        chat_id: "999"
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


SAMPLE_SNAPSHOT_YAML = textwrap.dedent("""\
    market: aave
    collateral_balance: "100"
    borrow_balance: "90000"
    total_supply: "10"
    collateral_price: "1500"
    borrow_price: "1"
    collateral_factor: "0.75"
    last_rebalance_timestamp: 1700000000
    timestamp: 1700000100
""")


@pytest.fixture()
def sample_snapshot_path(tmp_path: Path) -> Path:
    snap = tmp_path / "snapshot.yaml"
    snap.write_text(SAMPLE_SNAPSHOT_YAML)
    return snap
