"""Data models — all frozen (immutable).

Every monetary and ratio field is a fixed-point int scaled by 1e18
(see :mod:`leverage_engine.fixed_point`). Time fields are whole seconds.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MarketKind(str, Enum):
    """How a money market reports the collateral balance."""

    COMPOUND = "compound"  # shares x exchange rate
    AAVE = "aave"  # rebasing balance
    AAVE_V3 = "aave_v3"  # pre-aggregated account liquidity


class RebalanceMode(str, Enum):
    NONE = "none"
    REBALANCE = "rebalance"
    ITERATE = "iterate"
    RIPCORD = "ripcord"
    DISENGAGE = "disengage"
    ENGAGE = "engage"


@dataclass(frozen=True)
class Methodology:
    """Leverage targets and recentering behaviour."""

    target_leverage_ratio: int
    min_leverage_ratio: int
    max_leverage_ratio: int
    recentering_speed: int
    rebalance_interval: int = 86400


@dataclass(frozen=True)
class ExecutionParameters:
    """Trade execution limits for ordinary rebalances."""

    unutilized_leverage_percentage: int
    slippage_tolerance: int
    twap_max_trade_size: int = 0
    twap_cooldown_period: int = 0


@dataclass(frozen=True)
class IncentiveParameters:
    """Execution limits used once leverage exceeds the incentivized ratio."""

    incentivized_leverage_ratio: int
    incentivized_slippage_tolerance: int
    incentivized_twap_max_trade_size: int = 0
    incentivized_twap_cooldown_period: int = 0


@dataclass(frozen=True)
class AccountLiquidity:
    """Aggregated money-market account readout (Aave V3 style)."""

    total_collateral_base: int
    total_debt_base: int
    liquidation_threshold_bps: int


@dataclass(frozen=True)
class ExecutionState:
    """Live position state read at call time."""

    current_leverage_ratio: int
    collateral_balance: int
    borrow_balance: int
    total_supply: int
    collateral_price: int
    borrow_price: int
    collateral_factor: int
    last_rebalance_timestamp: int = 0
    timestamp: int = 0
    market: MarketKind = MarketKind.AAVE
    account_liquidity: AccountLiquidity | None = None
    # Set while a TWAP rebalance is in progress, 0 otherwise
    twap_leverage_ratio: int = 0
    last_trade_timestamp: int = 0


@dataclass(frozen=True)
class RebalanceResult:
    """Outcome of one leverage recentering step."""

    new_leverage_ratio: int
    collateral_rebalance_units: int
    is_lever: bool
    total_rebalance_notional: int = 0

    @property
    def is_delever(self) -> bool:
        return not self.is_lever and self.total_rebalance_notional > 0


@dataclass(frozen=True)
class RebalancePlan:
    """Advisory plan for a single attempted trade."""

    mode: RebalanceMode
    result: RebalanceResult | None = None
    chunk_rebalance_notional: int = 0
    chunk_rebalance_units: int = 0
    max_borrow: int | None = None
    slippage_tolerance: int = 0
    emergency: bool = False
    executable: bool = False
    # Ratio the next ITERATE call continues toward; 0 when this trade completes the move
    twap_leverage_ratio: int = 0
    reason: str = ""
