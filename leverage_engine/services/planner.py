"""Rebalance planning — composes the calculators over one position snapshot.

The planner is advisory: it sizes a single trade and reports it. It never
submits transactions, and every call re-reads the position from scratch.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone

from ..config import AppConfig
from ..engine import (
    chunk_rebalance_notional,
    compute_rebalance,
    current_leverage_ratio,
    is_buffer_breached,
    max_redeem_for_delever_to_zero,
)
from ..engine.rebalance_sizer import units_for_notional
from ..fixed_point import PRECISE_UNIT, format_fixed, mul_down
from ..interfaces.money_market import MoneyMarket
from ..interfaces.notifier import Notifier
from ..interfaces.position_source import PositionSource
from ..interfaces.price_oracle import PriceOracle
from ..models import ExecutionState, RebalanceMode, RebalancePlan, RebalanceResult
from ..notifications import TelegramNotifier
from ..oracles import PythOracle
from ..protocols import get_market
from ..sources import SnapshotFileSource

logger = logging.getLogger(__name__)

COLLATERAL_FEED = "collateral"
BORROW_FEED = "borrow"


def reprice_state(
    state: ExecutionState, collateral_price: int, borrow_price: int
) -> ExecutionState:
    """Return ``state`` valued at new prices, with the leverage ratio rederived.

    The aggregated account-liquidity readout is valued at the snapshot's
    prices, so it is dropped and borrow headroom falls back to the
    price/factor form.
    """
    collateral_value = mul_down(state.collateral_balance, collateral_price)
    borrow_value = mul_down(state.borrow_balance, borrow_price)
    if collateral_value <= borrow_value:
        raise ValueError("Position has no positive equity at oracle prices")
    return replace(
        state,
        collateral_price=collateral_price,
        borrow_price=borrow_price,
        current_leverage_ratio=current_leverage_ratio(collateral_value, borrow_value),
        account_liquidity=None,
    )


class RebalancePlanner:
    """Decides whether and how far to rebalance a leveraged position."""

    def __init__(
        self, config: AppConfig, source: PositionSource | None = None
    ) -> None:
        self._config = config
        self._methodology = config.strategy.methodology
        self._execution = config.strategy.execution
        self._incentive = config.strategy.incentive
        self._market: MoneyMarket = get_market(config.strategy.market)

        self._source: PositionSource = source or SnapshotFileSource(
            config.position.snapshot_path, config.strategy.market
        )

        self._oracle: PriceOracle | None = None
        if config.price_oracle.provider == "pyth":
            self._oracle = PythOracle(config.price_oracle.pyth)

        self._notifiers: list[Notifier] = []
        if config.notifications.telegram.enabled:
            self._notifiers.append(TelegramNotifier(config.notifications.telegram))

    # ------------------------------------------------------------------
    # Pure planning
    # ------------------------------------------------------------------

    def select_mode(self, state: ExecutionState) -> RebalanceMode:
        """Pick the rebalance flow for ``state``.

        Above the incentivized ratio only a ripcord is possible, once the
        incentivized TWAP cooldown has passed since the last trade. A TWAP
        in progress is continued by ITERATE after the ordinary cooldown.
        Otherwise an out-of-bounds ratio skips the rebalance interval and
        the interval gates the call.
        """
        current = state.current_leverage_ratio
        since_trade = state.timestamp - state.last_trade_timestamp
        if current > self._incentive.incentivized_leverage_ratio:
            if since_trade >= self._incentive.incentivized_twap_cooldown_period:
                return RebalanceMode.RIPCORD
            return RebalanceMode.NONE
        if state.twap_leverage_ratio > 0:
            if since_trade >= self._execution.twap_cooldown_period:
                return RebalanceMode.ITERATE
            return RebalanceMode.NONE
        if (
            current > self._methodology.max_leverage_ratio
            or current < self._methodology.min_leverage_ratio
        ):
            return RebalanceMode.REBALANCE
        elapsed = state.timestamp - state.last_rebalance_timestamp
        if elapsed >= self._methodology.rebalance_interval:
            return RebalanceMode.REBALANCE
        return RebalanceMode.NONE

    def plan_for_state(self, state: ExecutionState) -> RebalancePlan:
        mode = self.select_mode(state)
        if mode is RebalanceMode.NONE:
            return RebalancePlan(
                mode=mode,
                twap_leverage_ratio=state.twap_leverage_ratio,
                reason=self._idle_reason(state),
            )

        if mode is RebalanceMode.RIPCORD:
            result = compute_rebalance(
                state, self._methodology, self._methodology.max_leverage_ratio
            )
            max_trade_size = self._incentive.incentivized_twap_max_trade_size
            slippage = self._incentive.incentivized_slippage_tolerance
        elif mode is RebalanceMode.ITERATE:
            result = compute_rebalance(
                state, self._methodology, state.twap_leverage_ratio
            )
            max_trade_size = self._execution.twap_max_trade_size
            slippage = self._execution.slippage_tolerance
        else:
            result = compute_rebalance(state, self._methodology)
            max_trade_size = self._execution.twap_max_trade_size
            slippage = self._execution.slippage_tolerance

        return self._size_chunk(mode, state, result, max_trade_size, slippage)

    def _idle_reason(self, state: ExecutionState) -> str:
        if state.current_leverage_ratio > self._incentive.incentivized_leverage_ratio:
            return "Above incentivized ratio, incentivized TWAP cooldown not elapsed"
        if state.twap_leverage_ratio > 0:
            return "TWAP in progress, cooldown not elapsed"
        return "Leverage within bounds and rebalance interval not elapsed"

    def engage_for_state(self, state: ExecutionState) -> RebalancePlan:
        """Plan the first lever trade of an unlevered position toward target.

        Raises:
            ValueError: the position carries debt, has no supply, or has no
                collateral.
        """
        if state.borrow_balance != 0:
            raise ValueError("Debt must be 0")
        if state.total_supply <= 0:
            raise ValueError("Position must have > 0 supply")
        if state.collateral_balance <= 0:
            raise ValueError("Collateral balance must be > 0")

        result = compute_rebalance(
            state, self._methodology, self._methodology.target_leverage_ratio
        )
        return self._size_chunk(
            RebalanceMode.ENGAGE,
            state,
            result,
            self._execution.twap_max_trade_size,
            self._execution.slippage_tolerance,
        )

    def disengage_for_state(self, state: ExecutionState) -> RebalancePlan:
        """Plan a full unwind to 1x, or the largest safe chunk toward it."""
        result = compute_rebalance(state, self._methodology, PRECISE_UNIT)
        slippage = self._execution.slippage_tolerance
        if result.total_rebalance_notional == 0:
            return RebalancePlan(
                mode=RebalanceMode.DISENGAGE,
                result=result,
                slippage_tolerance=slippage,
                reason="Position already unlevered",
            )

        max_borrow = self._market.max_borrow_for_delever(
            state, self._execution.unutilized_leverage_percentage
        )
        if is_buffer_breached(max_borrow):
            return self._breached(RebalanceMode.DISENGAGE, result, max_borrow, slippage)

        chunk = chunk_rebalance_notional(
            result.total_rebalance_notional,
            self._execution.twap_max_trade_size,
            max_borrow,
        )
        if chunk < result.total_rebalance_notional:
            return RebalancePlan(
                mode=RebalanceMode.DISENGAGE,
                result=result,
                chunk_rebalance_notional=chunk,
                chunk_rebalance_units=units_for_notional(chunk, state.total_supply),
                max_borrow=max_borrow,
                slippage_tolerance=slippage,
                executable=chunk > 0,
                reason="Partial unwind toward 1x, capped by trade size or borrow headroom",
            )

        redeem_units = max_redeem_for_delever_to_zero(
            state.current_leverage_ratio,
            PRECISE_UNIT,
            state.collateral_balance,
            state.total_supply,
            slippage,
        )
        return RebalancePlan(
            mode=RebalanceMode.DISENGAGE,
            result=result,
            chunk_rebalance_notional=result.total_rebalance_notional,
            chunk_rebalance_units=redeem_units,
            max_borrow=max_borrow,
            slippage_tolerance=slippage,
            executable=redeem_units > 0,
            reason="Full unwind to 1x",
        )

    def _size_chunk(
        self,
        mode: RebalanceMode,
        state: ExecutionState,
        result: RebalanceResult,
        max_trade_size: int,
        slippage: int,
    ) -> RebalancePlan:
        if result.total_rebalance_notional == 0:
            return RebalancePlan(
                mode=mode,
                result=result,
                slippage_tolerance=slippage,
                reason="Leverage already at recentered ratio",
            )

        max_borrow: int | None = None
        if not result.is_lever:
            max_borrow = self._market.max_borrow_for_delever(
                state, self._execution.unutilized_leverage_percentage
            )
            if is_buffer_breached(max_borrow):
                return self._breached(mode, result, max_borrow, slippage)

        chunk = chunk_rebalance_notional(
            result.total_rebalance_notional, max_trade_size, max_borrow
        )
        units = units_for_notional(chunk, state.total_supply)
        direction = "Lever" if result.is_lever else "Delever"

        # Ripcord always ends any TWAP in progress
        twap_leverage_ratio = 0
        if mode is not RebalanceMode.RIPCORD and chunk < result.total_rebalance_notional:
            twap_leverage_ratio = result.new_leverage_ratio

        return RebalancePlan(
            mode=mode,
            result=result,
            chunk_rebalance_notional=chunk,
            chunk_rebalance_units=units,
            max_borrow=max_borrow,
            slippage_tolerance=slippage,
            executable=units > 0,
            twap_leverage_ratio=twap_leverage_ratio,
            reason=f"{direction} toward {format_fixed(result.new_leverage_ratio)}x",
        )

    @staticmethod
    def _breached(
        mode: RebalanceMode,
        result: RebalanceResult,
        max_borrow: int,
        slippage: int,
    ) -> RebalancePlan:
        return RebalancePlan(
            mode=mode,
            result=result,
            max_borrow=max_borrow,
            slippage_tolerance=slippage,
            emergency=True,
            executable=False,
            reason="Borrow headroom exhausted: position is past its safety buffer",
        )

    # ------------------------------------------------------------------
    # State reading
    # ------------------------------------------------------------------

    async def read_state(self) -> ExecutionState:
        """Read one snapshot, overlaying oracle prices when configured."""
        state = await self._source.read_state()
        if self._oracle is None:
            return state

        prices = await self._oracle.fetch_prices([COLLATERAL_FEED, BORROW_FEED])
        if COLLATERAL_FEED not in prices or BORROW_FEED not in prices:
            logger.warning("Oracle prices incomplete, keeping snapshot prices")
            return state
        return reprice_state(state, prices[COLLATERAL_FEED], prices[BORROW_FEED])

    # ------------------------------------------------------------------
    # Formatting helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _now_str() -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

    def _build_plan_message(self, plan: RebalancePlan, state: ExecutionState) -> str:
        lines = [
            f"📊 Rebalance plan · {state.market.value} · {plan.mode.value.upper()}",
            "",
            f"Current leverage: {format_fixed(state.current_leverage_ratio)}x",
        ]
        if plan.result is not None:
            lines.append(f"New leverage: {format_fixed(plan.result.new_leverage_ratio)}x")
            lines.append(
                f"Total notional: {format_fixed(plan.result.total_rebalance_notional)}"
            )
        if plan.executable:
            lines.append(f"Chunk notional: {format_fixed(plan.chunk_rebalance_notional)}")
            lines.append(f"Chunk per unit: {format_fixed(plan.chunk_rebalance_units, 8)}")
            lines.append(f"Slippage: {format_fixed(plan.slippage_tolerance * 100)}%")
        if plan.max_borrow is not None:
            lines.append(f"Borrow headroom: {format_fixed(plan.max_borrow)}")
        if plan.twap_leverage_ratio:
            lines.append(f"TWAP target: {format_fixed(plan.twap_leverage_ratio)}x")
        lines += ["", plan.reason, "", f"{self._now_str()} UTC"]
        return "\n".join(lines)

    def _build_emergency_alert(self, plan: RebalancePlan, state: ExecutionState) -> str:
        return (
            f"🚨 EMERGENCY — leverage {format_fixed(state.current_leverage_ratio)}x\n"
            f"\n"
            f"Market: {state.market.value}\n"
            f"Mode: {plan.mode.value}\n"
            f"Borrow headroom: {format_fixed(plan.max_borrow or 0)}\n"
            f"\n"
            f"{plan.reason}\n"
            f"Ordinary rebalancing is disabled; use the incentivized flow.\n"
            f"\n"
            f"{self._now_str()} UTC"
        )

    # ------------------------------------------------------------------
    # Notification dispatch
    # ------------------------------------------------------------------

    async def _send_log(self, message: str, silent: bool = True) -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_log(message, silent=silent)
            except Exception as e:
                logger.error("Notifier send_log failed: %s", e)

    async def _send_alert(self, message: str, subject: str = "") -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_alert(message, subject=subject)
            except Exception as e:
                logger.error("Notifier send_alert failed: %s", e)

    async def _report(self, plan: RebalancePlan, state: ExecutionState) -> None:
        logger.info(
            "Plan — %s  leverage %sx  executable=%s  chunk=%s  %s",
            plan.mode.value,
            format_fixed(state.current_leverage_ratio),
            plan.executable,
            format_fixed(plan.chunk_rebalance_notional),
            plan.reason,
        )
        await self._send_log(self._build_plan_message(plan, state), silent=True)

        if plan.emergency:
            logger.warning(
                "Safety buffer breached, borrow headroom %s",
                format_fixed(plan.max_borrow or 0),
            )
            await self._send_alert(
                self._build_emergency_alert(plan, state),
                subject="🚨 EMERGENCY: Safety buffer breached",
            )
        elif plan.mode is RebalanceMode.RIPCORD:
            await self._send_alert(
                self._build_plan_message(plan, state),
                subject="⚠️ RIPCORD: Leverage above incentivized ratio",
            )

    # ------------------------------------------------------------------
    # Core workflows
    # ------------------------------------------------------------------

    async def plan(self) -> RebalancePlan:
        """Read fresh state, plan one rebalance step, and report it."""
        state = await self.read_state()
        plan = self.plan_for_state(state)
        await self._report(plan, state)
        return plan

    async def disengage(self) -> RebalancePlan:
        """Read fresh state, plan an unwind step, and report it."""
        state = await self.read_state()
        plan = self.disengage_for_state(state)
        await self._report(plan, state)
        return plan

    async def engage(self) -> RebalancePlan:
        """Read fresh state, plan the first lever trade, and report it."""
        state = await self.read_state()
        plan = self.engage_for_state(state)
        await self._report(plan, state)
        return plan

    async def run_continuous(self, interval_minutes: int | None = None) -> None:
        """Re-plan from fresh state every ``interval_minutes``."""
        interval = interval_minutes or self._config.watch_interval_minutes
        logger.info("Starting rebalance watch (planning every %d minutes)", interval)

        while True:
            try:
                await self.plan()
                await asyncio.sleep(interval * 60)
            except Exception as e:
                logger.error("Error in planning loop: %s", e)
                await asyncio.sleep(60)
