"""Money market protocol — converts market readouts into engine inputs."""
from typing import Any, Protocol

from ..models import ExecutionState, MarketKind


class MoneyMarket(Protocol):
    """Abstract interface over one lending market's balance presentation."""

    @property
    def market_kind(self) -> MarketKind: ...

    def collateral_balance(self, readout: dict[str, Any]) -> int: ...

    def max_borrow_for_delever(
        self, state: ExecutionState, unutilized_leverage_percentage: int
    ) -> int: ...
