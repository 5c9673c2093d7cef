"""Price oracle protocol — fixed-point price feed abstraction."""
from typing import Protocol


class PriceOracle(Protocol):
    """Abstract interface for fetching 1e18-scaled asset prices."""

    async def fetch_prices(self, symbols: list[str] | None = None) -> dict[str, int]: ...
