"""Money market adapters keyed by :class:`MarketKind`."""
from __future__ import annotations

from ..interfaces.money_market import MoneyMarket
from ..models import MarketKind
from .aave import AaveMarket
from .aave_v3 import AaveV3Market
from .compound import CompoundMarket

# Registry of market adapter factories keyed by market kind.
_MARKET_FACTORIES: dict[MarketKind, type] = {
    MarketKind.COMPOUND: CompoundMarket,
    MarketKind.AAVE: AaveMarket,
    MarketKind.AAVE_V3: AaveV3Market,
}


def get_market(kind: MarketKind | str) -> MoneyMarket:
    """Return the adapter for ``kind`` (enum or its string value)."""
    try:
        market_kind = MarketKind(kind)
    except ValueError:
        raise ValueError(f"Unknown market '{kind}'") from None
    return _MARKET_FACTORIES[market_kind]()


__all__ = ["AaveMarket", "AaveV3Market", "CompoundMarket", "get_market"]
