"""Protocol interfaces for the leverage engine."""
from .money_market import MoneyMarket
from .notifier import Notifier
from .position_source import PositionSource
from .price_oracle import PriceOracle

__all__ = ["MoneyMarket", "Notifier", "PositionSource", "PriceOracle"]
