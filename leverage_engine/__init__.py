"""Leverage ratio recentering and rebalance sizing for collateral/borrow positions."""

__version__ = "0.1.0"
