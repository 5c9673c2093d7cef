"""Service modules"""
from .planner import RebalancePlanner

__all__ = ["RebalancePlanner"]
