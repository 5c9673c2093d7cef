"""Price oracle implementations."""
from .pyth import PythOracle

__all__ = ["PythOracle"]
