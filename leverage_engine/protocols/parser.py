"""Pure parsing helpers for raw market readouts — no I/O."""
from __future__ import annotations

from typing import Any

from ..fixed_point import to_fixed
from ..models import AccountLiquidity


def read_fixed(readout: dict[str, Any], key: str) -> int:
    """Read a decimal field and scale it to 1e18.

    YAML turns bare ``2.5`` into a float; it is re-read through ``str`` so
    the decimal literal, not the binary float, is scaled.
    """
    if key not in readout or readout[key] is None:
        raise ValueError(f"Missing market field '{key}'")
    value = readout[key]
    if isinstance(value, float):
        value = str(value)
    return to_fixed(value)


def read_int(readout: dict[str, Any], key: str, default: int | None = None) -> int:
    """Read an integer field (seconds, basis points)."""
    if key not in readout or readout[key] is None:
        if default is None:
            raise ValueError(f"Missing market field '{key}'")
        return default
    return int(readout[key])


def parse_account_liquidity(raw: dict[str, Any]) -> AccountLiquidity:
    """Parse an aggregated account-data readout.

    ``liquidation_threshold_bps`` is basis points (8250 = 82.5%).
    """
    return AccountLiquidity(
        total_collateral_base=read_fixed(raw, "total_collateral_base"),
        total_debt_base=read_fixed(raw, "total_debt_base"),
        liquidation_threshold_bps=read_int(raw, "liquidation_threshold_bps"),
    )
