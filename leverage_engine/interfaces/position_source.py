"""Position source protocol — position accounting readout."""
from typing import Protocol

from ..models import ExecutionState


class PositionSource(Protocol):
    """Abstract interface returning one consistent position snapshot."""

    async def read_state(self) -> ExecutionState: ...
