"""Position sources."""
from .snapshot import SnapshotFileSource, parse_snapshot

__all__ = ["SnapshotFileSource", "parse_snapshot"]
