"""SQLite-backed persistence for the portfolio snapshot."""

from ipsmonitor.storage.database import Database
from ipsmonitor.storage.gateway import SnapshotStore, load_snapshot, save_snapshot

__all__ = ["Database", "SnapshotStore", "load_snapshot", "save_snapshot"]
