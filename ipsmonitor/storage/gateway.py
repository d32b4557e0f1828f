"""Portfolio state persistence.

The whole snapshot is stored as one JSON document under a single fixed
key. Loading never raises: a missing, unreadable or malformed document is
logged and replaced by an empty snapshot dated today. Saving is a full
overwrite; a failed save is logged and reported by the return value so the
caller can try again on the next edit.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path

from ipsmonitor.config.defaults import STORAGE_KEY
from ipsmonitor.portfolio.models import PortfolioSnapshot
from ipsmonitor.storage.database import Database
from ipsmonitor.storage.migrations import ensure_schema
from ipsmonitor.storage.queries import delete_value, get_value, set_value

logger = logging.getLogger(__name__)


def load_snapshot(db: Database, key: str = STORAGE_KEY) -> PortfolioSnapshot:
    """Load the stored snapshot, or an empty default if none is usable."""
    try:
        raw = get_value(db, key)
    except (sqlite3.Error, OSError) as e:
        logger.warning("Failed to read portfolio state %r: %s", key, e)
        return PortfolioSnapshot.empty()

    if raw is None:
        logger.info("No stored portfolio state under %r, using defaults", key)
        return PortfolioSnapshot.empty()

    try:
        return PortfolioSnapshot.from_dict(json.loads(raw))
    except (TypeError, ValueError, KeyError, AttributeError) as e:
        logger.warning("Stored portfolio state %r is malformed, using defaults: %s", key, e)
        return PortfolioSnapshot.empty()


def save_snapshot(db: Database, snapshot: PortfolioSnapshot, key: str = STORAGE_KEY) -> bool:
    """Overwrite the stored snapshot. Returns False if the write failed."""
    try:
        payload = json.dumps(snapshot.to_dict())
        set_value(db, key, payload)
    except (sqlite3.Error, OSError, TypeError, ValueError) as e:
        logger.error("Failed to save portfolio state %r: %s", key, e)
        return False

    logger.info("Portfolio data saved (%d securities)", len(snapshot.securities))
    return True


def reset_snapshot(db: Database, key: str = STORAGE_KEY) -> bool:
    """Remove the stored snapshot. Returns True if one existed."""
    try:
        return delete_value(db, key)
    except (sqlite3.Error, OSError) as e:
        logger.error("Failed to reset portfolio state %r: %s", key, e)
        return False


class SnapshotStore:
    """Load/save contract bound to one database and storage key.

    Usage::

        with SnapshotStore.open("~/.ipsmonitor/ipsmonitor.db") as store:
            snapshot = store.load()
            ...
            store.save(snapshot)
    """

    def __init__(self, db: Database, key: str = STORAGE_KEY) -> None:
        self.db = db
        self.key = key

    @classmethod
    def open(cls, path: str | Path, key: str = STORAGE_KEY) -> SnapshotStore:
        """Open (and migrate) the database at ``path``."""
        db = Database(path)
        ensure_schema(db)
        return cls(db, key)

    def load(self) -> PortfolioSnapshot:
        return load_snapshot(self.db, self.key)

    def save(self, snapshot: PortfolioSnapshot) -> bool:
        return save_snapshot(self.db, snapshot, self.key)

    def reset(self) -> bool:
        return reset_snapshot(self.db, self.key)

    def close(self) -> None:
        self.db.close()

    def __enter__(self) -> SnapshotStore:
        return self

    def __exit__(self, *args) -> None:
        self.close()
