"""Named queries on the ``kv_store`` table.

Values are opaque text; the snapshot gateway stores JSON documents.
"""

from __future__ import annotations

from ipsmonitor.storage.database import Database


def get_value(db: Database, key: str) -> str | None:
    row = db.fetchone("SELECT value FROM kv_store WHERE key = ?", (key,))
    return row["value"] if row else None


def set_value(db: Database, key: str, value: str) -> None:
    """Insert or overwrite the value stored under ``key``."""
    with db.transaction() as cur:
        cur.execute(
            """INSERT INTO kv_store (key, value, updated_at)
            VALUES (?, ?, datetime('now'))
            ON CONFLICT(key) DO UPDATE SET
                value=excluded.value,
                updated_at=excluded.updated_at""",
            (key, value),
        )


def delete_value(db: Database, key: str) -> bool:
    """Delete a key. Returns True if a row was deleted."""
    with db.transaction() as cur:
        cur.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        return cur.rowcount > 0

