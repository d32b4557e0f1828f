"""Schema migrations for the portfolio state store.

Migrations are SQL files in ipsmonitor/migrations/ named NNN_description.sql
and are applied in version order, each exactly once. The highest applied
version is recorded in ``_schema_version`` by the migration itself.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from pathlib import Path
from typing import NamedTuple

from ipsmonitor.storage.database import Database

logger = logging.getLogger(__name__)

MIGRATION_PATTERN = re.compile(r"^(\d{3})_.*\.sql$")
MIGRATION_DIR = Path(__file__).parent.parent / "migrations"


class MigrationError(RuntimeError):
    """A migration script failed; the schema is left at the prior version."""


class Migration(NamedTuple):
    version: int
    name: str
    sql: str


def discover_migrations(directory: Path = MIGRATION_DIR) -> list[Migration]:
    """All migration scripts in ``directory``, lowest version first."""
    if not directory.is_dir():
        logger.warning("Migration directory not found: %s", directory)
        return []

    found = []
    for sql_file in directory.glob("*.sql"):
        match = MIGRATION_PATTERN.match(sql_file.name)
        if match:
            found.append(Migration(int(match.group(1)), sql_file.name, sql_file.read_text()))
    return sorted(found)


def pending_migrations(db: Database) -> list[Migration]:
    current = db.schema_version()
    return [m for m in discover_migrations() if m.version > current]


def ensure_schema(db: Database) -> int:
    """Apply pending migrations. Returns the resulting schema version."""
    pending = pending_migrations(db)
    if not pending:
        version = db.schema_version()
        logger.debug("Schema up to date (version %d)", version)
        return version

    for migration in pending:
        logger.info("Applying migration %s", migration.name)
        try:
            db.executescript(migration.sql)
        except sqlite3.Error as e:
            logger.error("Migration %s failed: %s", migration.name, e)
            raise MigrationError(f"Migration {migration.name} failed: {e}") from e

    version = db.schema_version()
    logger.info("Applied %d migration(s), schema version %d", len(pending), version)
    return version
