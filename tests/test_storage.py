"""Tests for the SQLite storage layer and the snapshot gateway."""

from __future__ import annotations

import json
import logging
from datetime import date

from ipsmonitor.config.defaults import STORAGE_KEY
from ipsmonitor.portfolio.models import PortfolioSnapshot
from ipsmonitor.storage.database import Database
from ipsmonitor.storage.gateway import (
    SnapshotStore,
    load_snapshot,
    reset_snapshot,
    save_snapshot,
)
from ipsmonitor.storage.migrations import discover_migrations, ensure_schema, pending_migrations
from ipsmonitor.storage.queries import (
    delete_value,
    get_value,
    set_value,
)


class TestDatabase:
    """Test Database connection and basic operations."""

    def test_connect_creates_file(self, tmp_path):
        db_path = tmp_path / "test.db"
        assert not db_path.exists()
        db = Database(db_path)
        db.connect()
        assert db_path.exists()
        db.close()

    def test_creates_parent_directory(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "test.db"
        with Database(db_path):
            pass
        assert db_path.exists()

    def test_context_manager(self, tmp_path):
        with Database(tmp_path / "test.db") as db:
            db.execute("SELECT 1")

    def test_schema_version_empty(self, tmp_path):
        db = Database(tmp_path / "test.db")
        assert db.schema_version() == 0
        db.close()

    def test_memory_database_creates_no_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with Database(":memory:") as db:
            ensure_schema(db)
            assert db.in_memory
        assert list(tmp_path.iterdir()) == []


class TestMigrations:
    """Test migration system."""

    def test_initial_migration(self, test_db):
        assert test_db.schema_version() >= 1

    def test_tables_exist(self, test_db):
        tables = test_db.fetchall(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        )
        table_names = {r["name"] for r in tables}
        assert {"_schema_version", "kv_store"}.issubset(table_names)

    def test_idempotent(self, test_db):
        v1 = ensure_schema(test_db)
        v2 = ensure_schema(test_db)
        assert v1 == v2

    def test_discovered_in_version_order(self):
        versions = [m.version for m in discover_migrations()]
        assert versions == sorted(versions)
        assert versions[0] == 1

    def test_nothing_pending_after_ensure(self, test_db):
        assert pending_migrations(test_db) == []

    def test_missing_directory(self, tmp_path):
        assert discover_migrations(tmp_path / "nope") == []


class TestKeyValueQueries:
    """Test key-value CRUD operations."""

    def test_set_and_get(self, memory_db):
        set_value(memory_db, "k", "v1")
        assert get_value(memory_db, "k") == "v1"

    def test_overwrite(self, memory_db):
        set_value(memory_db, "k", "v1")
        set_value(memory_db, "k", "v2")
        assert get_value(memory_db, "k") == "v2"
        assert memory_db.fetchone("SELECT COUNT(*) AS n FROM kv_store")["n"] == 1

    def test_missing(self, memory_db):
        assert get_value(memory_db, "nope") is None

    def test_delete(self, memory_db):
        set_value(memory_db, "k", "v")
        assert delete_value(memory_db, "k")
        assert not delete_value(memory_db, "k")

    def test_updated_at_recorded(self, memory_db):
        set_value(memory_db, "k", "v")
        row = memory_db.fetchone("SELECT updated_at FROM kv_store WHERE key = ?", ("k",))
        assert row["updated_at"]


class TestSnapshotGateway:
    """Save/load contract: full overwrite, degrade to empty on failure."""

    def test_round_trip(self, test_db, populated_snapshot):
        assert save_snapshot(test_db, populated_snapshot)
        assert load_snapshot(test_db) == populated_snapshot

    def test_round_trip_survives_reopen(self, tmp_path, populated_snapshot):
        path = tmp_path / "state.db"
        with SnapshotStore.open(path) as store:
            assert store.save(populated_snapshot)
        with SnapshotStore.open(path) as store:
            assert store.load() == populated_snapshot

    def test_stored_as_camel_case_json(self, test_db, populated_snapshot):
        save_snapshot(test_db, populated_snapshot)
        payload = json.loads(get_value(test_db, STORAGE_KEY))
        assert payload["totalValue"] == 100_000_000
        assert "tacticalAdjustments" in payload
        assert payload["securities"][0]["currentWeight"] == 9.0

    def test_save_is_full_overwrite(self, test_db, populated_snapshot):
        save_snapshot(test_db, populated_snapshot)
        save_snapshot(test_db, PortfolioSnapshot.empty("2025-06-30"))
        loaded = load_snapshot(test_db)
        assert loaded.securities == []
        assert loaded.date == "2025-06-30"

    def test_missing_state_loads_default(self, test_db):
        snap = load_snapshot(test_db)
        assert snap == PortfolioSnapshot.empty()
        assert snap.date == date.today().isoformat()

    def test_malformed_json_loads_default(self, test_db, caplog):
        set_value(test_db, STORAGE_KEY, "{not json")
        with caplog.at_level(logging.WARNING):
            snap = load_snapshot(test_db)
        assert snap.securities == []
        assert snap.total_value == 0
        assert "malformed" in caplog.text

    def test_wrong_shape_loads_default(self, test_db):
        set_value(test_db, STORAGE_KEY, json.dumps({"securities": "oops"}))
        assert load_snapshot(test_db).securities == []

    def test_unmigrated_database_loads_default(self, tmp_path):
        with Database(tmp_path / "bare.db") as db:
            assert load_snapshot(db).allocations == []

    def test_failed_save_returns_false(self, tmp_path, populated_snapshot, caplog):
        with Database(tmp_path / "bare.db") as db:
            with caplog.at_level(logging.ERROR):
                assert not save_snapshot(db, populated_snapshot)
        assert "Failed to save" in caplog.text

    def test_unopenable_store_loads_default(self, tmp_path, caplog):
        (tmp_path / "afile").write_text("not a directory")
        db = Database(tmp_path / "afile" / "sub" / "state.db")
        with caplog.at_level(logging.WARNING):
            snap = load_snapshot(db)
        assert snap == PortfolioSnapshot.empty()
        assert "Failed to read" in caplog.text

    def test_unopenable_store_save_returns_false(self, tmp_path, populated_snapshot, caplog):
        (tmp_path / "afile").write_text("not a directory")
        db = Database(tmp_path / "afile" / "sub" / "state.db")
        with caplog.at_level(logging.ERROR):
            assert not save_snapshot(db, populated_snapshot)
            assert not reset_snapshot(db)
        assert "Failed to save" in caplog.text
        assert "Failed to reset" in caplog.text

    def test_mistyped_row_loads_default(self, test_db, caplog):
        payload = {"securities": [{"ticker": "CRDB", "currentWeight": "12"}]}
        set_value(test_db, STORAGE_KEY, json.dumps(payload))
        with caplog.at_level(logging.WARNING):
            snap = load_snapshot(test_db)
        assert snap == PortfolioSnapshot.empty()
        assert "malformed" in caplog.text

    def test_null_weight_loads_default(self, test_db):
        payload = {"securities": [{"ticker": "CRDB", "currentWeight": None}]}
        set_value(test_db, STORAGE_KEY, json.dumps(payload))
        assert load_snapshot(test_db).securities == []

    def test_reset(self, test_db, populated_snapshot):
        save_snapshot(test_db, populated_snapshot)
        assert reset_snapshot(test_db)
        assert load_snapshot(test_db).securities == []
        assert not reset_snapshot(test_db)

    def test_custom_key(self, test_db, populated_snapshot):
        store = SnapshotStore(test_db, key="other_book")
        store.save(populated_snapshot)
        assert load_snapshot(test_db).securities == []
        assert store.load() == populated_snapshot
