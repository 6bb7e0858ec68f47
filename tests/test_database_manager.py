"""
DatabaseManager transaction and schema tests.

These tests are used to detect early issues such as transactions failing to
rollback/commit, or migrations not being applied.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest


def _insert_cache_row(db, seed_id: int):
    db.execute(
        "INSERT INTO recommendation_cache (seed_track_id, tracks_json, source, created_at, expires_at) "
        "VALUES (?, ?, ?, ?, ?)",
        (seed_id, "[]", "radio", "2024-01-01T00:00:00+00:00", "2024-01-02T00:00:00+00:00"),
    )


def test_schema_creates_tables(tmp_path: Path):
    from core.database import DatabaseManager

    db = DatabaseManager(str(tmp_path / "t.db"))
    tables = {
        row["name"]
        for row in db.fetch_all("SELECT name FROM sqlite_master WHERE type = 'table'")
    }

    assert {"recommendation_cache", "recommendation_logs", "smart_queue_settings", "queue_state"} <= tables
    db.close()


def test_migration_adds_smart_mix_column(tmp_path: Path):
    from core.database import DatabaseManager
    from core.migrations import column_exists

    db = DatabaseManager(str(tmp_path / "t.db"))

    assert column_exists(db, "smart_queue_settings", "smart_mix_enabled")
    db.close()

    # Reopening runs migrations again without failing
    reopened = DatabaseManager(str(tmp_path / "t.db"))
    assert column_exists(reopened, "smart_queue_settings", "smart_mix_enabled")
    reopened.close()


def test_transaction_commits_on_success(tmp_path: Path):
    from core.database import DatabaseManager

    db = DatabaseManager(str(tmp_path / "t.db"))

    with db.transaction():
        _insert_cache_row(db, 1)

    row = db.fetch_one("SELECT seed_track_id FROM recommendation_cache WHERE seed_track_id = ?", (1,))
    assert row is not None
    db.close()


def test_transaction_rolls_back_on_exception(tmp_path: Path):
    from core.database import DatabaseManager

    db = DatabaseManager(str(tmp_path / "t.db"))

    with pytest.raises(RuntimeError):
        with db.transaction():
            _insert_cache_row(db, 1)
            raise RuntimeError("boom")

    row = db.fetch_one("SELECT seed_track_id FROM recommendation_cache WHERE seed_track_id = ?", (1,))
    assert row is None
    db.close()


def test_write_outside_transaction_is_visible_to_new_connection(tmp_path: Path):
    from core.database import DatabaseManager

    path = str(tmp_path / "t.db")
    db = DatabaseManager(path)
    _insert_cache_row(db, 7)
    db.close()

    reopened = DatabaseManager(path)
    assert reopened.fetch_one("SELECT source FROM recommendation_cache WHERE seed_track_id = 7") == {"source": "radio"}
    reopened.close()


def test_insert_and_delete_helpers(tmp_path: Path):
    from core.database import DatabaseManager

    db = DatabaseManager(str(tmp_path / "t.db"))

    row_id = db.insert("recommendation_logs", {
        "user_id": "u",
        "seed_track_ids_json": "[1]",
        "seed_tracks_json": "[]",
        "recommended_track_ids_json": "[]",
        "recommended_tracks_json": "[]",
        "source": "none",
        "success": 0,
    })
    assert row_id > 0
    assert db.delete("recommendation_logs", "id = ?", (row_id,)) == 1
    assert db.fetch_all("SELECT id FROM recommendation_logs") == []
    db.close()


def test_sql_errors_propagate(tmp_path: Path):
    from core.database import DatabaseManager

    db = DatabaseManager(str(tmp_path / "t.db"))

    with pytest.raises(sqlite3.Error):
        db.execute("SELECT * FROM no_such_table")
    db.close()
