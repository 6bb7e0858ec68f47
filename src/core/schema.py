"""
Database Schema Definitions

Contains all table structure and index definitions.
"""

from __future__ import annotations

# Table structure SQL statements
TABLE_STATEMENTS = [
    # Recommendation cache (one live entry per seed track; rows are replaced, never updated)
    """
    CREATE TABLE IF NOT EXISTS recommendation_cache (
        seed_track_id INTEGER PRIMARY KEY,
        tracks_json TEXT NOT NULL,
        source TEXT NOT NULL,
        created_at TEXT NOT NULL,
        expires_at TEXT NOT NULL
    )
    """,

    # Recommendation audit log (write-only from this core)
    """
    CREATE TABLE IF NOT EXISTS recommendation_logs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT NOT NULL,
        seed_track_ids_json TEXT NOT NULL,
        seed_tracks_json TEXT NOT NULL,
        recommended_track_ids_json TEXT NOT NULL,
        recommended_tracks_json TEXT NOT NULL,
        source TEXT NOT NULL,
        request_params_json TEXT,
        response_time_ms INTEGER DEFAULT 0,
        success INTEGER NOT NULL DEFAULT 0,
        error_message TEXT,
        context TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,

    # Per-user smart queue settings
    """
    CREATE TABLE IF NOT EXISTS smart_queue_settings (
        user_id TEXT PRIMARY KEY,
        auto_queue_enabled INTEGER NOT NULL DEFAULT 0,
        auto_queue_threshold INTEGER NOT NULL DEFAULT 3,
        auto_queue_count INTEGER NOT NULL DEFAULT 5,
        similarity_preference TEXT NOT NULL DEFAULT 'balanced',
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,

    # Last queue state per user, restored on startup
    """
    CREATE TABLE IF NOT EXISTS queue_state (
        user_id TEXT PRIMARY KEY,
        state_json TEXT NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
]

# Index SQL statements
INDEX_STATEMENTS = [
    "CREATE INDEX IF NOT EXISTS idx_recommendation_cache_expires ON recommendation_cache(expires_at)",
    "CREATE INDEX IF NOT EXISTS idx_recommendation_logs_user ON recommendation_logs(user_id, id DESC)",
    "CREATE INDEX IF NOT EXISTS idx_recommendation_logs_context ON recommendation_logs(context)",
]


def get_all_schema_statements() -> list:
    """Get all schema statements (tables + indexes)"""
    return TABLE_STATEMENTS + INDEX_STATEMENTS
