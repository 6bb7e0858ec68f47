"""
Recommendation cache service

Persists the candidate list fetched for a seed track so repeated lookups
within the TTL window make no network call.

- One row per seed track; a write always replaces the whole row
- Expiry is checked at read time against an injectable clock
- purge_expired() is the periodic sweep (storage growth only)
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional
import json
import logging
import sqlite3

from core.ports.database import IDatabase
from models.recommendation import RecommendationCacheEntry, RecommendationSource
from models.track import Track, parse_tracks
from services.config_service import ConfigService

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecommendationCacheService:
    def __init__(
        self,
        db: IDatabase,
        config: ConfigService,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._db = db
        self._config = config
        self._clock = clock or utc_now

    def enabled(self) -> bool:
        return bool(self._config.get("recommendations.cache.enabled", True))

    @property
    def ttl(self) -> timedelta:
        return timedelta(hours=self._config.get_float("recommendations.cache.ttl_hours", 24))

    def get(self, seed_track_id: int) -> Optional[RecommendationCacheEntry]:
        """Cached entry for a seed, or None on miss, expiry or unreadable row."""
        if not self.enabled():
            return None

        row = self._db.fetch_one(
            "SELECT seed_track_id, tracks_json, source, created_at, expires_at "
            "FROM recommendation_cache WHERE seed_track_id = ?",
            (int(seed_track_id),),
        )
        if not row:
            logger.debug("Recommendation cache miss: %s", seed_track_id)
            return None

        try:
            entry = RecommendationCacheEntry(
                seed_track_id=int(row["seed_track_id"]),
                tracks=tuple(self._parse_tracks(row.get("tracks_json", ""))),
                source=RecommendationSource(row["source"]),
                created_at=datetime.fromisoformat(row["created_at"]),
                expires_at=datetime.fromisoformat(row["expires_at"]),
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("Discarding unreadable recommendation cache row for seed %s", seed_track_id)
            return None

        if entry.is_expired(self._clock()):
            logger.debug("Recommendation cache expired: %s", seed_track_id)
            return None

        logger.debug("Recommendation cache hit: %s (%d tracks)", seed_track_id, len(entry.tracks))
        return entry

    def put(
        self,
        seed_track_id: int,
        tracks: Iterable[Track],
        source: RecommendationSource,
    ) -> Optional[RecommendationCacheEntry]:
        """Write a fresh entry for a seed, replacing any existing one."""
        if not self.enabled():
            return None

        now = self._clock()
        entry = RecommendationCacheEntry(
            seed_track_id=int(seed_track_id),
            tracks=tuple(tracks),
            source=source,
            created_at=now,
            expires_at=now + self.ttl,
        )
        raw = json.dumps([t.to_dict() for t in entry.tracks], ensure_ascii=False)

        self._db.execute(
            "INSERT OR REPLACE INTO recommendation_cache(seed_track_id, tracks_json, source, created_at, expires_at) "
            "VALUES(?, ?, ?, ?, ?)",
            (
                entry.seed_track_id,
                raw,
                entry.source.value,
                entry.created_at.isoformat(),
                entry.expires_at.isoformat(),
            ),
        )
        return entry

    def purge_expired(self) -> int:
        """Delete every expired entry; returns the number of rows removed."""
        now = self._clock()
        rows = self._db.fetch_all("SELECT seed_track_id, expires_at FROM recommendation_cache")

        expired: List[int] = []
        for row in rows:
            try:
                if datetime.fromisoformat(row["expires_at"]) <= now:
                    expired.append(int(row["seed_track_id"]))
            except (TypeError, ValueError):
                expired.append(int(row["seed_track_id"]))

        if not expired:
            return 0

        placeholders = ",".join(["?"] * len(expired))
        try:
            with self._db.transaction():
                self._db.execute(
                    f"DELETE FROM recommendation_cache WHERE seed_track_id IN ({placeholders})",
                    tuple(expired),
                )
        except sqlite3.Error:
            logger.exception("Failed to purge recommendation cache")
            raise

        logger.info("Purged %d expired recommendation cache entries", len(expired))
        return len(expired)

    def _parse_tracks(self, raw: str) -> List[Track]:
        data = json.loads(raw or "[]")
        if not isinstance(data, list):
            raise ValueError("tracks_json is not a list")
        return parse_tracks(data)
