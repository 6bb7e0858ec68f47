"""
Recommendation audit log

Write-only record of every recommendation request (seeds, results, source,
latency, outcome). Nothing in the smart queue reads these rows back; they
exist for external observability.
"""

from __future__ import annotations

from typing import Optional
import json
import logging

from core.ports.database import IDatabase
from models.recommendation import RecommendationLogEntry
from services.config_service import ConfigService

logger = logging.getLogger(__name__)


class RecommendationLogService:
    def __init__(self, db: IDatabase, config: ConfigService, user_id: Optional[str] = None):
        self._db = db
        self._config = config
        self._user_id = user_id or str(config.get("user.id", "default"))

    def enabled(self) -> bool:
        return bool(self._config.get("recommendations.logging.enabled", True))

    def log(self, entry: RecommendationLogEntry) -> None:
        """Insert one log row. Database errors propagate to the caller."""
        if not self.enabled():
            return

        row_id = self._db.insert(
            "recommendation_logs",
            {
                "user_id": self._user_id,
                "seed_track_ids_json": json.dumps(entry.seed_track_ids),
                "seed_tracks_json": json.dumps([t.to_dict() for t in entry.seed_tracks], ensure_ascii=False),
                "recommended_track_ids_json": json.dumps(entry.recommended_track_ids),
                "recommended_tracks_json": json.dumps(
                    [t.to_dict() for t in entry.recommended_tracks], ensure_ascii=False
                ),
                "source": entry.source.value,
                "request_params_json": json.dumps(entry.request_params, ensure_ascii=False, default=str),
                "response_time_ms": int(entry.response_time_ms),
                "success": 1 if entry.success else 0,
                "error_message": entry.error_message,
                "context": entry.context.value,
            },
        )
        logger.debug(
            "Logged recommendation #%s: %s via %s (%d tracks, %d ms)",
            row_id, entry.context.value, entry.source.value,
            len(entry.recommended_tracks), entry.response_time_ms,
        )
