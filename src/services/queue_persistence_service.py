"""
Queue persistence service

Keeps the last queue state (current track, queue, history, shuffle and
repeat) in the database so it can be restored on the next start:
- saves on every queue, track, shuffle or repeat change
- restores into QueueService when the container is created
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional

from core.event_bus import EventBus, EventType
from core.ports.database import IDatabase
from models.queue_state import QueueSnapshot, RepeatMode
from models.track import Track, TrackParseError, parse_tracks
from services.config_service import ConfigService
from services.queue_service import QueueService

logger = logging.getLogger(__name__)


class QueuePersistenceService:
    SAVE_EVENTS = (
        EventType.QUEUE_CHANGED,
        EventType.TRACK_CHANGED,
        EventType.SHUFFLE_CHANGED,
        EventType.REPEAT_MODE_CHANGED,
    )

    def __init__(
        self,
        db: IDatabase,
        config: ConfigService,
        event_bus: EventBus,
        user_id: Optional[str] = None,
    ):
        self._db = db
        self._event_bus = event_bus
        self._user_id = user_id or str(config.get("user.id", "default"))

        self._enabled = bool(config.get("queue.persist", True))
        self._max_items = config.get_int("queue.persist_max_items", 500)

        self._queue: Optional[QueueService] = None
        self._sub_ids: List[str] = []
        self._suppress = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    def attach(self, queue: QueueService) -> None:
        """Bind the queue and save its state whenever it changes."""
        self._queue = queue
        if not self._enabled or self._sub_ids:
            return
        for event_type in self.SAVE_EVENTS:
            self._sub_ids.append(self._event_bus.subscribe(event_type, self._on_state_changed))

    def shutdown(self) -> None:
        for sub_id in self._sub_ids:
            self._event_bus.unsubscribe(sub_id)
        self._sub_ids.clear()
        self._queue = None

    def save(self, snapshot: QueueSnapshot) -> None:
        """Store a snapshot, replacing the previous one."""
        if not self._enabled:
            return

        history = list(snapshot.history)
        queue = list(snapshot.queue)
        if self._max_items > 0:
            queue = queue[: self._max_items]
            history = history[-self._max_items:]

        payload: Dict[str, Any] = {
            "current_track": snapshot.current_track.to_dict() if snapshot.current_track else None,
            "queue": [t.to_dict() for t in queue],
            "history": [t.to_dict() for t in history],
            "is_shuffled": snapshot.is_shuffled,
            "repeat_mode": snapshot.repeat_mode.value,
        }
        self._db.execute(
            "INSERT OR REPLACE INTO queue_state(user_id, state_json, updated_at) "
            "VALUES(?, ?, CURRENT_TIMESTAMP)",
            (self._user_id, json.dumps(payload, ensure_ascii=False)),
        )

    def load(self) -> Optional[QueueSnapshot]:
        """
        Read the saved snapshot

        Returns:
            The snapshot, or None when nothing usable is stored
        """
        row = self._db.fetch_one("SELECT state_json FROM queue_state WHERE user_id = ?", (self._user_id,))
        if not row or not row.get("state_json"):
            return None

        try:
            data = json.loads(row["state_json"])
        except ValueError:
            logger.warning("Discarding unreadable queue state for user %s", self._user_id)
            self.clear()
            return None
        if not isinstance(data, dict):
            logger.warning("Discarding malformed queue state for user %s", self._user_id)
            self.clear()
            return None

        current: Optional[Track] = None
        if data.get("current_track") is not None:
            try:
                current = Track.from_dict(data["current_track"])
            except TrackParseError as e:
                logger.warning("Saved current track dropped: %s", e)

        try:
            repeat_mode = RepeatMode(data.get("repeat_mode", RepeatMode.NONE.value))
        except ValueError:
            repeat_mode = RepeatMode.NONE

        return QueueSnapshot(
            current_track=current,
            queue=tuple(parse_tracks(data.get("queue") or [])),
            history=tuple(parse_tracks(data.get("history") or [])),
            is_shuffled=bool(data.get("is_shuffled", False)),
            repeat_mode=repeat_mode,
        )

    def restore(self, queue: QueueService) -> bool:
        """Load the saved snapshot into the queue; returns whether anything was restored."""
        if not self._enabled:
            return False

        try:
            snapshot = self.load()
        except sqlite3.Error:
            logger.exception("Failed to load saved queue state")
            return False
        if snapshot is None or (snapshot.current_track is None and not snapshot.queue and not snapshot.history):
            return False

        self._suppress = True
        try:
            queue.restore(snapshot)
        finally:
            self._suppress = False

        logger.info(
            "Restored queue state: %d queued, %d in history, current=%s",
            snapshot.queue_length, len(snapshot.history),
            snapshot.current_track.id if snapshot.current_track else None,
        )
        return True

    def clear(self) -> None:
        """Forget the saved state."""
        self._db.delete("queue_state", "user_id = ?", (self._user_id,))

    def _on_state_changed(self, _data: Any) -> None:
        if self._suppress or self._queue is None:
            return
        try:
            self.save(self._queue.snapshot())
        except sqlite3.Error:
            logger.exception("Failed to save queue state")
