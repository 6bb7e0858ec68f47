"""
Smart queue settings service

Loads the per-user SmartQueueSettings once per session, serves the current
immutable snapshot to every decision, and persists user changes.
"""

from __future__ import annotations

from typing import Any, Optional
import logging
import sqlite3
import threading

from core.event_bus import EventBus, EventType
from core.ports.database import IDatabase
from models.smart_queue_settings import SettingsValidationError, SmartQueueSettings
from services.config_service import ConfigService

logger = logging.getLogger(__name__)


class SmartQueueSettingsService:
    def __init__(
        self,
        db: IDatabase,
        config: ConfigService,
        event_bus: EventBus,
        user_id: Optional[str] = None,
    ):
        self._db = db
        self._config = config
        self._event_bus = event_bus
        self._user_id = user_id or str(config.get("user.id", "default"))

        self._lock = threading.Lock()
        self._current: Optional[SmartQueueSettings] = None

    @property
    def user_id(self) -> str:
        return self._user_id

    def defaults(self) -> SmartQueueSettings:
        """Settings used when the store has no row for the user (from configuration)."""
        section = self._config.get("smart_queue", {}) or {}
        try:
            return SmartQueueSettings.from_dict(section)
        except (SettingsValidationError, TypeError, ValueError) as e:
            logger.warning("Invalid smart_queue defaults in configuration, using built-ins: %s", e)
            return SmartQueueSettings()

    def current(self) -> SmartQueueSettings:
        """The session snapshot; loaded from the store on first use."""
        with self._lock:
            if self._current is None:
                self._current = self._read()
            return self._current

    def load(self) -> SmartQueueSettings:
        """Re-read settings from the store, replacing the session snapshot."""
        settings = self._read()
        with self._lock:
            self._current = settings
        return settings

    def _read(self) -> SmartQueueSettings:
        defaults = self.defaults()
        try:
            row = self._db.fetch_one(
                "SELECT auto_queue_enabled, auto_queue_threshold, auto_queue_count, "
                "similarity_preference, smart_mix_enabled "
                "FROM smart_queue_settings WHERE user_id = ?",
                (self._user_id,),
            )
        except sqlite3.Error:
            logger.exception("Failed to load smart queue settings; using defaults")
            return defaults

        if not row:
            return defaults

        try:
            return SmartQueueSettings.from_dict(row, defaults=defaults)
        except (SettingsValidationError, TypeError, ValueError) as e:
            logger.warning("Stored smart queue settings are invalid, using defaults: %s", e)
            return defaults

    def save(self, settings: SmartQueueSettings) -> None:
        """Persist a snapshot. Database errors propagate."""
        self._db.execute(
            "INSERT OR REPLACE INTO smart_queue_settings("
            "user_id, auto_queue_enabled, auto_queue_threshold, auto_queue_count, "
            "similarity_preference, smart_mix_enabled, updated_at) "
            "VALUES(?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP)",
            (
                self._user_id,
                1 if settings.auto_queue_enabled else 0,
                int(settings.auto_queue_threshold),
                int(settings.auto_queue_count),
                settings.similarity_preference.value,
                1 if settings.smart_mix_enabled else 0,
            ),
        )
        with self._lock:
            self._current = settings

        logger.info("Smart queue settings saved for user %s", self._user_id)
        self._event_bus.publish_sync(EventType.SETTINGS_CHANGED, settings)

    def update(self, **changes: Any) -> SmartQueueSettings:
        """
        Apply a partial change to the current snapshot and persist it

        Raises:
            SettingsValidationError: If a value is out of range or unknown
        """
        settings = self.current().with_changes(**changes)
        self.save(settings)
        return settings

    def reset(self) -> SmartQueueSettings:
        """Restore the configured defaults"""
        settings = self.defaults()
        self.save(settings)
        return settings
