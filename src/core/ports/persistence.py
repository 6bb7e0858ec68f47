# -*- coding: utf-8 -*-
"""
Persistence Collaborator Port Interfaces

The smart queue core reads settings and writes audit records through these
interfaces; the session owner injects the implementations.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from models.recommendation import RecommendationLogEntry
from models.smart_queue_settings import SmartQueueSettings


@runtime_checkable
class ISettingsStore(Protocol):
    """Smart Queue Settings Store

    Current implementation: SmartQueueSettingsService (SQLite)
    """

    def load(self) -> SmartQueueSettings:
        """Return the current settings snapshot (defaults when nothing is stored)"""
        ...

    def save(self, settings: SmartQueueSettings) -> None:
        ...


@runtime_checkable
class IRecommendationLogger(Protocol):
    """Write-only recommendation audit log

    Current implementation: RecommendationLogService (SQLite)
    """

    def log(self, entry: RecommendationLogEntry) -> None:
        ...
