# -*- coding: utf-8 -*-
"""
Smart Queue Facade Module

Provides a unified interface for the presentation layer to access the queue,
the recommendation pipeline and the smart queue settings.

Design Principles:
- The presentation layer should only depend on this Facade, not directly on underlying services.
- The Facade only exposes "use-case level methods" the presentation layer needs.
- Internal service references are hidden from the outside.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Optional, Sequence

from core.event_bus import EventBus, EventType
from models.queue_state import QueueSnapshot, RepeatMode
from models.recommendation import SimilarityPreference
from models.track import Track

if TYPE_CHECKING:
    from models.smart_queue_settings import SmartQueueSettings
    from services.auto_queue_controller import AutoQueueController
    from services.queue_service import QueueService
    from services.recommendation_cache_service import RecommendationCacheService
    from services.recommendation_service import RecommendationService
    from services.smart_queue_settings_service import SmartQueueSettingsService

logger = logging.getLogger(__name__)


class SmartQueueFacade:
    """Smart Queue Facade

    Presentation use-case facade - narrows the dependency surface between the
    presentation layer and the service layer.

    Usage Example:
        facade = container.facade
        facade.subscribe(EventType.QUEUE_CHANGED, render_queue)
        facade.subscribe(EventType.AUTO_QUEUE_STATE_CHANGED, show_spinner)

        facade.play_now(track)
        await facade.play_smart_mix([track_a, track_b])
    """

    def __init__(
        self,
        queue: "QueueService",
        recommendations: "RecommendationService",
        settings_service: "SmartQueueSettingsService",
        auto_queue: "AutoQueueController",
        event_bus: EventBus,
        cache: Optional["RecommendationCacheService"] = None,
    ):
        self._queue = queue
        self._recommendations = recommendations
        self._settings = settings_service
        self._auto_queue = auto_queue
        self._event_bus = event_bus
        self._cache = cache

    # =========================================================================
    # Queue State
    # =========================================================================

    def snapshot(self) -> QueueSnapshot:
        return self._queue.snapshot()

    @property
    def current_track(self) -> Optional[Track]:
        return self._queue.current_track

    @property
    def is_fetching(self) -> bool:
        """Whether an auto-queue refill is in flight (loading indicator)."""
        return self._auto_queue.is_fetching

    # =========================================================================
    # Navigation
    # =========================================================================

    def play_now(self, track: Track) -> None:
        self._queue.play_now(track)

    def next_track(self) -> Optional[Track]:
        return self._queue.advance()

    def previous_track(self) -> Optional[Track]:
        return self._queue.go_back()

    def play_from_queue(self, index: int) -> Track:
        return self._queue.play_from_queue(index)

    # =========================================================================
    # Queue Editing
    # =========================================================================

    def add_to_queue(self, tracks: Iterable[Track], check_duplicates: bool = False) -> List[Track]:
        return self._queue.enqueue(tracks, check_duplicates=check_duplicates)

    def play_next(self, tracks: Iterable[Track]) -> List[Track]:
        return self._queue.enqueue_next(tracks)

    def remove_from_queue(self, index: int) -> Track:
        return self._queue.remove(index)

    def clear_queue(self) -> None:
        self._queue.clear()

    def reorder_queue(self, old_index: int, new_index: int) -> None:
        self._queue.reorder(old_index, new_index)

    def toggle_shuffle(self) -> bool:
        return self._queue.toggle_shuffle()

    def cycle_repeat_mode(self) -> RepeatMode:
        return self._queue.cycle_repeat_mode()

    def set_repeat_mode(self, mode: RepeatMode) -> None:
        self._queue.set_repeat_mode(mode)

    # =========================================================================
    # Recommendations
    # =========================================================================

    async def add_similar_tracks(self, track: Optional[Track] = None, limit: int = 5) -> List[Track]:
        """Append tracks similar to `track` (default: the current track).

        Returns:
            The tracks actually added to the queue.
        """
        seed = track or self._queue.current_track
        if seed is None:
            return []
        similar = await self._recommendations.similar_tracks(
            seed, limit, excluded_ids=self._queue.exclusion_ids()
        )
        return self._queue.enqueue(similar, check_duplicates=True)

    async def play_smart_mix(
        self,
        seeds: Sequence[Track],
        count: int = 50,
        preference: Optional[SimilarityPreference] = None,
    ) -> List[Track]:
        """Replace the queue with a mix blended from several seeds.

        Does nothing (returns []) when smart mix is disabled or no track could
        be recommended. If nothing is playing, the first mix track starts.
        """
        settings = self._settings.current()
        if not settings.smart_mix_enabled:
            logger.info("Smart mix requested while disabled")
            return []

        mix = await self._recommendations.generate_smart_mix(
            seeds, count, preference or settings.similarity_preference
        )
        if not mix:
            return []

        self._queue.replace_queue(mix)
        if self._queue.current_track is None:
            self._queue.advance()

        self._event_bus.publish_sync(EventType.SMART_MIX_APPLIED, mix)
        return mix

    def purge_expired_recommendations(self) -> int:
        if self._cache is None:
            return 0
        return self._cache.purge_expired()

    # =========================================================================
    # Settings
    # =========================================================================

    def get_settings(self) -> "SmartQueueSettings":
        return self._settings.current()

    def update_settings(self, **changes: Any) -> "SmartQueueSettings":
        """Validate and persist a settings change; re-evaluates the auto-queue trigger."""
        settings = self._settings.update(**changes)
        self._auto_queue.evaluate()
        return settings

    # =========================================================================
    # Events
    # =========================================================================

    def subscribe(self, event_type: EventType, callback: Callable[[Any], None]) -> str:
        return self._event_bus.subscribe(event_type, callback)

    def unsubscribe(self, subscription_id: str) -> bool:
        return self._event_bus.unsubscribe(subscription_id)
