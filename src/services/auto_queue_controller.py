"""
Auto-Queue Controller Module

Watches queue transitions and refills the queue with recommendations when
it runs low. At most one refill is in flight; triggers arriving meanwhile
are dropped.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Callable, List, Optional, Set

from core.event_bus import EventBus, EventType
from models.queue_state import QueueSnapshot
from models.recommendation import RecommendationContext
from models.smart_queue_settings import SmartQueueSettings
from models.track import Track
from services.config_service import ConfigService
from services.queue_service import QueueService
from services.recommendation_service import RecommendationService

logger = logging.getLogger(__name__)


class AutoQueueController:
    """
    Auto-Queue Controller

    Example:
        controller = AutoQueueController(queue, recommendations, settings.current, event_bus, config)
        controller.start()   # listen to QUEUE_CHANGED / TRACK_CHANGED

        # Inside a running event loop, every qualifying queue change now
        # schedules a refill task.
    """

    def __init__(
        self,
        queue: QueueService,
        recommendations: RecommendationService,
        settings: Callable[[], SmartQueueSettings],
        event_bus: EventBus,
        config: ConfigService,
    ):
        self._queue = queue
        self._recommendations = recommendations
        self._settings = settings
        self._event_bus = event_bus

        self._target_length = config.get_int("smart_queue.target_queue_length", 20)
        self._over_request_factor = config.get_float("smart_queue.over_request_factor", 1.5)

        self._is_fetching = False
        self._sub_ids: List[str] = []
        self._tasks: Set[asyncio.Task] = set()
        self._active_task: Optional[asyncio.Task] = None

    @property
    def is_fetching(self) -> bool:
        return self._is_fetching

    def start(self) -> None:
        """Subscribe to queue events"""
        if self._sub_ids:
            return
        self._sub_ids.append(self._event_bus.subscribe(EventType.QUEUE_CHANGED, self._on_queue_event))
        self._sub_ids.append(self._event_bus.subscribe(EventType.TRACK_CHANGED, self._on_queue_event))

    def stop(self) -> None:
        for sub_id in self._sub_ids:
            self._event_bus.unsubscribe(sub_id)
        self._sub_ids.clear()

    async def wait_idle(self) -> None:
        """Wait for scheduled refills to finish"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ===== Decision =====

    def should_trigger(self, snapshot: QueueSnapshot, settings: SmartQueueSettings) -> bool:
        return (
            settings.auto_queue_enabled
            and not self._is_fetching
            and snapshot.queue_length <= settings.auto_queue_threshold
            and snapshot.current_track is not None
        )

    def requested_count(self, queue_length: int, settings: SmartQueueSettings) -> int:
        """Ask for enough tracks to refill towards the target length, never fewer than the configured count"""
        shortfall = max(0, self._target_length - queue_length)
        return max(settings.auto_queue_count, math.ceil(shortfall * self._over_request_factor))

    def _on_queue_event(self, snapshot: Optional[QueueSnapshot]) -> None:
        self.evaluate(snapshot)

    def evaluate(self, snapshot: Optional[QueueSnapshot] = None) -> Optional[asyncio.Task]:
        """
        Check the trigger condition and schedule a refill on the running loop

        Returns:
            The scheduled task, or None when nothing was triggered
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("Auto-queue evaluation skipped: no running event loop")
            return None

        snapshot = snapshot if isinstance(snapshot, QueueSnapshot) else self._queue.snapshot()
        settings = self._settings()
        if not self.should_trigger(snapshot, settings):
            return None

        self._set_fetching(True)
        task = loop.create_task(self._refill(snapshot.current_track, snapshot.queue_length, settings))
        self._active_task = task
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task is self._active_task:
            # Cancelled before _refill started
            self._active_task = None
            self._set_fetching(False)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Auto-queue refill failed", exc_info=task.exception())

    async def replenish(self) -> List[Track]:
        """Evaluate the current state and, if it qualifies, refill and wait for the result"""
        snapshot = self._queue.snapshot()
        settings = self._settings()
        if not self.should_trigger(snapshot, settings):
            return []
        self._set_fetching(True)
        return await self._refill(snapshot.current_track, snapshot.queue_length, settings)

    # ===== Refill =====

    async def _refill(self, seed: Track, queue_length: int, settings: SmartQueueSettings) -> List[Track]:
        try:
            requested = self.requested_count(queue_length, settings)
            logger.info(
                "Auto-queue triggered: queue=%d threshold=%d, requesting %d tracks seeded by %s",
                queue_length, settings.auto_queue_threshold, requested, seed.id,
            )

            results = await self._recommendations.recommend(
                seed,
                requested,
                excluded_ids=self._queue.exclusion_ids(),
                preference=settings.similarity_preference,
                context=RecommendationContext.AUTO_QUEUE,
            )

            # Appended to whatever the tail is now, even if the queue changed meanwhile
            added = self._queue.enqueue(results, check_duplicates=True) if results else []
            logger.info("Auto-queue added %d/%d tracks", len(added), len(results))
            self._event_bus.publish_sync(EventType.AUTO_QUEUE_COMPLETED, {
                "seed": seed,
                "added": added,
            })
            return added
        finally:
            # Triggers from our own enqueue were dropped; the next queue event re-evaluates
            self._active_task = None
            self._set_fetching(False)

    def _set_fetching(self, value: bool) -> None:
        if self._is_fetching == value:
            return
        self._is_fetching = value
        self._event_bus.publish_sync(EventType.AUTO_QUEUE_STATE_CHANGED, value)
