# -*- coding: utf-8 -*-
"""
Event Bus Module - Publish-Subscribe Pattern Implementation

Provides loose-coupled communication mechanism between modules.

Design Notes:
- This is a pure Python implementation, does not depend on any UI framework
- Queue mutations publish synchronously so observers (the auto-queue controller,
  the presentation layer) see every queue-length transition in order
- Instances are created by AppContainerFactory; there is no global instance
"""

from typing import Dict, Callable, Any
from enum import Enum
import threading
import uuid
import logging

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Event type enumeration"""

    # Queue events
    QUEUE_CHANGED = "queue_changed"
    TRACK_CHANGED = "track_changed"
    HISTORY_CHANGED = "history_changed"
    SHUFFLE_CHANGED = "shuffle_changed"
    REPEAT_MODE_CHANGED = "repeat_mode_changed"

    # Smart queue events
    AUTO_QUEUE_STATE_CHANGED = "auto_queue_state_changed"
    AUTO_QUEUE_COMPLETED = "auto_queue_completed"
    SMART_MIX_APPLIED = "smart_mix_applied"
    SETTINGS_CHANGED = "settings_changed"

    # System events
    CONFIG_CHANGED = "config_changed"
    ERROR_OCCURRED = "error_occurred"


class EventBus:
    """
    Event Bus

    Provides publish-subscribe pattern event system.

    Usage example:
        event_bus = EventBus()

        # Subscribe to event
        def on_queue_changed(snapshot):
            logger.info("Queue length: %d", snapshot.queue_length)

        sub_id = event_bus.subscribe(EventType.QUEUE_CHANGED, on_queue_changed)

        # Publish event
        event_bus.publish_sync(EventType.QUEUE_CHANGED, snapshot)

        # Unsubscribe
        event_bus.unsubscribe(sub_id)
    """

    def __init__(self):
        self._subscribers: Dict[EventType, Dict[str, Callable]] = {}
        self._sub_lock = threading.Lock()

    def subscribe(
        self,
        event_type: EventType,
        callback: Callable[[Any], None]
    ) -> str:
        """
        Subscribe to event

        Args:
            event_type: Event type
            callback: Callback function, receiving event data as an argument

        Returns:
            str: Subscription ID, used for unsubscription
        """
        subscription_id = str(uuid.uuid4())

        with self._sub_lock:
            if event_type not in self._subscribers:
                self._subscribers[event_type] = {}
            self._subscribers[event_type][subscription_id] = callback

        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """
        Unsubscribe

        Args:
            subscription_id: The ID returned when subscribing

        Returns:
            bool: Whether the unsubscription was successful
        """
        with self._sub_lock:
            for event_type in self._subscribers:
                if subscription_id in self._subscribers[event_type]:
                    del self._subscribers[event_type][subscription_id]
                    return True
        return False

    def publish_sync(
        self,
        event_type: EventType,
        data: Any = None,
    ) -> bool:
        """
        Publish event synchronously

        All callbacks will be executed in the current thread, in subscription order.

        Args:
            event_type: Event type
            data: Event data

        Returns:
            bool: Always returns True
        """
        with self._sub_lock:
            callbacks = list(self._subscribers.get(event_type, {}).values())

        for callback in callbacks:
            self._safe_call(callback, data)

        return True

    def _safe_call(self, callback: Callable, data: Any) -> None:
        """Safely call a callback function"""
        try:
            callback(data)
        except Exception:
            # Subscriber errors are logged, never re-published
            logger.exception("Event callback execution error")

    def clear(self) -> None:
        """Clear all subscriptions"""
        with self._sub_lock:
            self._subscribers.clear()

