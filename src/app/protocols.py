# -*- coding: utf-8 -*-
"""
Protocols Definition Module

Defines the interface protocols (Protocol) for the services held by the
application container. Uses Protocol instead of ABC to support structural
subtyping checks.

Design Decisions:
- Default to using Protocol + @runtime_checkable
- ABC is only used for base classes that share default implementations (MusicProvider)
- Runtime checks are performed as one-time assertions during container assembly or testing
"""

from __future__ import annotations

from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Iterable,
    List,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)

if TYPE_CHECKING:
    from models.queue_state import QueueSnapshot
    from models.recommendation import RecommendationContext, SimilarityPreference
    from models.smart_queue_settings import SmartQueueSettings
    from models.track import Track


# =============================================================================
# Event Bus Protocol
# =============================================================================

@runtime_checkable
class IEventBus(Protocol):
    """Event Bus Interface"""

    def subscribe(self, event_type: Enum, callback: Callable[[Any], None]) -> str:
        """Subscribe to an event

        Returns:
            Subscription ID, used to unsubscribe
        """
        ...

    def unsubscribe(self, subscription_id: str) -> bool:
        ...

    def publish_sync(self, event_type: Enum, data: Any = None) -> bool:
        """Publish an event, running every callback in the calling thread"""
        ...

    def clear(self) -> None:
        """Drop every subscription"""
        ...


# =============================================================================
# Configuration Service Protocol
# =============================================================================

@runtime_checkable
class IConfigService(Protocol):
    """Configuration Service Interface"""

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-separated key"""
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def save(self) -> bool:
        ...


# =============================================================================
# Queue Service Protocol
# =============================================================================

@runtime_checkable
class IQueueService(Protocol):
    """Queue State Machine Interface"""

    def snapshot(self) -> "QueueSnapshot":
        ...

    def exclusion_ids(self) -> set:
        """Ids of the current and queued tracks"""
        ...

    def play_now(self, track: "Track") -> None:
        ...

    def advance(self) -> Optional["Track"]:
        ...

    def go_back(self) -> Optional["Track"]:
        ...

    def enqueue(self, tracks: Iterable["Track"], check_duplicates: bool = False) -> List["Track"]:
        ...

    def replace_queue(self, tracks: Iterable["Track"]) -> None:
        ...

    def toggle_shuffle(self) -> bool:
        ...


# =============================================================================
# Recommendation Service Protocol
# =============================================================================

@runtime_checkable
class IRecommendationService(Protocol):
    """Recommendation boundary: always returns a list, never raises"""

    async def recommend(
        self,
        seed: "Track",
        count: int,
        excluded_ids: Optional[Iterable[int]] = None,
        preference: "SimilarityPreference" = ...,
        context: "RecommendationContext" = ...,
    ) -> List["Track"]:
        ...

    async def similar_tracks(
        self,
        seed: "Track",
        limit: int = 5,
        excluded_ids: Optional[Iterable[int]] = None,
    ) -> List["Track"]:
        ...

    async def generate_smart_mix(
        self,
        seeds: Sequence["Track"],
        count: int = 50,
        preference: "SimilarityPreference" = ...,
    ) -> List["Track"]:
        ...


# =============================================================================
# Settings Service Protocol
# =============================================================================

@runtime_checkable
class ISmartQueueSettingsService(Protocol):
    """Session settings snapshot plus persistence"""

    def current(self) -> "SmartQueueSettings":
        ...

    def update(self, **changes: Any) -> "SmartQueueSettings":
        ...

    def save(self, settings: "SmartQueueSettings") -> None:
        ...
