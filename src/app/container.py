# -*- coding: utf-8 -*-
"""
Application Container Module

Defines the dependency container for the application, holding all service instances centrally.

Design Principles:
- Only the entry point (CLI or host application) holds the complete AppContainer
- The presentation layer accesses services via the facade, not the container
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    import httpx

    from app.protocols import IConfigService, IEventBus
    from core.ports.database import IDatabase
    from services.smart_queue_facade import SmartQueueFacade

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Application Dependency Container

    Holds all service instances centrally, serving as the composition root for dependency injection.

    Usage Example:
        container = AppContainerFactory.create()
        try:
            tracks = await container.recommendations.recommend(seed, 10)
        finally:
            await container.aclose()
    """

    # === Public Attributes ===
    config: "IConfigService"
    event_bus: "IEventBus"
    db: "IDatabase"
    facade: "SmartQueueFacade"

    # === Service References ===
    # Use field(repr=False) to avoid leaking in debug output
    queue: Any = field(default=None, repr=False)
    recommendations: Any = field(default=None, repr=False)
    settings: Any = field(default=None, repr=False)
    auto_queue: Any = field(default=None, repr=False)
    queue_persistence: Any = field(default=None, repr=False)
    cache: Any = field(default=None, repr=False)
    catalog: Any = field(default=None, repr=False)
    http_client: Optional["httpx.AsyncClient"] = field(default=None, repr=False)

    async def aclose(self) -> None:
        """Release all resources

        Should be awaited when the application exits.
        """
        if self.auto_queue is not None:
            self.auto_queue.stop()
            await self.auto_queue.wait_idle()

        if self.queue_persistence is not None:
            self.queue_persistence.shutdown()

        if self.http_client is not None:
            await self.http_client.aclose()

        if self.event_bus is not None:
            self.event_bus.clear()

        if self.db is not None:
            self.db.close()

        logger.debug("Application container closed")
