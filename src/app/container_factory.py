# -*- coding: utf-8 -*-
"""
Container Factory Module

Responsible for creating and assembling all application dependencies.

This is the **only** instance creation point (Composition Root) for the application.
All service instance creation should be done here, not within individual services.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional

import httpx

if TYPE_CHECKING:
    from app.container import AppContainer
    from core.ports.catalog import ICatalogProvider, IRecommendationProvider, ISimilarityProvider
    from services.config_service import ConfigService

logger = logging.getLogger(__name__)

USER_AGENT = "smart-queue/1.0"


class AppContainerFactory:
    """Application Container Factory

    Creates and assembles all application dependencies.

    Usage Example:
        # In main.py
        container = AppContainerFactory.create()

        # In tests (fake providers, temporary database)
        container = AppContainerFactory.create_for_testing(catalog=FakeCatalog(), db_path=tmp)
    """

    @staticmethod
    def create(
        config_path: Optional[str] = None,
        db_path: Optional[str] = None,
    ) -> "AppContainer":
        """Create Application Container

        Creates all service instances in dependency order and assembles them into the container.

        Args:
            config_path: Configuration file path (None = repository template + user file)
            db_path: Database path override (None = `database.path` or the platform data dir)

        Returns:
            A configured AppContainer instance
        """
        from services.config_service import ConfigService
        from services.providers import create_providers

        logger.info("Creating application container...")

        # === 1. Infrastructure Layer ===
        config = ConfigService(config_path)

        # === 2. HTTP client shared by every provider ===
        http_client = httpx.AsyncClient(
            timeout=config.get_float("providers.deezer.timeout_seconds", 10.0),
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )

        # === 3. Providers ===
        providers = create_providers(config, http_client)

        return AppContainerFactory._assemble(
            config=config,
            db_path=db_path or str(config.get("database.path", "") or "") or None,
            catalog=providers.catalog,
            primary=providers.primary,
            secondary=providers.secondary,
            http_client=http_client,
        )

    @staticmethod
    def create_for_testing(
        catalog: "ICatalogProvider",
        primary: Optional["IRecommendationProvider"] = None,
        secondary: Optional["ISimilarityProvider"] = None,
        config: Optional["ConfigService"] = None,
        db_path: str = ":memory:",
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "AppContainer":
        """Create a container for testing

        Uses fake providers, a throwaway database and a seeded random source.

        Args:
            catalog: Catalog provider (fake)
            primary: Primary recommendation provider (fake, optional)
            secondary: Similarity provider (fake, optional)
            config: Configuration service (defaults to the built-in configuration)
            db_path: Database path (defaults to in-memory database)
            rng: Random source for shuffle and the diverse policy
            clock: Clock for cache expiry

        Returns:
            A configured test AppContainer instance
        """
        from services.config_service import ConfigService

        logger.info("Creating test application container...")

        return AppContainerFactory._assemble(
            config=config or ConfigService(),
            db_path=db_path,
            catalog=catalog,
            primary=primary,
            secondary=secondary,
            rng=rng or random.Random(0),
            clock=clock,
        )

    @staticmethod
    def _assemble(
        config: "ConfigService",
        db_path: Optional[str],
        catalog: "ICatalogProvider",
        primary: Optional["IRecommendationProvider"],
        secondary: Optional["ISimilarityProvider"],
        http_client: Optional[httpx.AsyncClient] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "AppContainer":
        from app.container import AppContainer
        from core.database import DatabaseManager
        from core.event_bus import EventBus
        from services.auto_queue_controller import AutoQueueController
        from services.diversity_policy import DiversityPolicy
        from services.queue_persistence_service import QueuePersistenceService
        from services.queue_service import QueueService
        from services.recommendation_cache_service import RecommendationCacheService
        from services.recommendation_chain import RecommendationChain
        from services.recommendation_log_service import RecommendationLogService
        from services.recommendation_service import RecommendationService
        from services.smart_queue_facade import SmartQueueFacade
        from services.smart_queue_settings_service import SmartQueueSettingsService

        # === 1. Infrastructure Layer ===
        db = DatabaseManager(db_path)
        event_bus = EventBus()

        # === 2. Recommendation pipeline ===
        cache = RecommendationCacheService(db=db, config=config, clock=clock)
        chain = RecommendationChain(
            catalog=catalog,
            config=config,
            primary=primary,
            secondary=secondary,
            cache=cache,
        )
        policy = DiversityPolicy(rng=rng)
        recommendations = RecommendationService(
            chain=chain,
            policy=policy,
            config=config,
            log=RecommendationLogService(db=db, config=config),
        )

        # === 3. Queue and settings ===
        queue = QueueService(event_bus=event_bus, rng=rng)
        settings = SmartQueueSettingsService(db=db, config=config, event_bus=event_bus)

        # Restored before the auto-queue controller subscribes
        queue_persistence = QueuePersistenceService(db=db, config=config, event_bus=event_bus)
        queue_persistence.restore(queue)
        queue_persistence.attach(queue)

        auto_queue = AutoQueueController(
            queue=queue,
            recommendations=recommendations,
            settings=settings.current,
            event_bus=event_bus,
            config=config,
        )
        auto_queue.start()

        # === 4. Create Facade ===
        facade = SmartQueueFacade(
            queue=queue,
            recommendations=recommendations,
            settings_service=settings,
            auto_queue=auto_queue,
            event_bus=event_bus,
            cache=cache,
        )

        # === 5. Assemble Container ===
        container = AppContainer(
            config=config,
            event_bus=event_bus,
            db=db,
            facade=facade,
            queue=queue,
            recommendations=recommendations,
            settings=settings,
            auto_queue=auto_queue,
            queue_persistence=queue_persistence,
            cache=cache,
            catalog=catalog,
            http_client=http_client,
        )

        logger.info("Application container creation complete")
        return container
