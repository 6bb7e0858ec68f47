# -*- coding: utf-8 -*-
"""
Ports Interfaces Package

Defines the interfaces between the smart queue core and external infrastructure
(database, music catalog, recommendation services, session persistence).

Design Principles:
- Use Protocol to define interfaces, supporting structural subtyping.
- Service layer depends on these interfaces rather than concrete implementations.
- Facilitates replacing with fakes during testing.
"""

from core.ports.database import IDatabase
from core.ports.catalog import ICatalogProvider, IRecommendationProvider, ISimilarityProvider
from core.ports.persistence import ISettingsStore, IRecommendationLogger

__all__ = [
    "IDatabase",
    "ICatalogProvider",
    "IRecommendationProvider",
    "ISimilarityProvider",
    "ISettingsStore",
    "IRecommendationLogger",
]
