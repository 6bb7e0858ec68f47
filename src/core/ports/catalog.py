# -*- coding: utf-8 -*-
"""
Music Source Port Interfaces

Defines the boundary of the external catalog and recommendation services,
so the recommendation chain does not depend on specific HTTP clients.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence, runtime_checkable

from models.recommendation import UnresolvedCandidate
from models.track import Track


@runtime_checkable
class ICatalogProvider(Protocol):
    """Catalog Provider Interface

    Current implementation: DeezerCatalogProvider
    """

    async def search_track(self, query: str, limit: int = 1) -> List[Track]:
        """Free-text track search

        Raises:
            ProviderError: When the API call fails
        """
        ...

    async def get_track(self, track_id: int) -> Optional[Track]:
        """Fetch a track by catalog id; None when the catalog has no such track"""
        ...

    async def get_radio(self, track_id: int, limit: int = 40) -> List[Track]:
        """Radio feed seeded by a track"""
        ...


@runtime_checkable
class IRecommendationProvider(Protocol):
    """Primary (semantic) recommendation API

    Returns loosely identified items that must be re-resolved against the catalog.
    Current implementation: HexMusicProvider
    """

    async def recommend(self, seed_names: Sequence[str], count: int) -> List[UnresolvedCandidate]:
        ...


@runtime_checkable
class ISimilarityProvider(Protocol):
    """Secondary "similar tracks to id X" API

    Current implementation: DeezerSimilarityProvider
    """

    async def similar(self, track_id: int, count: int) -> List[Track]:
        ...
