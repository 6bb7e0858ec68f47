"""
Recommendation source chain

Resolves one seed track into candidate tracks by trying, in order:

1. the recommendation cache
2. the primary semantic API (items re-resolved against the catalog)
3. the secondary "similar tracks" API
4. the catalog radio feed

The first step that yields at least one usable candidate (after exclusion
filtering and id deduplication) wins. Network steps never raise out of the
chain; their failures are logged and the next step is tried.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import Awaitable, Iterable, List, Optional, Sequence, Set, TypeVar

from core.ports.catalog import ICatalogProvider, IRecommendationProvider, ISimilarityProvider
from models.recommendation import (
    ChainResult,
    NoCandidatesFoundError,
    RecommendationSource,
    ReResolutionError,
    UnresolvedCandidate,
)
from models.track import Track, unique_by_id
from services.config_service import ConfigService
from services.recommendation_cache_service import RecommendationCacheService

logger = logging.getLogger(__name__)

T = TypeVar("T")

RADIO_MAX_PAGE_SIZE = 40


class RecommendationChain:
    """Cache -> primary API -> secondary API -> radio."""

    # Upper bound on concurrent catalog lookups during re-resolution
    MAX_CONCURRENT_LOOKUPS = 8

    def __init__(
        self,
        catalog: ICatalogProvider,
        config: ConfigService,
        primary: Optional[IRecommendationProvider] = None,
        secondary: Optional[ISimilarityProvider] = None,
        cache: Optional[RecommendationCacheService] = None,
    ):
        self._catalog = catalog
        self._primary = primary
        self._secondary = secondary
        self._cache = cache

        self._primary_timeout = config.get_float("recommendations.timeouts.primary_seconds", 10.0)
        self._secondary_timeout = config.get_float("recommendations.timeouts.secondary_seconds", 8.0)
        self._radio_timeout = config.get_float("recommendations.timeouts.radio_seconds", 8.0)
        self._lookup_timeout = config.get_float("recommendations.timeouts.lookup_seconds", 5.0)
        self._radio_max = config.get_int("recommendations.radio_max_page_size", RADIO_MAX_PAGE_SIZE)

    async def resolve(
        self,
        seed: Track,
        count: int,
        excluded_ids: Optional[Iterable[int]] = None,
    ) -> ChainResult:
        """
        Produce up to `count` candidates for a seed track

        The result never contains the seed or an excluded id.

        Raises:
            NoCandidatesFoundError: If every step came back without a usable track
        """
        count = max(1, int(count))
        excluded: Set[int] = set(excluded_ids or ())
        excluded.add(seed.id)

        cached = self._from_cache(seed, excluded)
        if cached:
            return ChainResult(tuple(cached[:count]), RecommendationSource.CACHED)

        steps = (
            (RecommendationSource.PRIMARY_API, self._from_primary),
            (RecommendationSource.SECONDARY_API, self._from_secondary),
            (RecommendationSource.RADIO, self._from_radio),
        )
        for source, step in steps:
            try:
                raw = await step(seed, count)
            except Exception as e:
                logger.warning(
                    "Recommendation step %s failed for seed %s: %s",
                    source.value, seed.id, e or type(e).__name__,
                )
                continue

            if raw is None:
                continue

            usable = unique_by_id(raw, exclude_ids=excluded)
            if not usable:
                logger.debug("Recommendation step %s returned no usable tracks for seed %s", source.value, seed.id)
                continue

            self._store(seed, raw, source)
            logger.debug(
                "Recommendation step %s produced %d tracks for seed %s",
                source.value, len(usable), seed.id,
            )
            return ChainResult(tuple(usable[:count]), source)

        raise NoCandidatesFoundError(f"No recommendation source produced tracks for seed {seed.id}")

    # ===== Steps =====

    def _from_cache(self, seed: Track, excluded: Set[int]) -> List[Track]:
        if self._cache is None:
            return []
        try:
            entry = self._cache.get(seed.id)
        except sqlite3.Error:
            logger.exception("Recommendation cache lookup failed; treating as miss")
            return []
        if entry is None:
            return []
        return unique_by_id(entry.tracks, exclude_ids=excluded)

    async def _from_primary(self, seed: Track, count: int) -> Optional[List[Track]]:
        if self._primary is None:
            return None

        candidates = await self._with_timeout(
            self._primary.recommend([seed.search_text], count * 2),
            self._primary_timeout,
        )
        if not candidates:
            return []

        semaphore = asyncio.Semaphore(self.MAX_CONCURRENT_LOOKUPS)

        async def lookup(candidate: UnresolvedCandidate) -> Optional[Track]:
            async with semaphore:
                return await self._try_re_resolve(candidate)

        resolved = await asyncio.gather(*(lookup(c) for c in candidates))
        tracks = [t for t in resolved if t is not None]
        dropped = len(candidates) - len(tracks)
        if dropped:
            logger.debug("Dropped %d/%d primary candidates that could not be resolved", dropped, len(candidates))
        return tracks

    async def _from_secondary(self, seed: Track, count: int) -> Optional[List[Track]]:
        if self._secondary is None:
            return None
        return await self._with_timeout(
            self._secondary.similar(seed.id, count * 2),
            self._secondary_timeout,
        )

    async def _from_radio(self, seed: Track, count: int) -> List[Track]:
        limit = min(count * 2, self._radio_max)
        tracks = await self._with_timeout(
            self._catalog.get_radio(seed.id, limit),
            self._radio_timeout,
        )
        return list(tracks)[: self._radio_max]

    # ===== Re-resolution =====

    async def _try_re_resolve(self, candidate: UnresolvedCandidate) -> Optional[Track]:
        try:
            return await self.re_resolve(candidate)
        except ReResolutionError as e:
            logger.debug("%s", e)
            return None

    async def re_resolve(self, candidate: UnresolvedCandidate) -> Track:
        """
        Match a loosely identified candidate to a catalog track

        By catalog id when present, otherwise (or when the id is unknown) by
        searching "artist name" and taking the first result.

        Raises:
            ReResolutionError: If no catalog track matches
        """
        try:
            if candidate.catalog_id is not None:
                track = await self._with_timeout(
                    self._catalog.get_track(candidate.catalog_id),
                    self._lookup_timeout,
                )
                if track is not None:
                    return track

            query = candidate.query
            if query:
                results = await self._with_timeout(
                    self._catalog.search_track(query, 1),
                    self._lookup_timeout,
                )
                if results:
                    return results[0]
        except Exception as e:
            raise ReResolutionError(f"Catalog lookup failed for {candidate!r}: {e}") from e

        raise ReResolutionError(f"No catalog match for {candidate!r}")

    # ===== Helpers =====

    def _store(self, seed: Track, raw: Sequence[Track], source: RecommendationSource) -> None:
        if self._cache is None:
            return
        # Cached list is independent of the caller's exclusions
        tracks = unique_by_id(raw, exclude_ids={seed.id})
        try:
            self._cache.put(seed.id, tracks, source)
        except sqlite3.Error:
            logger.exception("Failed to write recommendation cache for seed %s", seed.id)

    @staticmethod
    async def _with_timeout(awaitable: Awaitable[T], timeout: float) -> T:
        if timeout and timeout > 0:
            return await asyncio.wait_for(awaitable, timeout)
        return await awaitable
