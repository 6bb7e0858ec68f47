"""
Recommendation service

Boundary around the source chain and the diversity policy. Callers always
receive a list: chain failures become an empty result plus a failed audit
log entry, never an exception.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Iterable, List, Optional, Sequence

from core.ports.persistence import IRecommendationLogger
from models.recommendation import (
    NoCandidatesFoundError,
    RecommendationContext,
    RecommendationLogEntry,
    RecommendationSource,
    SimilarityPreference,
)
from models.track import Track, unique_by_id
from services.config_service import ConfigService
from services.diversity_policy import DiversityPolicy
from services.recommendation_chain import RecommendationChain

logger = logging.getLogger(__name__)


class RecommendationService:
    """
    Usage example:
        tracks = await service.recommend(seed, 5, excluded_ids={1, 2})
        mix = await service.generate_smart_mix([seed_a, seed_b], count=30)
    """

    def __init__(
        self,
        chain: RecommendationChain,
        policy: DiversityPolicy,
        config: ConfigService,
        log: Optional[IRecommendationLogger] = None,
    ):
        self._chain = chain
        self._policy = policy
        self._config = config
        self._log = log

    @property
    def per_seed_count(self) -> int:
        return max(1, self._config.get_int("recommendations.smart_mix.per_seed_count", 20))

    @property
    def max_seeds(self) -> int:
        return max(1, self._config.get_int("recommendations.smart_mix.max_seeds", 5))

    async def recommend(
        self,
        seed: Track,
        count: int,
        excluded_ids: Optional[Iterable[int]] = None,
        preference: SimilarityPreference = SimilarityPreference.BALANCED,
        context: RecommendationContext = RecommendationContext.MANUAL,
    ) -> List[Track]:
        """Single-seed recommendations reshaped by the similarity preference"""
        count = max(1, int(count))
        excluded = set(excluded_ids or ())
        # The strict filter discards candidates, so ask the chain for more
        fetch_count = count * 2 if preference == SimilarityPreference.STRICT else count
        params = {"count": count, "preference": preference.value, "excluded": len(excluded)}

        started = time.perf_counter()
        tracks: List[Track] = []
        source = RecommendationSource.NONE
        error: Optional[str] = None
        try:
            result = await self._chain.resolve(seed, fetch_count, excluded)
            source = result.source
            tracks = self._policy.apply(result.tracks, preference, [seed])[:count]
            if not tracks:
                error = f"{preference.value} filter removed all {len(result.tracks)} candidates"
        except NoCandidatesFoundError as e:
            error = str(e)
        except Exception as e:
            logger.exception("Recommendation request failed for seed %s", seed.id)
            error = f"{type(e).__name__}: {e}"

        self._write_log([seed], tracks, source, context, params, started, error)
        return tracks

    async def similar_tracks(
        self,
        seed: Track,
        limit: int = 5,
        excluded_ids: Optional[Iterable[int]] = None,
    ) -> List[Track]:
        """Chain output as-is (no diversity reshaping)"""
        limit = max(1, int(limit))
        params = {"limit": limit}

        started = time.perf_counter()
        tracks: List[Track] = []
        source = RecommendationSource.NONE
        error: Optional[str] = None
        try:
            result = await self._chain.resolve(seed, limit, excluded_ids)
            source = result.source
            tracks = list(result.tracks[:limit])
        except NoCandidatesFoundError as e:
            error = str(e)
        except Exception as e:
            logger.exception("Similar tracks request failed for seed %s", seed.id)
            error = f"{type(e).__name__}: {e}"

        self._write_log([seed], tracks, source, RecommendationContext.SIMILAR_TRACKS, params, started, error)
        return tracks

    async def generate_smart_mix(
        self,
        seeds: Sequence[Track],
        count: int = 50,
        preference: SimilarityPreference = SimilarityPreference.BALANCED,
    ) -> List[Track]:
        """
        Blend recommendations from several seeds

        Up to `max_seeds` seeds are each resolved for `per_seed_count`
        candidates; the merged pool (seeds excluded, deduplicated by id) is
        reshaped by the policy and truncated to `count`.
        """
        seeds = unique_by_id(seeds)[: self.max_seeds]
        count = max(1, int(count))
        if not seeds:
            return []

        seed_ids = {s.id for s in seeds}
        params = {"count": count, "preference": preference.value, "seeds": len(seeds)}

        started = time.perf_counter()
        tracks: List[Track] = []
        source = RecommendationSource.NONE
        error: Optional[str] = None
        try:
            results = await asyncio.gather(
                *(self._chain.resolve(seed, self.per_seed_count, seed_ids) for seed in seeds),
                return_exceptions=True,
            )

            pool: List[Track] = []
            for seed, result in zip(seeds, results):
                if isinstance(result, NoCandidatesFoundError):
                    logger.info("Smart mix seed %s produced no candidates", seed.id)
                    continue
                if isinstance(result, BaseException):
                    if not isinstance(result, Exception):
                        raise result
                    logger.error("Smart mix seed %s failed: %s", seed.id, result)
                    continue
                if source == RecommendationSource.NONE:
                    source = result.source
                pool.extend(result.tracks)

            merged = unique_by_id(pool, exclude_ids=seed_ids)
            tracks = self._policy.apply(merged, preference, seeds)[:count]
            if not tracks:
                error = "No seed produced usable candidates"
        except Exception as e:
            logger.exception("Smart mix generation failed")
            error = f"{type(e).__name__}: {e}"

        logger.info("Smart mix: %d tracks from %d seeds", len(tracks), len(seeds))
        self._write_log(seeds, tracks, source, RecommendationContext.SMART_MIX, params, started, error)
        return tracks

    def _write_log(
        self,
        seeds: Sequence[Track],
        tracks: Sequence[Track],
        source: RecommendationSource,
        context: RecommendationContext,
        params: Dict[str, Any],
        started: float,
        error: Optional[str],
    ) -> None:
        if self._log is None:
            return

        entry = RecommendationLogEntry(
            seed_tracks=tuple(seeds),
            recommended_tracks=tuple(tracks),
            source=source,
            context=context,
            success=bool(tracks),
            response_time_ms=int((time.perf_counter() - started) * 1000),
            request_params=params,
            error_message=error,
        )
        try:
            self._log.log(entry)
        except Exception:
            # Audit is best-effort
            logger.exception("Failed to write recommendation log entry")
