"""
Data models related to track recommendations
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .track import Track


class RecommendationError(RuntimeError):
    """Base class for recommendation pipeline errors"""
    pass


class SourceUnavailableError(RecommendationError):
    """A recommendation source failed (network error, timeout, bad payload)"""
    pass


class NoCandidatesFoundError(RecommendationError):
    """Every source was exhausted without a usable candidate"""
    pass


class ReResolutionError(RecommendationError):
    """A loosely identified candidate could not be matched to a catalog track"""
    pass


class SimilarityPreference(Enum):
    """How aggressively a candidate pool is reshaped"""
    STRICT = "strict"
    BALANCED = "balanced"
    DIVERSE = "diverse"

    @classmethod
    def parse(cls, value: Any, default: "SimilarityPreference" = None) -> "SimilarityPreference":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            if default is not None:
                return default
            raise


class RecommendationSource(Enum):
    """Which link of the source chain produced a result"""
    CACHED = "cached"
    PRIMARY_API = "primary-api"
    SECONDARY_API = "secondary-api"
    RADIO = "radio"
    NONE = "none"


class RecommendationContext(Enum):
    """Why a recommendation was requested (audit tag)"""
    AUTO_QUEUE = "auto-queue"
    SMART_MIX = "smart-mix"
    MANUAL = "manual"
    SIMILAR_TRACKS = "similar-tracks"


@dataclass(frozen=True)
class UnresolvedCandidate:
    """Primary API item: name/artist strings plus an optional catalog id"""
    name: str
    artist: str = ""
    catalog_id: Optional[int] = None

    @property
    def query(self) -> str:
        return " ".join(part for part in (self.artist, self.name) if part)


@dataclass(frozen=True)
class ChainResult:
    """Output of one source chain resolution"""
    tracks: Tuple[Track, ...]
    source: RecommendationSource

    @property
    def is_empty(self) -> bool:
        return not self.tracks


@dataclass(frozen=True)
class RecommendationCacheEntry:
    """Cached candidate list for one seed track; never updated in place"""
    seed_track_id: int
    tracks: Tuple[Track, ...]
    source: RecommendationSource
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class RecommendationLogEntry:
    """Write-only audit record of one recommendation request"""
    seed_tracks: Tuple[Track, ...]
    recommended_tracks: Tuple[Track, ...]
    source: RecommendationSource
    context: RecommendationContext
    success: bool
    response_time_ms: int = 0
    request_params: Dict[str, Any] = field(default_factory=dict)
    error_message: Optional[str] = None

    @property
    def seed_track_ids(self) -> List[int]:
        return [t.id for t in self.seed_tracks]

    @property
    def recommended_track_ids(self) -> List[int]:
        return [t.id for t in self.recommended_tracks]
