"""
Data Models Module
"""

from .track import Track, TrackParseError
from .album import Album
from .artist import Artist
from .queue_state import QueueIndexError, QueueSnapshot, RepeatMode
from .recommendation import (
    ChainResult,
    NoCandidatesFoundError,
    ReResolutionError,
    RecommendationCacheEntry,
    RecommendationContext,
    RecommendationError,
    RecommendationLogEntry,
    RecommendationSource,
    SimilarityPreference,
    SourceUnavailableError,
    UnresolvedCandidate,
)
from .smart_queue_settings import SmartQueueSettings, SettingsValidationError

__all__ = [
    'Track',
    'TrackParseError',
    'Album',
    'Artist',
    'QueueIndexError',
    'QueueSnapshot',
    'RepeatMode',
    'ChainResult',
    'NoCandidatesFoundError',
    'ReResolutionError',
    'RecommendationCacheEntry',
    'RecommendationContext',
    'RecommendationError',
    'RecommendationLogEntry',
    'RecommendationSource',
    'SimilarityPreference',
    'SourceUnavailableError',
    'UnresolvedCandidate',
    'SmartQueueSettings',
    'SettingsValidationError',
]
