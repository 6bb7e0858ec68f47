"""
Service Layer Module
"""

from .config_service import ConfigService
from .queue_service import QueueService
from .recommendation_cache_service import RecommendationCacheService
from .recommendation_chain import RecommendationChain
from .diversity_policy import DiversityPolicy, spread_artists
from .recommendation_service import RecommendationService
from .recommendation_log_service import RecommendationLogService
from .smart_queue_settings_service import SmartQueueSettingsService
from .auto_queue_controller import AutoQueueController
from .smart_queue_facade import SmartQueueFacade

# Provider modules
from .providers import (
    DeezerCatalogProvider,
    DeezerSimilarityProvider,
    HexMusicProvider,
    HexMusicSettings,
    ProviderSet,
    create_providers,
)

__all__ = [
    'ConfigService',
    'QueueService',
    'RecommendationCacheService',
    'RecommendationChain',
    'DiversityPolicy',
    'spread_artists',
    'RecommendationService',
    'RecommendationLogService',
    'SmartQueueSettingsService',
    'AutoQueueController',
    'SmartQueueFacade',
    # Providers
    'DeezerCatalogProvider',
    'DeezerSimilarityProvider',
    'HexMusicProvider',
    'HexMusicSettings',
    'ProviderSet',
    'create_providers',
]
