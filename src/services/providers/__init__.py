"""
Music Providers Module

HTTP clients for the external catalog and recommendation services.
"""

from .deezer_provider import DeezerCatalogProvider, DeezerSimilarityProvider
from .hexmusic_provider import HexMusicProvider, HexMusicSettings
from .provider_factory import ProviderSet, create_providers

__all__ = [
    'DeezerCatalogProvider',
    'DeezerSimilarityProvider',
    'HexMusicProvider',
    'HexMusicSettings',
    'ProviderSet',
    'create_providers',
]
