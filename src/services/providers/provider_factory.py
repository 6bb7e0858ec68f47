"""
Music Provider Factory

Creates the catalog and recommendation provider instances based on configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import httpx

from core.ports.catalog import ICatalogProvider, IRecommendationProvider, ISimilarityProvider

if TYPE_CHECKING:
    from services.config_service import ConfigService

logger = logging.getLogger(__name__)


@dataclass
class ProviderSet:
    """The three external sources consumed by the recommendation chain"""
    catalog: ICatalogProvider
    primary: Optional[IRecommendationProvider]
    secondary: Optional[ISimilarityProvider]


def create_providers(config: "ConfigService", client: httpx.AsyncClient) -> ProviderSet:
    """Create the provider instances based on configuration.

    Args:
        config: Configuration service instance.
        client: Shared HTTP client (owned by the caller).

    Returns:
        ProviderSet; `primary` is None when the HexMusic source is disabled.
    """
    from .deezer_provider import DeezerCatalogProvider, DeezerSimilarityProvider
    from .hexmusic_provider import HexMusicProvider

    catalog = DeezerCatalogProvider.from_config(config, client)
    secondary = DeezerSimilarityProvider.from_config(config, client)

    primary = None
    if bool(config.get("providers.hexmusic.enabled", True)):
        primary = HexMusicProvider.from_config(config, client)
        logger.info("Primary recommendation source: %s (%s)", primary.name, primary.settings.base_url)
    else:
        logger.info("Primary recommendation source disabled")

    return ProviderSet(catalog=catalog, primary=primary, secondary=secondary)
