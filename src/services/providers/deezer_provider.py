"""
Deezer Provider Implementation

Public Deezer REST API (no authentication).

Endpoints:
    {base_url}/search?q=...&limit=N
    {base_url}/track/{id}
    {base_url}/track/{id}/radio
    {base_url}/artist/{id}/radio
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from core.provider import MusicProvider, ProviderError, ProviderSettings
from models.track import Track, TrackParseError, parse_tracks
from services.config_service import ConfigService

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.deezer.com"

# Deezer reports "no data" for unknown ids inside a 200 response
DEEZER_NO_DATA_CODE = 800

RADIO_MAX_PAGE_SIZE = 40


def _settings_from_config(config: ConfigService) -> ProviderSettings:
    return ProviderSettings(
        base_url=str(config.get("providers.deezer.base_url", DEFAULT_BASE_URL)),
        timeout_seconds=config.get_float("providers.deezer.timeout_seconds", 10.0),
    )


class DeezerCatalogProvider(MusicProvider):
    """Catalog lookups: search, track by id and track radio."""

    def __init__(
        self,
        settings: ProviderSettings,
        client: httpx.AsyncClient,
        radio_max_page_size: int = RADIO_MAX_PAGE_SIZE,
    ):
        super().__init__(settings, client)
        self._radio_max_page_size = radio_max_page_size

    @property
    def name(self) -> str:
        return "deezer"

    @staticmethod
    def from_config(config: ConfigService, client: httpx.AsyncClient) -> "DeezerCatalogProvider":
        return DeezerCatalogProvider(
            _settings_from_config(config),
            client,
            radio_max_page_size=config.get_int("recommendations.radio_max_page_size", RADIO_MAX_PAGE_SIZE),
        )

    async def search_track(self, query: str, limit: int = 1) -> List[Track]:
        query = (query or "").strip()
        if not query:
            return []
        data = await self._get_json("search", params={"q": query, "limit": max(1, int(limit))})
        return parse_tracks(_data_items(data, self.name))

    async def get_track(self, track_id: int) -> Optional[Track]:
        data = await self._get_json(f"track/{int(track_id)}")
        if _is_no_data(data):
            logger.debug("Deezer has no track %s", track_id)
            return None
        _raise_for_error(data, self.name)
        try:
            return Track.from_dict(data)
        except TrackParseError as e:
            raise ProviderError(f"deezer returned an unusable track payload for {track_id}") from e

    async def get_radio(self, track_id: int, limit: int = RADIO_MAX_PAGE_SIZE) -> List[Track]:
        limit = max(1, min(int(limit), self._radio_max_page_size))
        data = await self._get_json(f"track/{int(track_id)}/radio", params={"limit": limit})
        return parse_tracks(_data_items(data, self.name))[:limit]


class DeezerSimilarityProvider(MusicProvider):
    """Secondary similarity source: radio of the seed track's artist."""

    def __init__(self, settings: ProviderSettings, client: httpx.AsyncClient):
        super().__init__(settings, client)

    @property
    def name(self) -> str:
        return "deezer-artist-radio"

    @staticmethod
    def from_config(config: ConfigService, client: httpx.AsyncClient) -> "DeezerSimilarityProvider":
        return DeezerSimilarityProvider(_settings_from_config(config), client)

    async def similar(self, track_id: int, count: int) -> List[Track]:
        seed = await self._get_json(f"track/{int(track_id)}")
        if _is_no_data(seed):
            return []
        _raise_for_error(seed, self.name)

        artist = seed.get("artist") if isinstance(seed, dict) else None
        artist_id = artist.get("id") if isinstance(artist, dict) else None
        if not artist_id:
            logger.debug("Seed track %s has no artist id; no artist radio", track_id)
            return []

        data = await self._get_json(f"artist/{artist_id}/radio", params={"limit": max(1, int(count))})
        return parse_tracks(_data_items(data, self.name))


def _is_no_data(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    error = payload.get("error")
    return isinstance(error, dict) and error.get("code") == DEEZER_NO_DATA_CODE


def _raise_for_error(payload: Any, provider: str) -> None:
    if not isinstance(payload, dict):
        raise ProviderError(f"{provider} returned a non-object payload")
    error = payload.get("error")
    if error:
        message = error.get("message") if isinstance(error, dict) else str(error)
        raise ProviderError(f"{provider} API error: {message}")


def _data_items(payload: Any, provider: str) -> List[Any]:
    _raise_for_error(payload, provider)
    items = payload.get("data", [])
    if not isinstance(items, list):
        raise ProviderError(f"{provider} returned a malformed 'data' field")
    return items
