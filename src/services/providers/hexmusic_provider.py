"""
HexMusic Provider Implementation

Semantic track recommendations. The service answers with loosely identified
items (name/artist strings plus an optional Deezer id) that the
recommendation chain re-resolves against the catalog.

Endpoint: POST {base_url}/hexmusic/recommendations/deezer
Auth: Authorization: Bearer <api_key> (optional)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

import httpx

from core.provider import MusicProvider, ProviderError, ProviderSettings
from models.recommendation import UnresolvedCandidate
from services.config_service import ConfigService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HexMusicSettings(ProviderSettings):
    """HexMusic specific settings.

    Attributes:
        api_key_env: Environment variable name for the API key.
    """
    base_url: str = "https://api.starchildmusic.com"
    api_key_env: str = "HEXMUSIC_API_KEY"


class HexMusicProvider(MusicProvider):
    """Primary recommendation API client"""

    RECOMMEND_PATH = "hexmusic/recommendations/deezer"

    def __init__(self, settings: HexMusicSettings, client: httpx.AsyncClient):
        super().__init__(settings, client)

    @property
    def name(self) -> str:
        return "hexmusic"

    @staticmethod
    def from_config(config: ConfigService, client: httpx.AsyncClient) -> "HexMusicProvider":
        """Create a provider instance from the configuration service."""
        api_key_env = str(config.get("providers.hexmusic.api_key_env", "HEXMUSIC_API_KEY"))
        api_key = config.get("providers.hexmusic.api_key", "") or os.environ.get(api_key_env, "")
        return HexMusicProvider(
            HexMusicSettings(
                base_url=str(config.get("providers.hexmusic.base_url", "https://api.starchildmusic.com")),
                timeout_seconds=config.get_float("providers.hexmusic.timeout_seconds", 10.0),
                api_key=str(api_key),
                api_key_env=api_key_env,
            ),
            client,
        )

    async def recommend(self, seed_names: Sequence[str], count: int) -> List[UnresolvedCandidate]:
        names = [n for n in (str(s).strip() for s in seed_names) if n]
        if not names:
            return []

        payload = {"trackNames": names, "n": max(1, int(count))}
        data = await self._post_json(self.RECOMMEND_PATH, payload)

        items = _extract_items(data)
        if items is None:
            raise ProviderError(f"hexmusic returned an unexpected payload: {str(data)[:200]}")

        candidates = []
        for item in items:
            candidate = _parse_candidate(item)
            if candidate is not None:
                candidates.append(candidate)

        logger.debug("hexmusic returned %d/%d usable items", len(candidates), len(items))
        return candidates


def _extract_items(data: Any) -> Optional[List[Any]]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("tracks", "recommendations", "data"):
            if isinstance(data.get(key), list):
                return data[key]
    return None


def _parse_candidate(item: Any) -> Optional[UnresolvedCandidate]:
    if not isinstance(item, dict):
        return None

    name = str(item.get("name") or item.get("title") or "").strip()
    artist: Any = item.get("artist") or ""
    if isinstance(artist, dict):
        artist = artist.get("name") or ""
    artist = str(artist).strip()

    catalog_id = _parse_id(item.get("deezer_id", item.get("id")))
    if not name and catalog_id is None:
        return None
    return UnresolvedCandidate(name=name, artist=artist, catalog_id=catalog_id)


def _parse_id(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None

