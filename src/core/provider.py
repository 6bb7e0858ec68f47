"""
Music Provider Abstraction Layer

Defines the common base for the external catalog and recommendation clients.
All clients share one httpx.AsyncClient owned by the application container.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from models.recommendation import SourceUnavailableError

logger = logging.getLogger(__name__)


class ProviderError(SourceUnavailableError):
    """Base class for provider errors

    Wraps HTTP status errors, transport failures, timeouts and undecodable
    payloads so the recommendation chain only has to catch one family.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class ProviderSettings:
    """Generic provider settings

    Attributes:
        base_url: API base URL
        timeout_seconds: Per-request timeout in seconds
        api_key: Optional credential (sent as a bearer token)
        extra: Provider-specific additional configurations
    """
    base_url: str
    timeout_seconds: float = 10.0
    api_key: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


class MusicProvider(ABC):
    """Provider abstract base

    Subclasses implement one or more of the catalog / recommendation /
    similarity ports and use `_get_json` / `_post_json` for transport.
    """

    def __init__(self, settings: ProviderSettings, client: httpx.AsyncClient):
        self._settings = settings
        self._client = client

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier (e.g., 'deezer', 'hexmusic')"""
        ...

    @property
    def settings(self) -> ProviderSettings:
        return self._settings

    def _url(self, path: str) -> str:
        return self._settings.base_url.rstrip("/") + "/" + path.lstrip("/")

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._settings.api_key:
            headers["Authorization"] = f"Bearer {self._settings.api_key}"
        return headers

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request("GET", path, params=params)

    async def _post_json(self, path: str, payload: Dict[str, Any]) -> Any:
        return await self._request("POST", path, json=payload)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._url(path)
        logger.debug("%s %s request: %s", self.name, method, url)

        try:
            response = await self._client.request(
                method,
                url,
                headers=self._headers(),
                timeout=self._settings.timeout_seconds,
                **kwargs,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise ProviderError(
                f"{self.name} API HTTP {status}: {e.response.text[:200]}",
                status_code=status,
            ) from e
        except httpx.TimeoutException as e:
            raise ProviderError(f"{self.name} API request timed out: {url}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"{self.name} API request failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                f"{self.name} response parsing failed: {response.text[:200]}"
            ) from e
