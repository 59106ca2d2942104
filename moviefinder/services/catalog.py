"""TMDB movie catalog client."""

from __future__ import annotations

from typing import Any

import httpx

from moviefinder.config import TmdbSettings
from moviefinder.domain.models import MovieItem
from moviefinder.logging import logger
from moviefinder.services.exceptions import CatalogApplicationError, CatalogTransportError

SEARCH_PATH = "/search/movie"
DISCOVER_PATH = "/discover/movie"
DEFAULT_SORT = "popularity.desc"


class MovieCatalogService:
    """Issues search and discover requests against the TMDB REST API.

    Every public call performs exactly one GET. Failures are raised as
    ``CatalogTransportError`` or ``CatalogApplicationError``; nothing is
    retried or cached here.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: TmdbSettings | None = None,
    ) -> None:
        self._client = http_client
        self._settings = settings or TmdbSettings()

    async def fetch_movies(self, query: str = "") -> list[MovieItem]:
        """Search when ``query`` has text, otherwise list popular movies."""

        term = (query or "").strip()
        if term:
            return await self.search(term)
        return await self.discover()

    async def search(self, query: str) -> list[MovieItem]:
        return await self._get(SEARCH_PATH, {"query": query})

    async def discover(self) -> list[MovieItem]:
        return await self._get(DISCOVER_PATH, {"sort_by": DEFAULT_SORT})

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self._settings.api_token
        if token is not None:
            headers["Authorization"] = f"Bearer {token.get_secret_value()}"
        return headers

    async def _get(self, path: str, params: dict[str, str]) -> list[MovieItem]:
        url = f"{self._settings.base_url}{path}"
        try:
            response = await self._client.get(
                url,
                params=params,
                headers=self._headers(),
                timeout=self._settings.request_timeout_seconds,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            detail = exc.response.text[:200]
            raise CatalogTransportError(f"TMDB request failed ({status_code}): {detail}") from exc
        except httpx.RequestError as exc:
            raise CatalogTransportError(f"TMDB request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise CatalogTransportError("TMDB returned a non-JSON body") from exc

        return self._extract_results(path, data)

    @staticmethod
    def _extract_results(path: str, data: Any) -> list[MovieItem]:
        if not isinstance(data, dict):
            logger.warning("catalog_unexpected_payload", path=path, payload_type=type(data).__name__)
            return []

        flag = data.get("response")
        if flag is False or (isinstance(flag, str) and flag.lower() == "false"):
            raise CatalogApplicationError(data.get("Error") or None)
        if data.get("success") is False:
            raise CatalogApplicationError(data.get("status_message") or None)

        results = data.get("results")
        if results is None:
            return []
        if not isinstance(results, list):
            logger.warning("catalog_results_not_a_list", path=path, results_type=type(results).__name__)
            return []
        return results


__all__ = ["DEFAULT_SORT", "DISCOVER_PATH", "MovieCatalogService", "SEARCH_PATH"]
