from __future__ import annotations

import logging

import httpx

from .cache import ResponseCache
from .config import DEFAULT_PLACES_CONFIG, PlacesConfig
from .models import PlacesSearchResult, Venue

logger = logging.getLogger(__name__)


class PlacesClient:
    """Client for the places-search proxy.

    Never raises on network or API failure: the result carries an ``error``
    string and an empty venue list instead, so callers can show a message
    without touching quiz state.
    """

    def __init__(
        self,
        config: PlacesConfig = DEFAULT_PLACES_CONFIG,
        cache: ResponseCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.cache = cache if cache is not None else ResponseCache(config.cache_ttl)
        self._transport = transport

    async def search_nearby(
        self,
        genre_id: str,
        latitude: float,
        longitude: float,
        radius: int | None = None,
    ) -> PlacesSearchResult:
        radius = radius or self.config.default_radius
        params = {
            "genre": genre_id,
            "lat": round(latitude, 5),
            "lng": round(longitude, 5),
            "radius": radius,
        }

        cached = self.cache.get(params)
        if cached is not None:
            return cached

        try:
            async with httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.get("/places/search", params=params)
                resp.raise_for_status()
                payload = resp.json()
        except httpx.HTTPStatusError as exc:
            message = "API error"
            try:
                message = exc.response.json().get("error") or message
            except (ValueError, AttributeError):
                pass
            logger.warning(
                "Places search returned %d for genre=%r: %s",
                exc.response.status_code,
                genre_id,
                exc.response.text[:200],
            )
            return PlacesSearchResult(places=[], error=message)
        except (httpx.HTTPError, ValueError):
            logger.warning("Places search failed for genre=%r", genre_id, exc_info=True)
            return PlacesSearchResult(places=[], error="Network error")

        if not isinstance(payload, dict):
            logger.warning("Places search returned a non-object payload for genre=%r", genre_id)
            return PlacesSearchResult(places=[], error="API error")

        venues: list[Venue] = []
        for place in payload.get("places") or []:
            try:
                venues.append(Venue.from_place(place))
            except (TypeError, ValueError, AttributeError):
                logger.warning("Skipping malformed place entry for genre=%r", genre_id, exc_info=True)

        result = PlacesSearchResult(places=venues)
        self.cache.set(params, result)
        return result

    async def health_check(self) -> bool:
        try:
            async with httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.get("/health")
                return resp.is_success
        except httpx.HTTPError:
            return False
