from __future__ import annotations

import logging

from .config import DEFAULT_PLACES_CONFIG, PlacesConfig
from .models import SearchLocation

logger = logging.getLogger(__name__)


def default_location(config: PlacesConfig = DEFAULT_PLACES_CONFIG) -> SearchLocation:
    return SearchLocation(
        latitude=config.default_latitude,
        longitude=config.default_longitude,
        name=config.default_location_name,
        is_fallback=True,
    )


def resolve_search_location(
    latitude: float | None,
    longitude: float | None,
    name: str = "Current location",
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> SearchLocation:
    """Caller-supplied coordinates, or the default region when location is unavailable."""
    if latitude is None or longitude is None:
        logger.info("Location unavailable, searching around %s", config.default_location_name)
        return default_location(config)
    return SearchLocation(latitude=latitude, longitude=longitude, name=name)
