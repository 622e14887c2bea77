from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class PriceLevel(str, Enum):
    ANY = "ANY"
    FREE = "FREE"
    INEXPENSIVE = "INEXPENSIVE"
    MODERATE = "MODERATE"
    EXPENSIVE = "EXPENSIVE"
    VERY_EXPENSIVE = "VERY_EXPENSIVE"


# Ordinal 0-4 scale shared by venue price data and the user's preference.
PRICE_ORDER = [
    PriceLevel.FREE,
    PriceLevel.INEXPENSIVE,
    PriceLevel.MODERATE,
    PriceLevel.EXPENSIVE,
    PriceLevel.VERY_EXPENSIVE,
]


class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class SearchLocation(Coordinates):
    name: str
    is_fallback: bool = False


class ScoringWeights(BaseModel):
    rating: float = Field(default=0.30, ge=0.0)
    review_count: float = Field(default=0.20, ge=0.0)
    open_now: float = Field(default=0.25, ge=0.0)
    distance: float = Field(default=0.15, ge=0.0)
    price_level: float = Field(default=0.10, ge=0.0)


class ScoringSettings(BaseModel):
    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    preferred_price_level: PriceLevel = PriceLevel.ANY


class Venue(BaseModel):
    id: str
    name: str
    address: str | None = None
    rating: float | None = Field(default=None, ge=0.0, le=5.0)
    review_count: int | None = Field(default=None, ge=0)
    price_level: str | None = None
    location: Coordinates | None = None
    open_now: bool | None = None
    maps_uri: str | None = None
    photo_url: str | None = None

    @classmethod
    def from_place(cls, place: dict[str, Any]) -> "Venue":
        """Build a venue from a places-search payload entry."""
        display_name = place.get("displayName") or {}
        location = place.get("location") or None
        hours = place.get("currentOpeningHours") or {}
        return cls(
            id=str(place.get("id", "")),
            name=display_name.get("text", "") if isinstance(display_name, dict) else str(display_name),
            address=place.get("formattedAddress"),
            rating=place.get("rating"),
            review_count=place.get("userRatingCount"),
            price_level=place.get("priceLevel"),
            location=Coordinates(**location) if location else None,
            open_now=hours.get("openNow"),
            maps_uri=place.get("googleMapsUri"),
            photo_url=place.get("photoUrl"),
        )


class ScoredVenue(BaseModel):
    venue: Venue
    score: float
    distance_m: float | None = None


class PlacesSearchResult(BaseModel):
    places: list[Venue] = Field(default_factory=list)
    error: str | None = None


class PlacesSearchResponse(BaseModel):
    genre_id: str
    location: SearchLocation
    radius: int
    results: list[ScoredVenue]
    total_candidates: int
    error: str | None = None
