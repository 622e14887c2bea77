from __future__ import annotations

import math

from .models import (
    PRICE_ORDER,
    Coordinates,
    PriceLevel,
    ScoredVenue,
    ScoringWeights,
    Venue,
)

EARTH_RADIUS_M = 6_371_000.0
DEFAULT_RATING = 3.0
REVIEW_SATURATION = 1000


def haversine_distance(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance in metres."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.longitude - a.longitude)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def _price_rank(level: str | PriceLevel | None) -> int | None:
    """Position on the 0-4 price scale, or None when unknown."""
    if level is None:
        return None
    raw = level.value if isinstance(level, PriceLevel) else str(level)
    raw = raw.upper().removeprefix("PRICE_LEVEL_")
    try:
        return PRICE_ORDER.index(PriceLevel(raw))
    except ValueError:
        return None


def rating_score(venue: Venue) -> float:
    rating = venue.rating if venue.rating is not None else DEFAULT_RATING
    return rating / 5.0


def review_score(venue: Venue) -> float:
    count = venue.review_count or 0
    return math.log(count + 1) / math.log(REVIEW_SATURATION + 1)


def open_score(venue: Venue) -> float:
    # Closed venues stay rankable, just penalised.
    if venue.open_now is True:
        return 1.0
    if venue.open_now is False:
        return 0.3
    return 0.5


def distance_score(venue: Venue, user_location: Coordinates, radius: float) -> float:
    if venue.location is None or radius <= 0:
        return 1.0
    return max(0.0, 1.0 - haversine_distance(user_location, venue.location) / radius)


def price_score(venue: Venue, preferred: PriceLevel | str | None) -> float:
    if preferred is None or preferred == PriceLevel.ANY:
        return 0.5
    venue_rank = _price_rank(venue.price_level)
    wanted_rank = _price_rank(preferred)
    if venue_rank is None or wanted_rank is None:
        return 0.5
    return max(0.2, 1.0 - 0.3 * abs(venue_rank - wanted_rank))


def score_venue(
    venue: Venue,
    user_location: Coordinates,
    radius: float,
    weights: ScoringWeights | None = None,
    preferred_price_level: PriceLevel | str | None = None,
) -> float:
    """Weighted sum of the five sub-scores; weights need not sum to 1."""
    w = weights or ScoringWeights()
    return (
        w.rating * rating_score(venue)
        + w.review_count * review_score(venue)
        + w.open_now * open_score(venue)
        + w.distance * distance_score(venue, user_location, radius)
        + w.price_level * price_score(venue, preferred_price_level)
    )


def rank_venues(
    venues: list[Venue],
    user_location: Coordinates,
    radius: float,
    weights: ScoringWeights | None = None,
    preferred_price_level: PriceLevel | str | None = None,
    limit: int | None = 10,
) -> list[ScoredVenue]:
    scored = [
        ScoredVenue(
            venue=v,
            score=round(score_venue(v, user_location, radius, weights, preferred_price_level), 4),
            distance_m=(
                round(haversine_distance(user_location, v.location), 1) if v.location else None
            ),
        )
        for v in venues
    ]
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored if limit is None else scored[:limit]
