"""Relevance and proximity scoring shared by the category providers."""

import math
from dataclasses import dataclass
from typing import Any

from geopy.distance import geodesic

from wander_search.contracts.search_v1 import GeoPoint

# Text relevance tiers: exact title > title prefix > title substring > other fields
EXACT_MATCH = 1.0
PREFIX_MATCH = 0.8
TITLE_MATCH = 0.6
FIELD_MATCH = 0.4
EMPTY_QUERY = 0.2


@dataclass(frozen=True)
class ScoringWeights:
    relevance: float = 0.6
    proximity: float = 0.4
    sigma_km: float = 2.0


def text_relevance(text: str, title: str, *others: Any) -> float:
    """Score in [0, 1] for how well ``text`` matches a record; 0.0 means no match."""
    needle = (text or "").strip().lower()
    if not needle:
        return EMPTY_QUERY
    hay = (title or "").strip().lower()
    if hay == needle:
        return EXACT_MATCH
    if hay.startswith(needle):
        return PREFIX_MATCH
    if needle in hay:
        return TITLE_MATCH
    for other in others:
        if other is None:
            continue
        if isinstance(other, (list, tuple)):
            other = " ".join(str(o) for o in other)
        if needle in str(other).lower():
            return FIELD_MATCH
    return 0.0


def distance_km(origin: GeoPoint, location: GeoPoint) -> float:
    return geodesic(origin.as_tuple(), location.as_tuple()).km


def proximity_score(dist_km: float, sigma_km: float) -> float:
    # Gaussian decay: exp(-d^2 / 2 sigma^2)
    if sigma_km <= 0:
        return 1.0 if dist_km == 0 else 0.0
    return math.exp(-(dist_km**2) / (2 * (sigma_km**2)))


def combined_score(
    relevance: float,
    origin: GeoPoint | None,
    location: GeoPoint | None,
    weights: ScoringWeights,
) -> tuple[float, float | None]:
    """Blend relevance with proximity when both ends are known.

    Returns (score, distance_km or None).
    """
    if origin is None or location is None:
        return relevance, None
    dist = distance_km(origin, location)
    prox = proximity_score(dist, weights.sigma_km)
    return weights.relevance * relevance + weights.proximity * prox, dist


def location_of(record: dict[str, Any]) -> GeoPoint | None:
    """Build a GeoPoint from a raw record, or None if it has no usable pair."""
    lat = record.get("latitude")
    lon = record.get("longitude")
    if lat is None or lon is None:
        return None
    try:
        lat_f = float(lat)
        lon_f = float(lon)
    except (TypeError, ValueError):
        return None
    if not (-90.0 <= lat_f <= 90.0 and -180.0 <= lon_f <= 180.0):
        return None
    return GeoPoint(latitude=lat_f, longitude=lon_f)
