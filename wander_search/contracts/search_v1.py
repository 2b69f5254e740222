"""Search Contract v1.

Defines the canonical types for:
  - Query side (Category, GeoPoint, SearchQuery)
  - Result side (SearchResult, SearchResponse)
  - Wire payloads used by transport adapters (SearchRequestPayload,
    SearchResultItem, ErrorBody)

Query and result types are immutable; one set is built per request.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class Category(StrEnum):
    PLACES = "places"
    USERS = "users"
    HAZARDS = "hazards"


LOCATED_CATEGORIES: frozenset[Category] = frozenset({Category.PLACES, Category.HAZARDS})


# ---------------------------------------------------------------------------
# Query side
# ---------------------------------------------------------------------------


class GeoPoint(BaseModel):
    """A WGS84 coordinate pair. Both halves are always present."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


class SearchQuery(BaseModel):
    """Validated query handed to a provider."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(default="", description="Free-form query, may be empty")
    category: Category
    origin: GeoPoint | None = Field(
        default=None,
        description="Caller position for proximity ranking (places, hazards only)",
    )


# ---------------------------------------------------------------------------
# Result side
# ---------------------------------------------------------------------------


class SearchResult(BaseModel):
    """One match from a provider.

    Empty ids/titles are representable so the dispatcher can drop them;
    they never reach a SearchResponse.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique result identifier within its category")
    title: str = Field(description="Display name")
    description: str = Field(default="")
    location: GeoPoint | None = Field(default=None)
    score: float = Field(default=0.0, description="Ordering key only, higher is better")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Category-specific extras (username, hazard_type, distance_km, ...)",
    )


class SearchResponse(BaseModel):
    """Final dispatcher output: results ordered by (-score, id)."""

    model_config = ConfigDict(frozen=True)

    category: Category
    results: list[SearchResult] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Wire payloads
# ---------------------------------------------------------------------------


class SearchRequestPayload(BaseModel):
    """Request body accepted by transport adapters.

    ``type`` is kept as a raw string so that unknown values reach the
    dispatcher and fail validation there.
    """

    query: str = Field(default="")
    type: str | None = Field(default=None, description="places | users | hazards")
    latitude: float | None = Field(default=None)
    longitude: float | None = Field(default=None)


class SearchResultItem(BaseModel):
    """One serialized result as returned to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: str = ""
    latitude: float | None = None
    longitude: float | None = None
    username: str | None = None
    hazard_type: str | None = Field(default=None, alias="hazardType")

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResultItem":
        loc = result.location
        username = result.metadata.get("username")
        hazard_type = result.metadata.get("hazard_type")
        return cls(
            id=result.id,
            name=result.title,
            description=result.description,
            latitude=loc.latitude if loc else None,
            longitude=loc.longitude if loc else None,
            username=str(username) if username else None,
            hazard_type=str(hazard_type) if hazard_type else None,
        )

    def to_wire(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True)
        for optional in ("username", "hazardType"):
            if data.get(optional) is None:
                data.pop(optional, None)
        return data


class ErrorBody(BaseModel):
    """Error payload for failed dispatches."""

    error: str = Field(description="validation | upstream")
    field: str | None = Field(default=None)
    reason: str = Field(default="")
    retryable: bool = Field(default=False)
