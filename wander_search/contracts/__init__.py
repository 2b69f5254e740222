"""Search contract v1: shared value types for queries, results, and wire payloads."""

from wander_search.contracts.search_v1 import (
    Category,
    ErrorBody,
    GeoPoint,
    SearchQuery,
    SearchRequestPayload,
    SearchResponse,
    SearchResult,
    SearchResultItem,
)

__all__ = [
    "Category",
    "ErrorBody",
    "GeoPoint",
    "SearchQuery",
    "SearchRequestPayload",
    "SearchResponse",
    "SearchResult",
    "SearchResultItem",
]
