"""Places provider: text match plus proximity to the caller's origin."""

from wander_search.contracts.search_v1 import Category, SearchQuery, SearchResult
from wander_search.search.interface import SearchProvider
from wander_search.search.scoring import (
    ScoringWeights,
    combined_score,
    location_of,
    text_relevance,
)
from wander_search.search.stores import RecordStore, guarded_lookup, record_str


class PlacesProvider(SearchProvider):
    def __init__(
        self,
        store: RecordStore,
        weights: ScoringWeights | None = None,
        lookup_limit: int = 200,
    ):
        self._store = store
        self._weights = weights or ScoringWeights()
        self._lookup_limit = lookup_limit

    async def search(
        self,
        query: SearchQuery,
        timeout: float | None = None,
    ) -> list[SearchResult]:
        self.check_category(query)
        records = await guarded_lookup(
            self._store, query.text, self._lookup_limit, timeout=timeout
        )
        results: list[SearchResult] = []
        for record in records:
            name = record_str(record, "name")
            relevance = text_relevance(
                query.text, name, record.get("description"), record.get("keywords")
            )
            if relevance <= 0.0:
                continue
            location = location_of(record)
            score, dist = combined_score(relevance, query.origin, location, self._weights)
            metadata = {"distance_km": round(dist, 3)} if dist is not None else {}
            results.append(
                SearchResult(
                    id=record_str(record, "id"),
                    title=name,
                    description=record_str(record, "description"),
                    location=location,
                    score=score,
                    metadata=metadata,
                )
            )
        return results

    def get_category(self) -> Category:
        return Category.PLACES
