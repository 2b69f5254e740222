"""Users provider: text match on display name and username; no location."""

from wander_search.contracts.search_v1 import Category, SearchQuery, SearchResult
from wander_search.search.interface import SearchProvider
from wander_search.search.scoring import EXACT_MATCH, text_relevance
from wander_search.search.stores import RecordStore, guarded_lookup, record_str


class UsersProvider(SearchProvider):
    def __init__(self, store: RecordStore, lookup_limit: int = 200):
        self._store = store
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
        needle = query.text.strip().lower()
        results: list[SearchResult] = []
        for record in records:
            name = record_str(record, "name")
            username = record_str(record, "username")
            if needle and username.lower() == needle:
                relevance = EXACT_MATCH
            else:
                relevance = text_relevance(
                    query.text, name, username, record.get("description")
                )
            if relevance <= 0.0:
                continue
            results.append(
                SearchResult(
                    id=record_str(record, "id"),
                    title=name,
                    description=record_str(record, "description"),
                    score=relevance,
                    metadata={"username": username} if username else {},
                )
            )
        return results

    def get_category(self) -> Category:
        return Category.USERS
