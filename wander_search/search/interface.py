"""Standard interface for category search providers used by the dispatcher.

Every category (places, users, hazards) has exactly one SearchProvider.
"""

from abc import ABC, abstractmethod

from wander_search.contracts.search_v1 import Category, SearchQuery, SearchResult
from wander_search.search.errors import InvalidCategory


class SearchProvider(ABC):
    """Base class for all category providers."""

    @abstractmethod
    async def search(
        self,
        query: SearchQuery,
        timeout: float | None = None,
    ) -> list[SearchResult]:
        """Return raw matches for a validated query.

        ``timeout`` is the remaining deadline in seconds. Failures raise
        ProviderError.
        """

    @abstractmethod
    def get_category(self) -> Category:
        """Category this provider answers for."""

    def check_category(self, query: SearchQuery) -> None:
        expected = self.get_category()
        if query.category != expected:
            raise InvalidCategory(expected.value, str(query.category))
