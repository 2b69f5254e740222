"""Provider registry: maps each category to its provider.

Built once at startup from a static mapping and read-only afterwards, so
concurrent dispatches share it without locking.
"""

import logging
from collections.abc import Mapping
from types import MappingProxyType

from wander_search.contracts.search_v1 import Category
from wander_search.search.errors import UnknownCategory
from wander_search.search.interface import SearchProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Immutable category -> provider lookup."""

    def __init__(self, providers: Mapping[Category, SearchProvider]) -> None:
        table: dict[Category, SearchProvider] = {}
        for key, provider in providers.items():
            category = Category(key)
            declared = provider.get_category()
            if declared != category:
                raise ValueError(
                    f"provider {type(provider).__name__} answers for '{declared}', "
                    f"registered under '{category}'"
                )
            table[category] = provider
        self._providers: Mapping[Category, SearchProvider] = MappingProxyType(table)
        logger.info(
            "Registered providers: %s",
            {c.value: type(p).__name__ for c, p in table.items()},
        )

    def resolve(self, category: Category | str) -> SearchProvider:
        try:
            key = Category(category)
        except ValueError:
            raise UnknownCategory(str(category)) from None
        provider = self._providers.get(key)
        if provider is None:
            raise UnknownCategory(key.value)
        return provider

    def categories(self) -> list[Category]:
        return list(self._providers.keys())

    def __contains__(self, category: object) -> bool:
        return category in self._providers
