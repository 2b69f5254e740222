"""Category search: provider interface, registry, and dispatcher."""

from wander_search.search.dispatcher import SearchDispatcher
from wander_search.search.errors import DispatchError, ProviderError
from wander_search.search.interface import SearchProvider
from wander_search.search.registry import ProviderRegistry

__all__ = [
    "DispatchError",
    "ProviderError",
    "ProviderRegistry",
    "SearchDispatcher",
    "SearchProvider",
]
