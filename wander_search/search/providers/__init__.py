from wander_search.search.providers.hazards import HazardsProvider
from wander_search.search.providers.places import PlacesProvider
from wander_search.search.providers.users import UsersProvider

__all__ = [
    "HazardsProvider",
    "PlacesProvider",
    "UsersProvider",
]
