"""Provider wiring, registry construction, and dispatcher setup at startup."""

from wander_search.contracts.search_v1 import Category
from wander_search.core.config import Config, config
from wander_search.core.logger import logger
from wander_search.search import seed
from wander_search.search.dispatcher import SearchDispatcher
from wander_search.search.interface import SearchProvider
from wander_search.search.providers import HazardsProvider, PlacesProvider, UsersProvider
from wander_search.search.registry import ProviderRegistry
from wander_search.search.scoring import ScoringWeights
from wander_search.search.stores import HttpRecordStore, InMemoryRecordStore, RecordStore

# Fields the in-memory stores match the query against, per category
_SEED_SEARCH_FIELDS: dict[Category, tuple[str, ...]] = {
    Category.PLACES: ("name", "description", "keywords"),
    Category.USERS: ("name", "username", "description"),
    Category.HAZARDS: ("name", "description", "hazard_type"),
}

_SEED_RECORDS = {
    Category.PLACES: seed.PLACES,
    Category.USERS: seed.USERS,
    Category.HAZARDS: seed.HAZARDS,
}


def _build_stores(cfg: Config) -> dict[Category, RecordStore]:
    if cfg.search_backend == "http":
        urls = {
            Category.PLACES: cfg.places_store_url,
            Category.USERS: cfg.users_store_url,
            Category.HAZARDS: cfg.hazards_store_url,
        }
        return {
            category: HttpRecordStore(url, default_timeout=cfg.search_timeout_seconds)
            for category, url in urls.items()
        }
    return {
        category: InMemoryRecordStore(records, search_fields=_SEED_SEARCH_FIELDS[category])
        for category, records in _SEED_RECORDS.items()
    }


def build_providers(cfg: Config) -> dict[Category, SearchProvider]:
    stores = _build_stores(cfg)
    weights = ScoringWeights(
        relevance=cfg.weight_relevance,
        proximity=cfg.weight_proximity,
        sigma_km=cfg.rank_dist_sigma_km,
    )
    limit = cfg.store_lookup_limit
    return {
        Category.PLACES: PlacesProvider(stores[Category.PLACES], weights, lookup_limit=limit),
        Category.USERS: UsersProvider(stores[Category.USERS], lookup_limit=limit),
        Category.HAZARDS: HazardsProvider(stores[Category.HAZARDS], weights, lookup_limit=limit),
    }


def setup_search(cfg: Config | None = None) -> SearchDispatcher:
    """Validate config and build the process-wide dispatcher.

    Raises ValueError if the configuration is unusable.
    """
    cfg = cfg or config
    problems = cfg.validate()
    if problems:
        for problem in problems:
            logger.error("Config: %s", problem)
        raise ValueError("invalid configuration: " + "; ".join(problems))

    registry = ProviderRegistry(build_providers(cfg))
    dispatcher = SearchDispatcher(
        registry,
        timeout_ms=cfg.search_timeout_ms,
        page_size=cfg.search_page_size,
    )
    logger.info(
        "Search ready: backend=%s timeout=%sms page_size=%s",
        cfg.search_backend,
        cfg.search_timeout_ms,
        cfg.search_page_size,
    )
    return dispatcher
