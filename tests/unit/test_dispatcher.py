import asyncio
import math
import time

import pytest

from wander_search.contracts.search_v1 import (
    Category,
    SearchQuery,
    SearchRequestPayload,
    SearchResult,
)
from wander_search.search.dispatcher import SearchDispatcher
from wander_search.search.errors import (
    DispatchError,
    DispatchErrorKind,
    ProviderError,
    ProviderErrorKind,
)
from wander_search.search.interface import SearchProvider
from wander_search.search.providers import PlacesProvider
from wander_search.search.registry import ProviderRegistry
from wander_search.search.stores import BlockingRecordStore


class StaticProvider(SearchProvider):
    """Returns a fixed payload (or raises) and records every query it sees."""

    def __init__(self, category: Category, results=None, error: Exception | None = None):
        self._category = category
        self._results = results if results is not None else []
        self._error = error
        self.queries: list[SearchQuery] = []

    async def search(self, query, timeout=None):
        self.queries.append(query)
        if self._error is not None:
            raise self._error
        return self._results

    def get_category(self) -> Category:
        return self._category


def _dispatcher(*providers: SearchProvider, **kwargs) -> SearchDispatcher:
    table = {p.get_category(): p for p in providers}
    for category in Category:
        table.setdefault(category, StaticProvider(category))
    return SearchDispatcher(ProviderRegistry(table), **kwargs)


def _result(id_: str, score: float, title: str | None = None) -> SearchResult:
    return SearchResult(id=id_, title=title if title is not None else f"item {id_}", score=score)


@pytest.mark.asyncio
async def test_scenario_places_sorted_by_score():
    provider = StaticProvider(
        Category.PLACES,
        [
            SearchResult(id="2", title="Times Square", score=5.0),
            SearchResult(id="1", title="Central Park", score=9.1),
        ],
    )
    response = await _dispatcher(provider).dispatch({"query": "park", "type": "places"})

    assert response.category == Category.PLACES
    assert [r.title for r in response.results] == ["Central Park", "Times Square"]
    assert [r.score for r in response.results] == [9.1, 5.0]


@pytest.mark.asyncio
async def test_scenario_unknown_type_is_validation_error():
    with pytest.raises(DispatchError) as exc:
        await _dispatcher().dispatch({"query": "x", "type": "vehicles"})
    assert exc.value.kind == DispatchErrorKind.VALIDATION
    assert exc.value.field == "type"


@pytest.mark.asyncio
async def test_scenario_latitude_without_longitude_is_validation_error():
    provider = StaticProvider(Category.PLACES)
    with pytest.raises(DispatchError) as exc:
        await _dispatcher(provider).dispatch({"query": "x", "type": "places", "latitude": 40.7})
    assert exc.value.kind == DispatchErrorKind.VALIDATION
    assert exc.value.field == "location"
    assert provider.queries == []


@pytest.mark.parametrize("token", ["Places", "PLACES", " places", "place", ""])
@pytest.mark.asyncio
async def test_type_match_is_exact(token):
    provider = StaticProvider(Category.PLACES)
    with pytest.raises(DispatchError) as exc:
        await _dispatcher(provider).dispatch({"query": "x", "type": token})
    assert exc.value.field == "type"
    assert provider.queries == []


@pytest.mark.asyncio
async def test_missing_type_is_validation_error():
    with pytest.raises(DispatchError) as exc:
        await _dispatcher().dispatch({"query": "x"})
    assert exc.value.field == "type"


@pytest.mark.parametrize(
    ("lat", "lon"),
    [(91.0, 0.0), (-90.5, 0.0), (0.0, 180.5), (0.0, -181.0), (math.nan, 0.0), (0.0, math.inf)],
)
@pytest.mark.asyncio
async def test_out_of_range_coordinates_are_rejected(lat, lon):
    with pytest.raises(DispatchError) as exc:
        await _dispatcher().dispatch(
            {"query": "x", "type": "hazards", "latitude": lat, "longitude": lon}
        )
    assert exc.value.field == "location"


@pytest.mark.asyncio
async def test_non_numeric_coordinate_is_location_error():
    with pytest.raises(DispatchError) as exc:
        await _dispatcher().dispatch(
            {"query": "x", "type": "places", "latitude": "north", "longitude": 1.0}
        )
    assert exc.value.field == "location"


@pytest.mark.asyncio
async def test_non_string_query_is_query_error():
    with pytest.raises(DispatchError) as exc:
        await _dispatcher().dispatch({"query": 42, "type": "places"})
    assert exc.value.field == "query"


@pytest.mark.asyncio
async def test_non_object_body_is_body_error():
    with pytest.raises(DispatchError) as exc:
        await _dispatcher().dispatch(["places"])  # type: ignore[arg-type]
    assert exc.value.field == "body"


@pytest.mark.asyncio
async def test_origin_passed_to_located_providers():
    provider = StaticProvider(Category.HAZARDS)
    await _dispatcher(provider).dispatch(
        SearchRequestPayload(query="", type="hazards", latitude=40.7, longitude=-73.9)
    )
    origin = provider.queries[0].origin
    assert origin is not None
    assert origin.as_tuple() == (40.7, -73.9)


@pytest.mark.asyncio
async def test_origin_dropped_for_users():
    provider = StaticProvider(Category.USERS)
    await _dispatcher(provider).dispatch(
        {"query": "john", "type": "users", "latitude": 40.7, "longitude": -73.9}
    )
    assert provider.queries[0].origin is None
    assert provider.queries[0].text == "john"


@pytest.mark.asyncio
async def test_unregistered_category_is_validation_error():
    registry = ProviderRegistry({Category.PLACES: StaticProvider(Category.PLACES)})
    dispatcher = SearchDispatcher(registry)
    with pytest.raises(DispatchError) as exc:
        await dispatcher.dispatch({"query": "x", "type": "users"})
    assert exc.value.kind == DispatchErrorKind.VALIDATION
    assert exc.value.field == "type"


@pytest.mark.parametrize(
    ("kind", "retryable"),
    [
        (ProviderErrorKind.TIMEOUT, True),
        (ProviderErrorKind.UNAVAILABLE, True),
        (ProviderErrorKind.INTERNAL, False),
    ],
)
@pytest.mark.asyncio
async def test_provider_errors_become_upstream_errors(kind, retryable):
    provider = StaticProvider(Category.PLACES, error=ProviderError(kind, "store down"))
    with pytest.raises(DispatchError) as exc:
        await _dispatcher(provider).dispatch({"query": "x", "type": "places"})
    assert exc.value.kind == DispatchErrorKind.UPSTREAM
    assert exc.value.retryable is retryable
    assert exc.value.upstream_kind == kind


@pytest.mark.asyncio
async def test_unexpected_provider_exception_is_non_retryable_upstream():
    provider = StaticProvider(Category.PLACES, error=KeyError("oops"))
    with pytest.raises(DispatchError) as exc:
        await _dispatcher(provider).dispatch({"query": "x", "type": "places"})
    assert exc.value.kind == DispatchErrorKind.UPSTREAM
    assert exc.value.retryable is False
    assert "oops" not in exc.value.reason


@pytest.mark.asyncio
async def test_non_sequence_provider_output_is_upstream_error():
    provider = StaticProvider(Category.PLACES, results={"id": "1"})
    with pytest.raises(DispatchError) as exc:
        await _dispatcher(provider).dispatch({"query": "x", "type": "places"})
    assert exc.value.upstream_kind == ProviderErrorKind.INTERNAL


class SlowProvider(StaticProvider):
    def __init__(self, category: Category, delay: float):
        super().__init__(category)
        self.delay = delay
        self.cancelled = asyncio.Event()

    async def search(self, query, timeout=None):
        self.queries.append(query)
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled.set()
            raise
        return [_result("1", 1.0)]


class StubbornProvider(StaticProvider):
    """Swallows the first cancellation and keeps running for a while."""

    async def search(self, query, timeout=None):
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            await asyncio.sleep(0.3)
        return []


@pytest.mark.asyncio
async def test_deadline_exceeded_is_retryable_timeout():
    provider = SlowProvider(Category.PLACES, delay=5)
    dispatcher = _dispatcher(provider, timeout_ms=50)

    t0 = time.monotonic()
    with pytest.raises(DispatchError) as exc:
        await dispatcher.dispatch({"query": "x", "type": "places"})
    elapsed = time.monotonic() - t0

    assert elapsed < 1.0
    assert exc.value.kind == DispatchErrorKind.UPSTREAM
    assert exc.value.retryable is True
    assert exc.value.upstream_kind == ProviderErrorKind.TIMEOUT
    await asyncio.sleep(0.01)
    assert provider.cancelled.is_set()


@pytest.mark.asyncio
async def test_deadline_holds_when_provider_ignores_cancellation():
    dispatcher = _dispatcher(StubbornProvider(Category.PLACES), timeout_ms=50)

    t0 = time.monotonic()
    with pytest.raises(DispatchError) as exc:
        await dispatcher.dispatch({"query": "x", "type": "places"})

    assert time.monotonic() - t0 < 0.25
    assert exc.value.upstream_kind == ProviderErrorKind.TIMEOUT


class SleepyDriverStore(BlockingRecordStore):
    """Synchronous driver that blocks its thread well past the deadline."""

    def lookup_sync(self, text, limit, timeout=None):
        time.sleep(0.5)
        return [{"id": "1", "name": "Central Park"}]


@pytest.mark.asyncio
async def test_deadline_holds_for_blocking_store():
    dispatcher = _dispatcher(PlacesProvider(SleepyDriverStore()), timeout_ms=50)

    t0 = time.monotonic()
    with pytest.raises(DispatchError) as exc:
        await dispatcher.dispatch({"query": "park", "type": "places"})

    assert time.monotonic() - t0 < 0.3
    assert exc.value.kind == DispatchErrorKind.UPSTREAM
    assert exc.value.retryable is True
    assert exc.value.upstream_kind == ProviderErrorKind.TIMEOUT


@pytest.mark.asyncio
async def test_caller_cancellation_reaches_provider():
    provider = SlowProvider(Category.PLACES, delay=5)
    dispatcher = _dispatcher(provider, timeout_ms=10_000)

    task = asyncio.create_task(dispatcher.dispatch({"query": "x", "type": "places"}))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    await asyncio.sleep(0.01)
    assert provider.cancelled.is_set()


@pytest.mark.asyncio
async def test_contract_violations_are_dropped_not_surfaced():
    provider = StaticProvider(
        Category.PLACES,
        [
            _result("", 9.0),
            _result("2", 8.0, title=""),
            _result("3", 7.0, title="   "),
            _result("4", math.nan),
            {"id": "5", "title": "dict", "score": 6.0},
            None,
            _result("6", 1.0),
        ],
    )
    response = await _dispatcher(provider).dispatch({"query": "", "type": "places"})
    assert [r.id for r in response.results] == ["6"]


@pytest.mark.asyncio
async def test_duplicate_ids_keep_highest_score():
    provider = StaticProvider(
        Category.PLACES,
        [_result("a", 1.0), _result("a", 3.0), _result("b", 2.0)],
    )
    response = await _dispatcher(provider).dispatch({"query": "", "type": "places"})
    assert [(r.id, r.score) for r in response.results] == [("a", 3.0), ("b", 2.0)]


@pytest.mark.asyncio
async def test_ties_break_on_ascending_id():
    provider = StaticProvider(
        Category.USERS,
        [_result("c", 1.0), _result("a", 1.0), _result("b", 2.0)],
    )
    response = await _dispatcher(provider).dispatch({"query": "", "type": "users"})
    assert [r.id for r in response.results] == ["b", "a", "c"]


@pytest.mark.asyncio
async def test_truncates_to_page_size_keeping_best():
    provider = StaticProvider(
        Category.PLACES, [_result(f"{i:02d}", float(i)) for i in range(10)]
    )
    response = await _dispatcher(provider, page_size=3).dispatch({"query": "", "type": "places"})
    assert [r.id for r in response.results] == ["09", "08", "07"]


@pytest.mark.asyncio
async def test_provider_returning_none_yields_empty_response():
    provider = StaticProvider(Category.HAZARDS)
    provider._results = None
    response = await _dispatcher(provider).dispatch({"query": "", "type": "hazards"})
    assert response.results == []


def test_dispatcher_rejects_bad_limits():
    registry = ProviderRegistry({})
    with pytest.raises(ValueError):
        SearchDispatcher(registry, timeout_ms=0)
    with pytest.raises(ValueError):
        SearchDispatcher(registry, page_size=0)
