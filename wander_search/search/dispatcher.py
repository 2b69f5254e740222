"""Search dispatcher: validates a request, calls one provider, and shapes the response.

Flow: validate -> resolve provider -> invoke under deadline -> normalize ->
rank & truncate. Only DispatchError leaves this module; provider-internal
exceptions are translated here. No retries happen at this layer.
"""

import asyncio
import math
import time
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from wander_search.contracts.search_v1 import (
    LOCATED_CATEGORIES,
    Category,
    GeoPoint,
    SearchQuery,
    SearchRequestPayload,
    SearchResponse,
    SearchResult,
)
from wander_search.core.logger import logger, new_request_id
from wander_search.search.errors import (
    DispatchError,
    ProviderError,
    ProviderErrorKind,
    UnknownCategory,
)
from wander_search.search.interface import SearchProvider
from wander_search.search.ranking import (
    contract_violation,
    deduplicate_results,
    rank_and_truncate,
)
from wander_search.search.registry import ProviderRegistry

DEFAULT_TIMEOUT_MS = 2000
DEFAULT_PAGE_SIZE = 50

VALID_TYPES: tuple[str, ...] = tuple(c.value for c in Category)
_COORDINATE_FIELDS = ("latitude", "longitude")


def parse_payload(raw: SearchRequestPayload | Mapping[str, Any]) -> SearchRequestPayload:
    """Coerce a wire payload into SearchRequestPayload, failing as a validation error."""
    if isinstance(raw, SearchRequestPayload):
        return raw
    if not isinstance(raw, Mapping):
        raise DispatchError.validation("body", "request body must be a JSON object")
    try:
        return SearchRequestPayload.model_validate(dict(raw))
    except ValidationError as e:
        first = e.errors()[0]
        loc = first.get("loc") or ()
        field = str(loc[0]) if loc else "body"
        if field in _COORDINATE_FIELDS:
            field = "location"
        raise DispatchError.validation(field, first.get("msg", "invalid value")) from None


def _check_coordinate(name: str, value: float, bound: float) -> None:
    if not math.isfinite(value) or not -bound <= value <= bound:
        raise DispatchError.validation(
            "location", f"{name} {value} is outside [-{bound:g}, {bound:g}]"
        )


def validate_origin(latitude: float | None, longitude: float | None) -> GeoPoint | None:
    if latitude is None and longitude is None:
        return None
    if latitude is None or longitude is None:
        missing = "latitude" if latitude is None else "longitude"
        raise DispatchError.validation(
            "location", f"{missing} is missing; coordinates must be supplied as a pair"
        )
    _check_coordinate("latitude", latitude, 90.0)
    _check_coordinate("longitude", longitude, 180.0)
    return GeoPoint(latitude=latitude, longitude=longitude)


def validate_request(payload: SearchRequestPayload) -> SearchQuery:
    """Turn a wire payload into a SearchQuery or raise a validation DispatchError.

    Category tokens match exactly; "Places" or " places" are rejected.
    """
    raw_type = payload.type
    if not raw_type:
        raise DispatchError.validation(
            "type", f"type is required; expected one of {', '.join(VALID_TYPES)}"
        )
    if raw_type not in VALID_TYPES:
        raise DispatchError.validation(
            "type",
            f"unknown type '{raw_type}'; expected one of {', '.join(VALID_TYPES)}",
        )
    category = Category(raw_type)
    origin = validate_origin(payload.latitude, payload.longitude)
    if category not in LOCATED_CATEGORIES:
        # Proximity only applies to location-bearing categories
        origin = None
    return SearchQuery(text=payload.query, category=category, origin=origin)


def _consume_abandoned(task: asyncio.Future) -> None:
    """Retrieve the outcome of a provider call nobody waits for anymore."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Abandoned provider call finished with %s: %s", type(exc).__name__, exc)


class SearchDispatcher:
    """Orchestrates validation, provider invocation, and result normalization."""

    def __init__(
        self,
        registry: ProviderRegistry,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._registry = registry
        self._timeout_ms = timeout_ms
        self._page_size = page_size

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_ms / 1000.0

    @property
    def page_size(self) -> int:
        return self._page_size

    async def dispatch(
        self, raw: SearchRequestPayload | Mapping[str, Any]
    ) -> SearchResponse:
        new_request_id()
        t0 = time.monotonic()
        try:
            payload = parse_payload(raw)
            logger.dispatch_start(
                payload.type,
                payload.query,
                payload.latitude is not None or payload.longitude is not None,
            )
            query = validate_request(payload)
            try:
                provider = self._registry.resolve(query.category)
            except UnknownCategory as e:
                raise DispatchError.validation("type", str(e)) from None
            raw_results = await self._invoke(provider, query)
        except DispatchError as e:
            logger.dispatch_failed(
                e.kind.value,
                e.reason,
                field=e.field,
                retryable=e.retryable,
                duration_ms=round((time.monotonic() - t0) * 1000, 1),
            )
            raise

        kept, dropped = self._normalize(query.category, raw_results)
        results = rank_and_truncate(kept, self._page_size)
        logger.dispatch_done(
            query.category.value,
            raw_count=len(raw_results),
            returned=len(results),
            dropped=dropped,
            duration_ms=round((time.monotonic() - t0) * 1000, 1),
        )
        return SearchResponse(category=query.category, results=results)

    async def _invoke(self, provider: SearchProvider, query: SearchQuery) -> list[Any]:
        """Run the provider call, waiting no longer than the configured deadline."""
        timeout = self.timeout_seconds
        category = query.category.value
        task = asyncio.ensure_future(provider.search(query, timeout=timeout))
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout)
        except asyncio.CancelledError:
            # Caller went away: propagate cancellation to the provider call
            task.cancel()
            task.add_done_callback(_consume_abandoned)
            raise

        if task not in done:
            task.cancel()
            task.add_done_callback(_consume_abandoned)
            raise DispatchError.upstream(
                ProviderErrorKind.TIMEOUT,
                f"{category} provider did not respond within {self._timeout_ms} ms",
            )
        if task.cancelled():
            raise DispatchError.upstream(
                ProviderErrorKind.UNAVAILABLE, f"{category} provider call was cancelled"
            )

        try:
            results = task.result()
        except ProviderError as e:
            raise DispatchError.upstream(
                e.kind, f"{category} provider failed: {e.message}"
            ) from e
        except Exception as e:
            logger.error(
                "Provider %s raised %s",
                type(provider).__name__,
                type(e).__name__,
                exception=e,
            )
            raise DispatchError.upstream(
                ProviderErrorKind.INTERNAL, f"{category} provider error"
            ) from e

        if results is None:
            return []
        if isinstance(results, (str, bytes, Mapping)):
            raise DispatchError.upstream(
                ProviderErrorKind.INTERNAL, f"{category} provider returned a non-sequence"
            )
        try:
            return list(results)
        except TypeError as e:
            raise DispatchError.upstream(
                ProviderErrorKind.INTERNAL, f"{category} provider returned a non-sequence"
            ) from e

    def _normalize(
        self, category: Category, raw_results: list[Any]
    ) -> tuple[list[SearchResult], int]:
        """Drop contract violations and duplicate ids. Returns (kept, dropped count)."""
        valid: list[SearchResult] = []
        dropped = 0
        for item in raw_results:
            reason = contract_violation(item)
            if reason is not None:
                dropped += 1
                logger.result_dropped(category.value, getattr(item, "id", None), reason)
                continue
            valid.append(item)
        deduped = deduplicate_results(valid)
        duplicates = len(valid) - len(deduped)
        if duplicates:
            logger.warning(
                "%s provider returned %s duplicate ids; kept highest scores",
                category.value,
                duplicates,
            )
        return deduped, dropped + duplicates
