"""Normalization and ranking of provider output.

Providers are trusted for content, not for shape: anything that breaks the
result contract is dropped by the dispatcher and logged, never surfaced.
"""

import math
from collections.abc import Iterable

from wander_search.contracts.search_v1 import SearchResult


def contract_violation(result: object) -> str | None:
    """Return why a provider result must be dropped, or None if it is valid."""
    if not isinstance(result, SearchResult):
        return f"not a SearchResult ({type(result).__name__})"
    if not result.id.strip():
        return "empty id"
    if not result.title.strip():
        return "empty title"
    if not math.isfinite(result.score):
        return "non-finite score"
    return None


def deduplicate_results(results: Iterable[SearchResult]) -> list[SearchResult]:
    """Collapse duplicate ids, keeping the highest-scored version."""
    seen: dict[str, SearchResult] = {}
    for r in results:
        existing = seen.get(r.id)
        if existing is None or r.score > existing.score:
            seen[r.id] = r
    return list(seen.values())


def rank_and_truncate(results: Iterable[SearchResult], page_size: int) -> list[SearchResult]:
    """Sort by score descending, id ascending on ties; keep the first page_size."""
    ranked = sorted(results, key=lambda r: (-r.score, r.id))
    return ranked[: max(page_size, 0)]
