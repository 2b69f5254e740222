"""Backing stores behind providers: opaque lookup services returning raw records.

A record is a plain dict with at least ``id`` and ``name``. Location-bearing
records carry ``latitude``/``longitude``; category-specific keys (``username``,
``hazard_type``, ``severity``, ``keywords``) pass through untouched.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

import httpx

from wander_search.search.errors import ProviderError, ProviderErrorKind

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_FIELDS: tuple[str, ...] = ("name", "description", "keywords")

# Upstream statuses that mean "try again later" rather than "broken"
_UNAVAILABLE_STATUSES = frozenset({429, 502, 503, 504})


class RecordStore(ABC):
    """Opaque lookup service for one category."""

    @abstractmethod
    async def lookup(
        self,
        text: str,
        limit: int,
        timeout: float | None = None,
    ) -> list[dict[str, Any]]:
        """Return up to ``limit`` raw records matching ``text``."""


class BlockingRecordStore(RecordStore):
    """Base for stores that wrap a synchronous driver.

    ``lookup_sync`` runs in a worker thread so the event loop stays free and
    the dispatcher deadline still fires. A call abandoned at the deadline
    keeps its thread until the driver returns; its result is discarded.
    """

    @abstractmethod
    def lookup_sync(
        self,
        text: str,
        limit: int,
        timeout: float | None = None,
    ) -> list[dict[str, Any]]:
        """Blocking lookup; same contract as ``lookup``."""

    async def lookup(
        self,
        text: str,
        limit: int,
        timeout: float | None = None,
    ) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self.lookup_sync, text, limit, timeout)


def _field_text(record: dict[str, Any], field: str) -> str:
    value = record.get(field)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value)


class InMemoryRecordStore(RecordStore):
    """Substring lookup over a fixed list of records.

    ``limit`` is applied in insertion order before any scoring, so with more
    matches than ``limit`` the records past the cutoff never reach ranking.
    Size ``STORE_LOOKUP_LIMIT`` to cover the whole record set when proximity
    ordering must consider every match.
    """

    def __init__(
        self,
        records: Iterable[dict[str, Any]],
        search_fields: tuple[str, ...] = DEFAULT_SEARCH_FIELDS,
    ):
        self._records = tuple(dict(r) for r in records)
        self._search_fields = search_fields

    def __len__(self) -> int:
        return len(self._records)

    def _matches(self, record: dict[str, Any], needle: str) -> bool:
        if not needle:
            return True
        return any(
            needle in _field_text(record, f).lower() for f in self._search_fields
        )

    async def lookup(
        self,
        text: str,
        limit: int,
        timeout: float | None = None,
    ) -> list[dict[str, Any]]:
        needle = (text or "").strip().lower()
        out: list[dict[str, Any]] = []
        for record in self._records:
            if self._matches(record, needle):
                out.append(dict(record))
                if len(out) >= limit:
                    break
        return out


class HttpRecordStore(RecordStore):
    """JSON-over-HTTP lookup: GET <base_url>?q=<text>&limit=<n>.

    Accepts either a bare JSON list or ``{"results": [...]}``.
    """

    def __init__(
        self,
        base_url: str,
        default_timeout: float = 2.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = (base_url or "").rstrip("/")
        self._default_timeout = default_timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def lookup(
        self,
        text: str,
        limit: int,
        timeout: float | None = None,
    ) -> list[dict[str, Any]]:
        if not self._base_url:
            raise ProviderError(ProviderErrorKind.INTERNAL, "store URL is not configured")
        params = {"q": text or "", "limit": limit}
        effective_timeout = timeout if timeout is not None else self._default_timeout
        try:
            async with httpx.AsyncClient(
                timeout=effective_timeout, transport=self._transport
            ) as client:
                response = await client.get(
                    self._base_url,
                    params=params,
                    follow_redirects=True,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            raise ProviderError(
                ProviderErrorKind.TIMEOUT, f"store timed out: {self._base_url}"
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            kind = (
                ProviderErrorKind.UNAVAILABLE
                if status in _UNAVAILABLE_STATUSES
                else ProviderErrorKind.INTERNAL
            )
            raise ProviderError(kind, f"store returned HTTP {status}") from e
        except httpx.TransportError as e:
            raise ProviderError(
                ProviderErrorKind.UNAVAILABLE, f"store unreachable: {e}"
            ) from e
        except ValueError as e:
            raise ProviderError(
                ProviderErrorKind.INTERNAL, "store returned invalid JSON"
            ) from e

        raw = data.get("results") if isinstance(data, dict) else data
        if not isinstance(raw, list):
            raise ProviderError(
                ProviderErrorKind.INTERNAL, "store payload has no result list"
            )
        records = [item for item in raw if isinstance(item, dict)]
        if len(records) != len(raw):
            logger.warning(
                "Store %s: skipped %s non-object records",
                self._base_url,
                len(raw) - len(records),
            )
        return records[:limit]


def record_str(record: dict[str, Any], key: str) -> str:
    value = record.get(key)
    return "" if value is None else str(value)


async def guarded_lookup(
    store: RecordStore,
    text: str,
    limit: int,
    timeout: float | None = None,
) -> list[dict[str, Any]]:
    """Run a store lookup so that every failure surfaces as ProviderError."""
    try:
        return await store.lookup(text, limit, timeout=timeout)
    except ProviderError:
        raise
    except Exception as e:
        logger.error("Store %s failed: %s", type(store).__name__, e)
        raise ProviderError(ProviderErrorKind.INTERNAL, f"store error: {e}") from e
