"""Error taxonomy for providers, the registry, and the dispatcher."""

from __future__ import annotations

from enum import StrEnum

from wander_search.contracts.search_v1 import ErrorBody


class ProviderErrorKind(StrEnum):
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


class DispatchErrorKind(StrEnum):
    VALIDATION = "validation"
    UPSTREAM = "upstream"


class SearchError(Exception):
    """Base class for all search errors."""


class ProviderError(SearchError):
    """A provider or its backing store failed."""

    def __init__(self, kind: ProviderErrorKind, message: str = ""):
        self.kind = kind
        self.message = message or kind.value
        super().__init__(f"{kind.value}: {self.message}")

    @property
    def retryable(self) -> bool:
        return self.kind in (ProviderErrorKind.TIMEOUT, ProviderErrorKind.UNAVAILABLE)


class InvalidCategory(SearchError):
    """A provider was handed a query for another category (programming error)."""

    def __init__(self, expected: str, got: str):
        self.expected = expected
        self.got = got
        super().__init__(f"provider for '{expected}' received query for '{got}'")


class UnknownCategory(SearchError):
    """No provider is registered for the requested category."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"unknown category '{category}'")


class DispatchError(SearchError):
    """The only error type that crosses into transport adapters."""

    def __init__(
        self,
        kind: DispatchErrorKind,
        reason: str,
        *,
        field: str | None = None,
        retryable: bool = False,
        upstream_kind: ProviderErrorKind | None = None,
    ):
        self.kind = kind
        self.reason = reason
        self.field = field
        self.retryable = retryable
        self.upstream_kind = upstream_kind
        label = f"{kind.value}[{field}]" if field else kind.value
        super().__init__(f"{label}: {reason}")

    @classmethod
    def validation(cls, field: str, reason: str) -> "DispatchError":
        return cls(DispatchErrorKind.VALIDATION, reason, field=field)

    @classmethod
    def upstream(cls, upstream_kind: ProviderErrorKind, reason: str) -> "DispatchError":
        return cls(
            DispatchErrorKind.UPSTREAM,
            reason,
            retryable=upstream_kind
            in (ProviderErrorKind.TIMEOUT, ProviderErrorKind.UNAVAILABLE),
            upstream_kind=upstream_kind,
        )

    @property
    def is_validation(self) -> bool:
        return self.kind == DispatchErrorKind.VALIDATION

    def to_body(self) -> ErrorBody:
        return ErrorBody(
            error=self.kind.value,
            field=self.field,
            reason=self.reason,
            retryable=self.retryable,
        )
