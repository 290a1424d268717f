"""Error hierarchy shared across the sync pipeline."""

from __future__ import annotations


class SchemeSyncError(RuntimeError):
    """Base class for all scheme-sync failures."""


class FetchError(SchemeSyncError):
    """Non-success HTTP response or transport failure; aborts the run."""

    def __init__(self, url: str, detail: str) -> None:
        super().__init__(f"fetching {url}: {detail}")
        self.url = url
        self.detail = detail


class CacheError(SchemeSyncError):
    """Persistence failure in the cache store; aborts the run."""


class ParseError(SchemeSyncError):
    """A single source document could not be turned into a scheme."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class DeserializationError(SchemeSyncError):
    """The previously published dataset is unreadable."""


__all__ = [
    "CacheError",
    "DeserializationError",
    "FetchError",
    "ParseError",
    "SchemeSyncError",
]
