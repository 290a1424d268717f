"""Persistent TTL-aware key/value cache backed by SQLite."""

from __future__ import annotations

import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import structlog

from ..errors import CacheError
from .storage import SQLiteManager

DEFAULT_TOPIC = "data-by-url"


@dataclass(slots=True)
class CacheStats:
    live: int
    expired: int

    @property
    def total(self) -> int:
        return self.live + self.expired


class CacheUpdater:
    """Reserved cache slot returned by :meth:`CacheStore.get_for_update`.

    A slot handed out alongside a live entry is inert; ``write`` does nothing.
    """

    def __init__(self, store: "CacheStore | None", topic: str, key: str) -> None:
        self._store = store
        self.topic = topic
        self.key = key

    @property
    def is_noop(self) -> bool:
        return self._store is None

    def write(self, data: bytes, ttl: float) -> None:
        if self._store is None:
            return
        self._store._put(self.topic, self.key, data, ttl)


class CacheStore:
    """Map resource keys to cached bytes plus an expiry time."""

    def __init__(
        self,
        manager: SQLiteManager,
        db_path: Path,
        clock: Callable[[], float] = time.time,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.manager = manager
        self.db_path = db_path
        self.clock = clock
        self.logger = logger or structlog.get_logger("scheme_sync.cache")
        try:
            self._conn = self.manager.connect(db_path)
        except sqlite3.Error as exc:
            raise CacheError(f"opening cache {db_path}: {exc}") from exc

    def get_for_update(
        self, key: str, topic: str = DEFAULT_TOPIC
    ) -> tuple[CacheUpdater, bytes | None]:
        now = self.clock()
        try:
            row = self._conn.execute(
                "SELECT data, expires_at FROM cache_entries WHERE topic = ? AND key = ?",
                (topic, key),
            ).fetchone()
        except sqlite3.Error as exc:
            raise CacheError(f"lookup {key} in cache: {exc}") from exc
        if row is not None and row["expires_at"] > now:
            self.logger.debug("cache_hit", key=key, topic=topic)
            return CacheUpdater(None, topic, key), bytes(row["data"])
        self.logger.debug("cache_miss", key=key, topic=topic, expired=row is not None)
        return CacheUpdater(self, topic, key), None

    def _put(self, topic: str, key: str, data: bytes, ttl: float) -> None:
        expires_at = self.clock() + ttl
        try:
            with self._conn:
                self._conn.execute(
                    "INSERT OR REPLACE INTO cache_entries(topic, key, data, expires_at) "
                    "VALUES (?, ?, ?, ?)",
                    (topic, key, sqlite3.Binary(data), expires_at),
                )
        except sqlite3.Error as exc:
            raise CacheError(f"assigning {key} to cache: {exc}") from exc
        self.logger.debug("cache_store", key=key, topic=topic, ttl=ttl, size=len(data))

    def purge_expired(self) -> int:
        try:
            with self._conn:
                cur = self._conn.execute(
                    "DELETE FROM cache_entries WHERE expires_at <= ?", (self.clock(),)
                )
        except sqlite3.Error as exc:
            raise CacheError(f"purging cache: {exc}") from exc
        return cur.rowcount

    def stats(self) -> CacheStats:
        now = self.clock()
        try:
            row = self._conn.execute(
                "SELECT "
                "COALESCE(SUM(CASE WHEN expires_at > ? THEN 1 ELSE 0 END), 0) AS live, "
                "COALESCE(SUM(CASE WHEN expires_at <= ? THEN 1 ELSE 0 END), 0) AS expired "
                "FROM cache_entries",
                (now, now),
            ).fetchone()
        except sqlite3.Error as exc:
            raise CacheError(f"reading cache stats: {exc}") from exc
        return CacheStats(live=int(row["live"]), expired=int(row["expired"]))

    def close(self) -> None:
        self.manager.close(self.db_path)


__all__ = ["CacheStats", "CacheStore", "CacheUpdater", "DEFAULT_TOPIC"]
