"""Infra layer utilities (SQLite storage and the URL cache)."""

from .cache import CacheStats, CacheStore, CacheUpdater
from .storage import SQLiteManager

__all__ = ["CacheStats", "CacheStore", "CacheUpdater", "SQLiteManager"]
