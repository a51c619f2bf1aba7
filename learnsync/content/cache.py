"""
Content cache over the key-value store.

Holds the last successful remote payload per query under the learn_cache_*
namespace. Entries are overwritten on every successful fetch and never
invalidated; staleness is accepted.
"""

from __future__ import annotations

from typing import Any

from learnsync.content.models import CACHE_PREFIX, ContentQuery
from learnsync.storage.kv_store import KeyValueStore

_MISSING = object()


class ContentCache:
    """Last-known-good remote payloads, one per content query."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self, query: ContentQuery) -> tuple[bool, Any]:
        """Return (hit, payload). A cached JSON null is still a hit."""
        value = self.store.get(query.cache_key, _MISSING)
        if value is _MISSING:
            return False, None
        return True, value

    def put(self, query: ContentQuery, payload: Any) -> None:
        self.store.set(query.cache_key, payload)

    def keys(self) -> list[str]:
        return self.store.keys(CACHE_PREFIX)
