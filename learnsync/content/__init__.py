"""
Content Module - Offline-first content reads.

Components:
- models: ContentType, ContentQuery, ResolvedContent
- bundled: Bundled dataset shipped with the package
- id_mapping: Remote id -> dataset slug translation
- cache: learn_cache_* namespace over the key-value store
- resolver: Fallback chain (remote -> cache -> bundled -> placeholder)
"""

from learnsync.content.bundled import BundledDataset
from learnsync.content.cache import ContentCache
from learnsync.content.id_mapping import dataset_key, split_lesson_id
from learnsync.content.models import (
    ContentQuery,
    ContentSource,
    ContentType,
    ResolvedContent,
)
from learnsync.content.resolver import (
    BundledStrategy,
    CacheStrategy,
    ContentResolver,
    PlaceholderStrategy,
    RemoteStrategy,
    ResolutionStrategy,
)

__all__ = [
    "BundledDataset",
    "BundledStrategy",
    "CacheStrategy",
    "ContentCache",
    "ContentQuery",
    "ContentResolver",
    "ContentSource",
    "ContentType",
    "PlaceholderStrategy",
    "RemoteStrategy",
    "ResolutionStrategy",
    "ResolvedContent",
    "dataset_key",
    "split_lesson_id",
]
