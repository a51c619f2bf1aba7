"""
Content Resolver - tiered fallback for content reads.

Each request walks a prioritized list of strategies until one yields a
payload:

    1. RemoteStrategy      - live API; successful payloads are written to the cache
    2. CacheStrategy       - last successful remote payload for the same query
    3. BundledStrategy     - static dataset shipped with the package
    4. PlaceholderStrategy - "content unavailable", always succeeds

When force_offline is set, strategies that need the network are skipped.
Network failures and missing content never surface as exceptions; storage
failures do.

Usage:
    resolver = ContentResolver.build(client, store, dataset)
    resolved = await resolver.resolve(ContentType.CHAPTERS, "sci-6")
    resolved.payload, resolved.source
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Mapping, Protocol, Sequence

from loguru import logger

from learnsync.content.bundled import BundledDataset
from learnsync.content.cache import ContentCache
from learnsync.content.id_mapping import dataset_key
from learnsync.content.models import (
    ContentQuery,
    ContentSource,
    ContentType,
    ResolvedContent,
)
from learnsync.core.learn_client import LearnApiClient, RemoteError
from learnsync.storage.kv_store import KeyValueStore

UNAVAILABLE_MESSAGE = "This content is not available offline yet. Please check back later."


class ResolutionStrategy(Protocol):
    """One tier of the fallback chain."""

    source: ContentSource
    requires_network: bool

    async def attempt(self, query: ContentQuery) -> ResolvedContent | None:
        """Return a resolved payload, or None to fall through to the next tier."""
        ...


# =============================================================================
# Strategies
# =============================================================================


class RemoteStrategy:
    """Fetch from the live API and refresh the cache on success."""

    source = ContentSource.REMOTE
    requires_network = True

    def __init__(
        self,
        client: LearnApiClient,
        cache: ContentCache,
        timeout_seconds: float = 8.0,
    ):
        self.client = client
        self.cache = cache
        self.timeout_seconds = timeout_seconds
        self._fetchers: dict[ContentType, Callable[..., Awaitable[Any]]] = {
            ContentType.CLASSES: client.get_classes,
            ContentType.SUBJECTS: client.get_subjects,
            ContentType.CHAPTERS: client.get_chapters,
            ContentType.SUBCHAPTERS: client.get_subchapters,
            ContentType.SUBCHAPTER: client.get_subchapter,
            ContentType.QUIZ: client.get_quiz,
            ContentType.CHAPTER_CONTENT: client.get_chapter_content,
        }

    async def attempt(self, query: ContentQuery) -> ResolvedContent | None:
        fetch = self._fetchers[query.content_type]
        args = () if query.scope_id is None else (query.scope_id,)
        try:
            payload = await asyncio.wait_for(fetch(*args), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.info(
                "Remote fetch for {} timed out after {}s", query.cache_key, self.timeout_seconds
            )
            return None
        except RemoteError as exc:
            logger.info("Remote fetch failed for {}: {}", query.cache_key, exc)
            return None

        self.cache.put(query, payload)
        return ResolvedContent(payload=payload, source=self.source, query=query)


class CacheStrategy:
    """Serve the last successful remote payload, however stale."""

    source = ContentSource.CACHE
    requires_network = False

    def __init__(self, cache: ContentCache):
        self.cache = cache

    async def attempt(self, query: ContentQuery) -> ResolvedContent | None:
        hit, payload = self.cache.get(query)
        if not hit:
            return None
        return ResolvedContent(payload=payload, source=self.source, query=query)


class BundledStrategy:
    """Serve content from the bundled dataset after identifier mapping."""

    source = ContentSource.BUNDLED
    requires_network = False

    def __init__(self, dataset: BundledDataset, aliases: Mapping[str, str] | None = None):
        self.dataset = dataset
        self.aliases = {**dataset.aliases, **(aliases or {})}

    async def attempt(self, query: ContentQuery) -> ResolvedContent | None:
        key = dataset_key(query.scope_id, self.aliases)
        payload = self._lookup(query.content_type, key)
        if payload is None:
            logger.debug("Bundled dataset has no entry for {} ({})", query.cache_key, key)
            return None
        return ResolvedContent(payload=payload, source=self.source, query=query)

    def _lookup(self, content_type: ContentType, key: str | None) -> Any:
        if content_type is ContentType.CLASSES:
            return self.dataset.classes()
        if key is None:
            return None
        lookups: dict[ContentType, Callable[[str], Any]] = {
            ContentType.SUBJECTS: self.dataset.subjects,
            ContentType.CHAPTERS: self.dataset.chapters,
            ContentType.SUBCHAPTERS: self.dataset.lessons,
            ContentType.SUBCHAPTER: self.dataset.lesson,
            ContentType.QUIZ: self.dataset.quiz,
            ContentType.CHAPTER_CONTENT: self.dataset.chapter_content,
        }
        return lookups[content_type](key)


class PlaceholderStrategy:
    """Last resort: a renderable "content unavailable" payload."""

    source = ContentSource.PLACEHOLDER
    requires_network = False

    async def attempt(self, query: ContentQuery) -> ResolvedContent:
        return ResolvedContent(
            payload=placeholder_payload(query),
            source=self.source,
            query=query,
        )


def placeholder_payload(query: ContentQuery) -> dict[str, Any]:
    """Build the placeholder the UI renders when no tier has content."""
    return {
        "unavailable": True,
        "contentType": query.content_type.value,
        "scopeId": query.scope_id,
        "message": UNAVAILABLE_MESSAGE,
    }


# =============================================================================
# Resolver
# =============================================================================


class ContentResolver:
    """Resolve content queries through an ordered list of strategies."""

    def __init__(
        self,
        strategies: Sequence[ResolutionStrategy],
        force_offline: bool = False,
    ):
        """
        Args:
            strategies: Tiers in priority order
            force_offline: Skip every tier that needs the network
        """
        self.strategies = list(strategies)
        self.force_offline = force_offline

    @classmethod
    def build(
        cls,
        client: LearnApiClient,
        store: KeyValueStore,
        dataset: BundledDataset,
        force_offline: bool = False,
        aliases: Mapping[str, str] | None = None,
        timeout_seconds: float = 8.0,
    ) -> ContentResolver:
        """Standard chain: remote, cache, bundled, placeholder."""
        cache = ContentCache(store)
        return cls(
            strategies=[
                RemoteStrategy(client, cache, timeout_seconds),
                CacheStrategy(cache),
                BundledStrategy(dataset, aliases),
                PlaceholderStrategy(),
            ],
            force_offline=force_offline,
        )

    async def resolve(
        self, content_type: ContentType, scope_id: str | None = None
    ) -> ResolvedContent:
        query = ContentQuery(content_type, scope_id)
        if not query.has_scope:
            logger.warning("{} requested without a scope id", content_type.value)
            return self._placeholder(query)

        for strategy in self.strategies:
            if self.force_offline and strategy.requires_network:
                continue
            resolved = await strategy.attempt(query)
            if resolved is not None:
                if resolved.source is not ContentSource.REMOTE:
                    logger.info("Served {} from {}", query.cache_key, resolved.source.value)
                return resolved

        # Reached only when the chain has no placeholder tier.
        logger.warning("No strategy resolved {}", query.cache_key)
        return self._placeholder(query)

    @staticmethod
    def _placeholder(query: ContentQuery) -> ResolvedContent:
        return ResolvedContent(
            payload=placeholder_payload(query),
            source=ContentSource.PLACEHOLDER,
            query=query,
        )

    # =========================================================================
    # Convenience accessors
    # =========================================================================

    async def get_classes(self) -> Any:
        return (await self.resolve(ContentType.CLASSES)).payload

    async def get_subjects(self, class_id: str) -> Any:
        return (await self.resolve(ContentType.SUBJECTS, class_id)).payload

    async def get_chapters(self, subject_id: str) -> Any:
        return (await self.resolve(ContentType.CHAPTERS, subject_id)).payload

    async def get_subchapters(self, chapter_id: str) -> Any:
        return (await self.resolve(ContentType.SUBCHAPTERS, chapter_id)).payload

    async def get_subchapter(self, subchapter_id: str) -> Any:
        return (await self.resolve(ContentType.SUBCHAPTER, subchapter_id)).payload

    async def get_quiz(self, subchapter_id: str) -> Any:
        return (await self.resolve(ContentType.QUIZ, subchapter_id)).payload

    async def get_chapter_content(self, chapter_id: str) -> Any:
        return (await self.resolve(ContentType.CHAPTER_CONTENT, chapter_id)).payload
