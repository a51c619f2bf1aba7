"""
Unit tests for the content resolver fallback chain.

Tests remote -> cache -> bundled -> placeholder ordering WITHOUT a live API:
the remote tier runs against httpx.MockTransport handlers.
"""

import asyncio

import httpx
import pytest

from learnsync.content.cache import ContentCache
from learnsync.content.models import ContentQuery, ContentSource, ContentType
from learnsync.content.resolver import (
    CacheStrategy,
    ContentResolver,
    PlaceholderStrategy,
)
from learnsync.storage.kv_store import StorageError


def ok(payload):
    return lambda request: httpx.Response(200, json=payload)


def fail(request):
    raise httpx.ConnectError("network down", request=request)


def server_error(request):
    return httpx.Response(503, json={"message": "maintenance"})


@pytest.fixture
def build(store, dataset, make_client):
    def factory(handler, force_offline=False, aliases=None):
        return ContentResolver.build(
            make_client(handler),
            store,
            dataset,
            force_offline=force_offline,
            aliases=aliases,
        )

    return factory


class TestContentQuery:
    def test_cache_key_unscoped(self):
        assert ContentQuery(ContentType.CLASSES).cache_key == "learn_cache_classes"

    def test_cache_key_scoped(self):
        query = ContentQuery(ContentType.CHAPTER_CONTENT, "sci-6-ch1")
        assert query.cache_key == "learn_cache_chapter_content_sci-6-ch1"

    @pytest.mark.parametrize("scope_id", [None, ""])
    def test_scoped_type_without_scope(self, scope_id):
        assert not ContentQuery(ContentType.SUBJECTS, scope_id).has_scope
        assert ContentQuery(ContentType.CLASSES).has_scope


class TestRemoteTier:
    @pytest.mark.asyncio
    async def test_remote_success_is_returned_and_cached(self, build, store, sample_classes):
        resolver = build(ok(sample_classes))

        resolved = await resolver.resolve(ContentType.CLASSES)

        assert resolved.source is ContentSource.REMOTE
        assert resolved.payload == sample_classes
        assert store.get("learn_cache_classes") == sample_classes

    @pytest.mark.asyncio
    async def test_every_success_overwrites_cache(self, build, store):
        payloads = iter([["v1"], ["v2"]])
        resolver = build(lambda request: httpx.Response(200, json=next(payloads)))

        await resolver.resolve(ContentType.CHAPTERS, "sci-6")
        await resolver.resolve(ContentType.CHAPTERS, "sci-6")

        assert store.get("learn_cache_chapters_sci-6") == ["v2"]

    @pytest.mark.asyncio
    async def test_cache_write_failure_propagates(self, build, store, monkeypatch, sample_classes):
        def broken_set(key, value):
            raise StorageError("disk full")

        monkeypatch.setattr(store, "set", broken_set)
        resolver = build(ok(sample_classes))

        with pytest.raises(StorageError):
            await resolver.resolve(ContentType.CLASSES)


class TestFallbackOrdering:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("handler", [fail, server_error])
    async def test_remote_failure_returns_most_recent_cache(self, build, handler):
        online = build(lambda request: httpx.Response(200, json=[{"_id": "remote-sub"}]))
        await online.resolve(ContentType.SUBJECTS, "class-6")

        offline = build(handler)
        resolved = await offline.resolve(ContentType.SUBJECTS, "class-6")

        assert resolved.source is ContentSource.CACHE
        assert resolved.payload == [{"_id": "remote-sub"}]

    @pytest.mark.asyncio
    async def test_no_cache_falls_back_to_bundled(self, build, dataset):
        resolver = build(fail)

        resolved = await resolver.resolve(ContentType.CHAPTERS, "sci-6")

        assert resolved.source is ContentSource.BUNDLED
        assert resolved.payload == dataset.chapters("sci-6")

    @pytest.mark.asyncio
    async def test_remote_id_is_mapped_for_bundled_lookup(self, build, dataset):
        resolver = build(fail)

        resolved = await resolver.resolve(ContentType.CHAPTERS, "691eafac8eb433fec69cf13c")

        assert resolved.source is ContentSource.BUNDLED
        assert resolved.payload == dataset.chapters("sci-6")

    @pytest.mark.asyncio
    async def test_extra_aliases_extend_the_table(self, build, dataset):
        resolver = build(fail, aliases={"abc123": "math-6"})

        resolved = await resolver.resolve(ContentType.CHAPTERS, "abc123")

        assert resolved.payload == dataset.chapters("math-6")

    @pytest.mark.asyncio
    async def test_unmapped_remote_id_gets_placeholder(self, build):
        resolver = build(fail)

        resolved = await resolver.resolve(ContentType.CHAPTERS, "ffffffffffffffffffffffff")

        assert resolved.source is ContentSource.PLACEHOLDER
        assert not resolved.is_available
        assert resolved.payload["unavailable"] is True
        assert resolved.payload["contentType"] == "chapters"
        assert resolved.payload["scopeId"] == "ffffffffffffffffffffffff"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("scope_id", ["", None])
    async def test_missing_scope_gets_placeholder(self, build, scope_id):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=[])

        resolver = build(handler)
        resolved = await resolver.resolve(ContentType.SUBJECTS, scope_id)

        assert resolved.source is ContentSource.PLACEHOLDER
        assert resolved.payload["contentType"] == "subjects"
        assert calls == []

    @pytest.mark.asyncio
    async def test_slow_remote_falls_through_within_timeout(
        self, store, dataset, make_client, monkeypatch
    ):
        async def hang():
            await asyncio.Event().wait()

        client = make_client(ok(["remote"]))
        monkeypatch.setattr(client, "get_classes", hang)
        resolver = ContentResolver.build(client, store, dataset, timeout_seconds=0.05)

        resolved = await asyncio.wait_for(resolver.resolve(ContentType.CLASSES), timeout=5)

        assert resolved.source is ContentSource.BUNDLED
        assert resolved.payload == dataset.classes()

    @pytest.mark.asyncio
    async def test_cached_null_is_still_a_cache_hit(self, build, store):
        store.set("learn_cache_subchapter_sub-1", None)
        resolver = build(fail)

        resolved = await resolver.resolve(ContentType.SUBCHAPTER, "sub-1")

        assert resolved.source is ContentSource.CACHE
        assert resolved.payload is None


class TestForceOffline:
    @pytest.mark.asyncio
    async def test_remote_never_called(self, build, dataset):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=["remote"])

        resolver = build(handler, force_offline=True)
        resolved = await resolver.resolve(ContentType.CLASSES)

        assert calls == []
        assert resolved.source is ContentSource.BUNDLED
        assert resolved.payload == dataset.classes()

    @pytest.mark.asyncio
    async def test_cache_still_consulted(self, build, store):
        store.set("learn_cache_classes", ["cached"])
        resolver = build(ok(["remote"]), force_offline=True)

        resolved = await resolver.resolve(ContentType.CLASSES)

        assert resolved.source is ContentSource.CACHE
        assert resolved.payload == ["cached"]

    @pytest.mark.asyncio
    async def test_flag_is_per_instance(self, build):
        offline = build(ok(["remote"]), force_offline=True)
        online = build(ok(["remote"]))

        assert (await offline.resolve(ContentType.CLASSES)).source is ContentSource.BUNDLED
        assert (await online.resolve(ContentType.CLASSES)).source is ContentSource.REMOTE


class TestConvenienceAccessors:
    @pytest.mark.asyncio
    async def test_offline_lesson_flow(self, build, dataset):
        resolver = build(fail)

        lessons = await resolver.get_subchapters("sci-6-ch1")
        lesson = await resolver.get_subchapter(lessons[0]["_id"])
        quiz = await resolver.get_quiz(lessons[0]["_id"])
        content = await resolver.get_chapter_content("sci-6-ch1")

        assert lesson["title"] == "Air"
        assert len(quiz) == 2
        assert content["title"] == "Natural Resources"

    @pytest.mark.asyncio
    async def test_subjects_and_classes(self, build):
        resolver = build(fail)

        classes = await resolver.get_classes()
        subjects = await resolver.get_subjects(classes[0]["_id"])

        assert [s["_id"] for s in subjects] == ["sci-6", "math-6"]


class TestCustomChains:
    @pytest.mark.asyncio
    async def test_chain_without_placeholder_still_degrades(self, store):
        resolver = ContentResolver([CacheStrategy(ContentCache(store))])

        resolved = await resolver.resolve(ContentType.QUIZ, "sci-6-ch1-l1")

        assert resolved.source is ContentSource.PLACEHOLDER

    @pytest.mark.asyncio
    async def test_new_tier_is_a_pure_extension(self, store):
        class FixtureTier:
            source = ContentSource.BUNDLED
            requires_network = False

            async def attempt(self, query):
                from learnsync.content.models import ResolvedContent

                return ResolvedContent(payload=["fixture"], source=self.source, query=query)

        resolver = ContentResolver(
            [CacheStrategy(ContentCache(store)), FixtureTier(), PlaceholderStrategy()]
        )

        resolved = await resolver.resolve(ContentType.CLASSES)

        assert resolved.payload == ["fixture"]
