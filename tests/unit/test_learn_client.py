"""
Unit tests for the learning platform API client.
"""

import httpx
import pytest

from learnsync.config import Settings
from learnsync.core.learn_client import (
    LearnApiClient,
    RemoteRejectedError,
    RemoteUnavailableError,
)


class TestContentReads:
    @pytest.mark.asyncio
    async def test_get_classes(self, make_client, sample_classes):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=sample_classes)

        client = make_client(handler)
        classes = await client.get_classes()

        assert classes == sample_classes
        assert seen[0].url.path == "/api/learn/classes"
        assert seen[0].headers["Authorization"] == "Bearer test-token"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,arg,path", [
        ("get_subjects", "class-6", "/api/learn/classes/class-6/subjects"),
        ("get_chapters", "sci-6", "/api/learn/subjects/sci-6/chapters"),
        ("get_subchapters", "sci-6-ch1", "/api/learn/chapters/sci-6-ch1/subchapters"),
        ("get_subchapter", "sub-1", "/api/learn/subchapters/sub-1"),
        ("get_quiz", "sub-1", "/api/learn/subchapters/sub-1/quiz"),
        ("get_chapter_content", "sci-6-ch1", "/api/learn/chapters/sci-6-ch1/content"),
    ])
    async def test_read_paths(self, make_client, method, arg, path):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(200, json={"ok": True})

        client = make_client(handler)
        result = await getattr(client, method)(arg)

        assert result == {"ok": True}
        assert seen == [path]


class TestSubmissions:
    @pytest.mark.asyncio
    async def test_post_chapter_progress_sends_body(self, make_client):
        bodies = []

        def handler(request):
            bodies.append((request.method, request.url.path, request.read()))
            return httpx.Response(200, json={"message": "Progress updated successfully"})

        client = make_client(handler)
        await client.post_chapter_progress({"chapterId": "sci-6-ch1", "completed": True})

        method, path, body = bodies[0]
        assert method == "POST"
        assert path == "/api/progress/chapter"
        assert b'"chapterId":"sci-6-ch1"' in body.replace(b" ", b"")

    @pytest.mark.asyncio
    async def test_empty_response_body(self, make_client):
        client = make_client(lambda request: httpx.Response(204))

        assert await client.post_xp({"amount": 10, "source": "quiz"}) is None


class TestErrorClassification:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [500, 502, 503, 408, 429])
    async def test_transient_statuses(self, make_client, status):
        client = make_client(lambda request: httpx.Response(status, json={}))

        with pytest.raises(RemoteUnavailableError):
            await client.get_classes()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 404, 422])
    async def test_permanent_statuses(self, make_client, status):
        client = make_client(lambda request: httpx.Response(status, json={}))

        with pytest.raises(RemoteRejectedError) as exc_info:
            await client.post_chapter_progress({"chapterId": "x"})

        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_connection_error(self, make_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(RemoteUnavailableError):
            await client.get_classes()

    @pytest.mark.asyncio
    async def test_timeout(self, make_client):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler)

        with pytest.raises(RemoteUnavailableError):
            await client.get_classes()

    @pytest.mark.asyncio
    async def test_malformed_json(self, make_client):
        client = make_client(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(RemoteUnavailableError):
            await client.get_classes()


def test_from_settings():
    settings = Settings(
        api_base_url="http://example.test/api/",
        api_token="abc",
        request_timeout_seconds=5.0,
    )

    client = LearnApiClient.from_settings(settings)

    assert client.base_url == "http://example.test/api"
    assert client.token == "abc"
    assert client.timeout_seconds == 5.0
