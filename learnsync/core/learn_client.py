"""
Learning Platform Client

HTTP client for the learning platform's read paths (classes, subjects,
chapters, lessons, quizzes) and its progress sync endpoints.

Every failure is classified into one of two exceptions:
- RemoteUnavailableError: transport errors, timeouts, 5xx, 408, 429.
  Worth retrying later.
- RemoteRejectedError: any other 4xx. The request itself is wrong and
  resending it unchanged will not help.

Usage:
    async with LearnApiClient.from_settings(get_settings()) as client:
        classes = await client.get_classes()
        await client.post_chapter_progress(payload)
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from learnsync.config import Settings

TRANSIENT_STATUS_CODES = frozenset({408, 429})


class RemoteError(Exception):
    """Base class for remote call failures."""


class RemoteUnavailableError(RemoteError):
    """The remote service could not be reached or failed transiently."""


class RemoteRejectedError(RemoteError):
    """The remote service refused the request with a permanent client error."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class LearnApiClient:
    """
    HTTP client for the learning platform API.

    Supports:
    - Content reads consumed by the content resolver
    - Chapter progress, XP, quiz result, game result and generic sync submissions
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout_seconds: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL for the platform API
            token: Optional bearer token
            timeout_seconds: Per-request timeout
            transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> LearnApiClient:
        return cls(
            base_url=settings.api_base_url,
            token=settings.api_token,
            timeout_seconds=settings.request_timeout_seconds,
        )

    async def __aenter__(self) -> "LearnApiClient":
        self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"

            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.timeout_seconds),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # =========================================================================
    # Request plumbing
    # =========================================================================

    async def _request(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> Any:
        client = self._ensure_client()
        try:
            response = await client.request(method, path, json=json)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning("Timeout on {} {}", method, path)
            raise RemoteUnavailableError(f"Timeout on {method} {path}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status >= 500 or status in TRANSIENT_STATUS_CODES:
                logger.warning("Server error {} on {} {}", status, method, path)
                raise RemoteUnavailableError(
                    f"Server error {status} on {method} {path}"
                ) from e
            logger.error("Request rejected with {} on {} {}", status, method, path)
            raise RemoteRejectedError(
                f"Request rejected with {status} on {method} {path}", status
            ) from e
        except httpx.RequestError as e:
            logger.warning("Connection error on {} {}: {}", method, path, e)
            raise RemoteUnavailableError(f"Connection error on {method} {path}: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteUnavailableError(f"Malformed JSON from {method} {path}") from e

    # =========================================================================
    # Content reads
    # =========================================================================

    async def get_classes(self) -> Any:
        return await self._request("GET", "/learn/classes")

    async def get_subjects(self, class_id: str) -> Any:
        return await self._request("GET", f"/learn/classes/{class_id}/subjects")

    async def get_chapters(self, subject_id: str) -> Any:
        return await self._request("GET", f"/learn/subjects/{subject_id}/chapters")

    async def get_subchapters(self, chapter_id: str) -> Any:
        return await self._request("GET", f"/learn/chapters/{chapter_id}/subchapters")

    async def get_subchapter(self, subchapter_id: str) -> Any:
        return await self._request("GET", f"/learn/subchapters/{subchapter_id}")

    async def get_quiz(self, subchapter_id: str) -> Any:
        return await self._request("GET", f"/learn/subchapters/{subchapter_id}/quiz")

    async def get_chapter_content(self, chapter_id: str) -> Any:
        return await self._request("GET", f"/learn/chapters/{chapter_id}/content")

    # =========================================================================
    # Sync submissions
    # =========================================================================

    async def post_chapter_progress(self, payload: dict[str, Any]) -> Any:
        """
        Submit chapter progress.

        The server treats repeated identical submissions of
        (chapterId, completed, completedAt) as a no-op.
        """
        return await self._request("POST", "/progress/chapter", json=payload)

    async def post_xp(self, payload: dict[str, Any]) -> Any:
        return await self._request("POST", "/xp/add", json=payload)

    async def post_quiz_result(self, payload: dict[str, Any]) -> Any:
        return await self._request("POST", "/quiz_results", json=payload)

    async def post_game_result(self, payload: dict[str, Any]) -> Any:
        return await self._request("POST", "/games/result", json=payload)

    async def post_generic(self, payload: dict[str, Any]) -> Any:
        return await self._request("POST", "/sync", json=payload)
