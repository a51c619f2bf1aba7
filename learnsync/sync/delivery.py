"""
Mutation delivery - routes each queued mutation to its remote endpoint.

A call that outlives the timeout is treated exactly like a network failure.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from loguru import logger

from learnsync.core.learn_client import LearnApiClient, RemoteUnavailableError
from learnsync.sync.models import MutationType, PendingMutation


class MutationDispatcher:
    """Send a PendingMutation to the endpoint matching its type."""

    def __init__(self, client: LearnApiClient, timeout_seconds: float = 8.0):
        self.client = client
        self.timeout_seconds = timeout_seconds
        self._handlers: dict[MutationType, Callable[[dict[str, Any]], Awaitable[Any]]] = {
            MutationType.SYNC_CHAPTER_PROGRESS: client.post_chapter_progress,
            MutationType.SYNC_XP: client.post_xp,
            MutationType.SUBMIT_QUIZ_RESULT: client.post_quiz_result,
            MutationType.SUBMIT_GAME_RESULT: client.post_game_result,
            MutationType.GENERIC_SYNC: client.post_generic,
        }

    async def send(self, mutation_type: MutationType, payload: dict[str, Any]) -> Any:
        """Deliver one payload, bounded by the configured timeout."""
        handler = self._handlers[mutation_type]
        try:
            return await asyncio.wait_for(handler(payload), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            logger.warning("{} timed out after {}s", mutation_type.value, self.timeout_seconds)
            raise RemoteUnavailableError(
                f"{mutation_type.value} timed out after {self.timeout_seconds}s"
            ) from exc

    async def __call__(self, mutation: PendingMutation) -> Any:
        return await self.send(mutation.type, mutation.payload)
