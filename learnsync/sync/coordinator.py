"""
Sync Coordinator.

Orchestrates a learner action end to end:

    1. Progress ledger upsert (synchronous, durable, always succeeds locally)
    2. Connectivity oracle check
    3. Online  -> replay older queued mutations, then the immediate remote
                  call; on failure, enqueue
    4. Offline -> enqueue without attempting the call

Local state is the source of truth for the UI. The remote call is a
best-effort side channel and never fails the user-visible action. Storage
errors are the exception: they propagate, since there is no deeper fallback
once local durability is in question.

Besides the per-action replay, watch() polls the oracle and drains the queue
on startup and whenever connectivity comes back.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any

from loguru import logger

from learnsync.core.connectivity import ConnectivityOracle
from learnsync.core.learn_client import RemoteError
from learnsync.progress.ledger import ProgressLedger
from learnsync.progress.models import ContentUnitProgress
from learnsync.sync.delivery import MutationDispatcher
from learnsync.sync.models import DrainResult, MutationType
from learnsync.sync.queue import MutationQueue


class SyncOutcome(str, Enum):
    """What happened to the remote side of a recorded action."""

    SYNCED = "synced"
    QUEUED_OFFLINE = "queued_offline"
    QUEUED_AFTER_FAILURE = "queued_after_failure"
    QUEUED_BEHIND_PENDING = "queued_behind_pending"


class SyncCoordinator:
    """Ledger writes first, remote confirmation second, queue as the safety net."""

    def __init__(
        self,
        ledger: ProgressLedger,
        queue: MutationQueue,
        oracle: ConnectivityOracle,
        dispatcher: MutationDispatcher,
    ):
        self.ledger = ledger
        self.queue = queue
        self.oracle = oracle
        self.dispatcher = dispatcher

    # =========================================================================
    # Learner actions
    # =========================================================================

    async def record_completion(
        self, unit_id: str, subject_id: str, class_id: str
    ) -> SyncOutcome:
        """
        Mark a unit complete and push the change to the remote service.

        The ledger write happens before the first suspension point, so the
        completion survives even if the process dies mid-request.
        """
        record = self.ledger.upsert(unit_id, subject_id, class_id, completed=True)
        logger.info("Marked {} complete", unit_id)
        return await self.submit(MutationType.SYNC_CHAPTER_PROGRESS, record.sync_payload())

    def record_access(
        self, unit_id: str, subject_id: str, class_id: str
    ) -> ContentUnitProgress:
        """Local-only: opening a unit is not synced."""
        return self.ledger.record_access(unit_id, subject_id, class_id)

    async def record_xp(self, amount: int, source: str) -> SyncOutcome:
        return await self.submit(MutationType.SYNC_XP, {"amount": amount, "source": source})

    async def record_quiz_result(
        self, quiz_id: str, score: int, total_questions: int, timestamp: int
    ) -> SyncOutcome:
        """Submit a quiz attempt; timestamp is epoch milliseconds."""
        return await self.submit(
            MutationType.SUBMIT_QUIZ_RESULT,
            {
                "quizId": quiz_id,
                "score": score,
                "totalQuestions": total_questions,
                "timestamp": timestamp,
            },
        )

    async def record_game_result(self, result: dict[str, Any]) -> SyncOutcome:
        """Submit a game result (gameId, score, timeTaken, ...) as given."""
        return await self.submit(MutationType.SUBMIT_GAME_RESULT, result)

    # =========================================================================
    # Delivery
    # =========================================================================

    async def submit(
        self, mutation_type: MutationType, payload: dict[str, Any]
    ) -> SyncOutcome:
        """
        Send a mutation now if online, otherwise (or on failure) queue it.

        Older queued mutations are replayed first. If any of them are still
        pending afterwards, the new one joins the back of the queue instead of
        overtaking them.
        """
        if not self.oracle.is_online():
            logger.info("Offline, adding {} to queue", mutation_type.value)
            self.queue.enqueue(mutation_type, payload)
            return SyncOutcome.QUEUED_OFFLINE

        if len(self.queue):
            result = await self.queue.drain(self.dispatcher)
            if result.skipped or result.remaining:
                logger.info(
                    "{} pending ahead, adding {} to queue",
                    result.remaining,
                    mutation_type.value,
                )
                self.queue.enqueue(mutation_type, payload)
                return SyncOutcome.QUEUED_BEHIND_PENDING

        try:
            await self.dispatcher.send(mutation_type, payload)
        except RemoteError as exc:
            logger.info("Sync failed, adding {} to queue: {}", mutation_type.value, exc)
            self.queue.enqueue(mutation_type, payload)
            return SyncOutcome.QUEUED_AFTER_FAILURE

        logger.debug("{} synced", mutation_type.value)
        return SyncOutcome.SYNCED

    async def sync_now(self) -> DrainResult:
        """Replay the queue if the device is online."""
        if not self.oracle.is_online():
            logger.info("Device is offline, skipping queue processing")
            return DrainResult(skipped=True, remaining=len(self.queue))
        return await self.queue.drain(self.dispatcher)

    async def watch(
        self,
        interval_seconds: float = 5.0,
        stop: asyncio.Event | None = None,
    ) -> list[DrainResult]:
        """
        Poll connectivity and drain the queue on every offline -> online edge.

        The first check counts as an edge, so a device that starts online
        drains right away. Runs until stop is set (or forever without one).

        Returns:
            Results of the drains triggered while watching
        """
        stop = stop or asyncio.Event()
        results: list[DrainResult] = []
        was_online = False

        logger.info("Watching connectivity every {}s", interval_seconds)
        while not stop.is_set():
            online = self.oracle.is_online()
            if online and not was_online:
                logger.info("Connectivity restored, replaying {} queued", len(self.queue))
                results.append(await self.queue.drain(self.dispatcher))
            elif was_online and not online:
                logger.info("Connectivity lost")
            was_online = online

            try:
                await asyncio.wait_for(stop.wait(), timeout=interval_seconds)
            except asyncio.TimeoutError:
                pass
        return results

    def pending_count(self) -> int:
        return len(self.queue)
