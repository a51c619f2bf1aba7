"""
Mutation Queue - durable FIFO of unacknowledged state changes.

Stored as a single serialized array under the sync_queue key; array order is
enqueue order. The queue is a sequence, not a set: several mutations for the
same unit may coexist and the remote service resolves them last-write-wins.

Delivery guarantees:
- A mutation leaves the queue only after the remote service acknowledges it,
  so a crash between "sent" and "acknowledged" means redelivery
  (at-least-once, never at-most-once).
- drain() walks the queue strictly in order and stops at the first transient
  failure, so a later mutation is never delivered ahead of an earlier one.
- Only one drain runs at a time per queue; a concurrent call is a no-op.
- A permanent rejection counts against max_attempts; once the budget is
  spent the mutation is dropped with a warning and the pass moves on.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Iterable

from loguru import logger

from learnsync.core.learn_client import RemoteRejectedError, RemoteUnavailableError
from learnsync.progress.models import utc_now
from learnsync.storage.kv_store import KeyValueStore
from learnsync.sync.models import (
    DrainResult,
    MutationType,
    PendingMutation,
    new_mutation_id,
)

QUEUE_KEY = "sync_queue"

DeliverFn = Callable[[PendingMutation], Awaitable[Any]]
QueueListener = Callable[[list[PendingMutation]], None]


class MutationQueue:
    """Durable FIFO of pending mutations with ordered, exclusive draining."""

    def __init__(self, store: KeyValueStore, max_attempts: int = 3):
        self.store = store
        self.max_attempts = max_attempts
        self._drain_lock = asyncio.Lock()
        self._listeners: list[QueueListener] = []

    # =========================================================================
    # Storage operations
    # =========================================================================

    def peek_all(self) -> list[PendingMutation]:
        """Snapshot of the queue in FIFO order."""
        raw = self.store.get(QUEUE_KEY, [])
        return [PendingMutation.from_dict(item) for item in raw]

    def __len__(self) -> int:
        return len(self.store.get(QUEUE_KEY, []))

    def enqueue(
        self, mutation_type: MutationType, payload: dict[str, Any]
    ) -> PendingMutation:
        """
        Append a mutation durably. Never touches the network.

        Args:
            mutation_type: Kind of mutation
            payload: Body matching the mutation type's remote contract

        Returns:
            The queued mutation
        """
        enqueued_at = utc_now()
        mutation = PendingMutation(
            id=new_mutation_id(mutation_type, enqueued_at),
            type=mutation_type,
            payload=dict(payload),
            enqueued_at=enqueued_at,
        )
        queue = self.peek_all()
        queue.append(mutation)
        self._save(queue)
        logger.info("Enqueued {} ({} pending)", mutation.id, len(queue))
        return mutation

    def remove_delivered(self, mutation_ids: Iterable[str]) -> None:
        """Remove acknowledged mutations."""
        delivered = set(mutation_ids)
        queue = [m for m in self.peek_all() if m.id not in delivered]
        self._save(queue)

    def record_rejection(self, mutation_id: str) -> int:
        """
        Count a permanent rejection.

        Returns:
            The mutation's attempt count after the update (0 if not found)
        """
        queue = self.peek_all()
        for mutation in queue:
            if mutation.id == mutation_id:
                mutation.attempts += 1
                self._save(queue)
                return mutation.attempts
        logger.warning("Queue item {} not found for rejection update", mutation_id)
        return 0

    def clear(self) -> None:
        self.store.delete(QUEUE_KEY)
        logger.info("Sync queue cleared")
        self._notify([])

    def _save(self, queue: list[PendingMutation]) -> None:
        self.store.set(QUEUE_KEY, [m.to_dict() for m in queue])
        self._notify(queue)

    # =========================================================================
    # Listeners
    # =========================================================================

    def subscribe(self, listener: QueueListener) -> Callable[[], None]:
        """
        Register a callback invoked with the queue after every change.

        The listener is called once immediately with the current queue.

        Returns:
            Function that unsubscribes the listener
        """
        self._listeners.append(listener)
        listener(self.peek_all())

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, queue: list[PendingMutation]) -> None:
        for listener in list(self._listeners):
            listener(list(queue))

    # =========================================================================
    # Draining
    # =========================================================================

    @property
    def is_draining(self) -> bool:
        return self._drain_lock.locked()

    async def drain(self, deliver: DeliverFn) -> DrainResult:
        """
        Deliver queued mutations in FIFO order.

        Args:
            deliver: Coroutine that sends one mutation; raises
                RemoteUnavailableError or RemoteRejectedError on failure

        Returns:
            DrainResult describing the pass
        """
        if self._drain_lock.locked():
            logger.debug("Drain already in progress, skipping")
            return DrainResult(skipped=True, remaining=len(self))

        async with self._drain_lock:
            result = DrainResult()
            pending = self.peek_all()
            logger.info("Draining sync queue: {} items", len(pending))

            for mutation in pending:
                try:
                    await deliver(mutation)
                except RemoteUnavailableError as exc:
                    logger.warning("Delivery of {} failed, stopping pass: {}", mutation.id, exc)
                    result.stopped_on = mutation.id
                    result.error = str(exc)
                    break
                except RemoteRejectedError as exc:
                    attempts = self.record_rejection(mutation.id)
                    if attempts >= self.max_attempts:
                        self.remove_delivered([mutation.id])
                        result.dropped.append(mutation.id)
                        logger.warning(
                            "Dropping {} after {} rejections: {}",
                            mutation.id,
                            attempts,
                            exc,
                        )
                        continue
                    logger.warning(
                        "Queue item {} rejected (attempt {}/{}), kept for retry",
                        mutation.id,
                        attempts,
                        self.max_attempts,
                    )
                    result.stopped_on = mutation.id
                    result.error = str(exc)
                    break

                self.remove_delivered([mutation.id])
                result.delivered.append(mutation.id)
                logger.debug("Delivered {}", mutation.id)

            result.remaining = len(self)
            logger.info(
                "Drain complete: delivered={} dropped={} remaining={}",
                len(result.delivered),
                len(result.dropped),
                result.remaining,
            )
            return result
