"""
Sync Module - Eventual, at-least-once progress synchronization.

Components:
- models: MutationType, PendingMutation, DrainResult
- queue: Durable FIFO (sync_queue namespace) with ordered, exclusive drain
- delivery: Mutation type -> remote endpoint routing
- coordinator: Ledger write, connectivity check, send-or-enqueue, replay
"""

from learnsync.sync.coordinator import SyncCoordinator, SyncOutcome
from learnsync.sync.delivery import MutationDispatcher
from learnsync.sync.models import DrainResult, MutationType, PendingMutation
from learnsync.sync.queue import QUEUE_KEY, MutationQueue

__all__ = [
    "QUEUE_KEY",
    "DrainResult",
    "MutationDispatcher",
    "MutationQueue",
    "MutationType",
    "PendingMutation",
    "SyncCoordinator",
    "SyncOutcome",
]
