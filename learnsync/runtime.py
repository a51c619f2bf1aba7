"""
Runtime wiring.

Builds the full component graph from Settings: one key-value store shared by
cache, ledger and queue (disjoint namespaces), one HTTP client shared by the
resolver and the sync path.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from learnsync.config import Settings
from learnsync.content.bundled import BundledDataset
from learnsync.content.resolver import ContentResolver
from learnsync.core.connectivity import (
    ConnectivityOracle,
    SocketConnectivityOracle,
    StaticConnectivity,
)
from learnsync.core.learn_client import LearnApiClient
from learnsync.progress.ledger import ProgressLedger
from learnsync.storage.kv_store import KeyValueStore
from learnsync.sync.coordinator import SyncCoordinator
from learnsync.sync.delivery import MutationDispatcher
from learnsync.sync.queue import MutationQueue


@dataclass
class LearnSyncRuntime:
    """Live component graph for one process."""

    settings: Settings
    store: KeyValueStore
    client: LearnApiClient
    resolver: ContentResolver
    ledger: ProgressLedger
    queue: MutationQueue
    coordinator: SyncCoordinator

    async def close(self) -> None:
        await self.client.close()
        self.store.close()


def build_runtime(
    settings: Settings,
    oracle: ConnectivityOracle | None = None,
) -> LearnSyncRuntime:
    """Wire every component from settings."""
    store = KeyValueStore(settings.store_path)
    client = LearnApiClient.from_settings(settings)
    dataset = BundledDataset.load(settings.bundled_dataset_path)

    if oracle is None:
        oracle = (
            StaticConnectivity(online=False)
            if settings.force_offline
            else SocketConnectivityOracle.from_settings(settings)
        )

    resolver = ContentResolver.build(
        client,
        store,
        dataset,
        force_offline=settings.force_offline,
        aliases=settings.extra_aliases,
        timeout_seconds=settings.request_timeout_seconds,
    )
    ledger = ProgressLedger(store)
    queue = MutationQueue(store, max_attempts=settings.max_delivery_attempts)
    dispatcher = MutationDispatcher(client, timeout_seconds=settings.request_timeout_seconds)
    coordinator = SyncCoordinator(ledger, queue, oracle, dispatcher)

    logger.debug(
        "Runtime ready (store={}, force_offline={})",
        settings.store_path,
        settings.force_offline,
    )
    return LearnSyncRuntime(
        settings=settings,
        store=store,
        client=client,
        resolver=resolver,
        ledger=ledger,
        queue=queue,
        coordinator=coordinator,
    )
