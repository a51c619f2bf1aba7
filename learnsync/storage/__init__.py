"""
Storage Module - Durable local persistence.

Components:
- kv_store: SQLite-backed key-value store shared by cache, ledger and queue
"""

from learnsync.storage.kv_store import KeyValueStore, StorageError

__all__ = ["KeyValueStore", "StorageError"]
