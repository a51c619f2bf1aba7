"""Pending mutation records for the durable sync queue."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from learnsync.progress.models import parse_ts, format_ts, utc_now
from learnsync.storage.kv_store import StorageError


class MutationType(str, Enum):
    """Kinds of state change that can wait in the queue for the remote service."""

    SYNC_CHAPTER_PROGRESS = "SYNC_CHAPTER_PROGRESS"
    SYNC_XP = "SYNC_XP"
    SUBMIT_QUIZ_RESULT = "SUBMIT_QUIZ_RESULT"
    SUBMIT_GAME_RESULT = "SUBMIT_GAME_RESULT"
    GENERIC_SYNC = "GENERIC_SYNC"


def new_mutation_id(mutation_type: MutationType, enqueued_at: datetime) -> str:
    """e.g. SYNC_CHAPTER_PROGRESS_1718000000000_3f9a1c2b7"""
    millis = int(enqueued_at.timestamp() * 1000)
    return f"{mutation_type.value}_{millis}_{uuid.uuid4().hex[:9]}"


@dataclass
class PendingMutation:
    """A state change not yet acknowledged by the remote service."""

    id: str
    type: MutationType
    payload: dict[str, Any]
    enqueued_at: datetime = field(default_factory=utc_now)
    attempts: int = 0  # permanent rejections so far

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "data": self.payload,
            "timestamp": format_ts(self.enqueued_at),
            "retryCount": self.attempts,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PendingMutation:
        try:
            mutation_type = MutationType(data["type"])
        except (KeyError, ValueError) as exc:
            raise StorageError(
                f"Unknown mutation type in sync queue: {data.get('type')!r}"
            ) from exc
        return cls(
            id=data["id"],
            type=mutation_type,
            payload=dict(data.get("data") or {}),
            enqueued_at=parse_ts(data.get("timestamp")) or utc_now(),
            attempts=int(data.get("retryCount", 0)),
        )


@dataclass
class DrainResult:
    """Outcome of one drain pass."""

    delivered: list[str] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)
    remaining: int = 0
    stopped_on: str | None = None
    skipped: bool = False
    error: str | None = None

    @property
    def completed(self) -> bool:
        """True when the pass ran and emptied the queue."""
        return not self.skipped and self.remaining == 0
