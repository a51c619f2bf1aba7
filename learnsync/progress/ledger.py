"""
Progress Ledger.

The authoritative local record of which content units a learner has touched
or completed. Stored as a single serialized array under the chapter_progress
key; every mutation is committed to the store before the call returns.

Per-unit state machine:
    unseen -> accessed (completed=False) -> completed

There is no way back from completed. Re-access or re-completion only bumps
last_accessed_at; the first completed_at is kept.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from loguru import logger

from learnsync.progress.models import (
    ClassProgress,
    ContentUnitProgress,
    SubjectProgress,
    percent,
    utc_now,
)
from learnsync.storage.kv_store import KeyValueStore

PROGRESS_KEY = "chapter_progress"


class ProgressLedger:
    """Local, durable per-unit progress records."""

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.clock = clock

    # =========================================================================
    # Reads
    # =========================================================================

    def all(self) -> list[ContentUnitProgress]:
        raw = self.store.get(PROGRESS_KEY, [])
        return [ContentUnitProgress.from_dict(item) for item in raw]

    def get(self, unit_id: str) -> ContentUnitProgress | None:
        for record in self.all():
            if record.unit_id == unit_id:
                return record
        return None

    # =========================================================================
    # Writes
    # =========================================================================

    def upsert(
        self,
        unit_id: str,
        subject_id: str,
        class_id: str,
        completed: bool,
    ) -> ContentUnitProgress:
        """
        Create or update the record for unit_id.

        Durable before return: a crash right after this call cannot lose it.

        Args:
            unit_id: Content unit identifier
            subject_id: Owning subject (denormalized for aggregates)
            class_id: Owning class (denormalized for aggregates)
            completed: Whether this call marks the unit complete

        Returns:
            The record as persisted
        """
        now = self.clock()
        records = self.all()
        record = next((r for r in records if r.unit_id == unit_id), None)

        if record is None:
            record = ContentUnitProgress(
                unit_id=unit_id,
                subject_id=subject_id,
                class_id=class_id,
                completed=completed,
                completed_at=now if completed else None,
                last_accessed_at=now,
            )
            records.append(record)
        else:
            record.subject_id = subject_id
            record.class_id = class_id
            if completed and not record.completed:
                record.completed = True
                record.completed_at = max(now, record.last_accessed_at)
            record.last_accessed_at = max(now, record.last_accessed_at)

        self._save(records)
        logger.debug(
            "Ledger upsert {} (completed={})", unit_id, record.completed
        )
        return record

    def record_access(
        self, unit_id: str, subject_id: str, class_id: str
    ) -> ContentUnitProgress:
        """Note that the learner opened a unit, without completing it."""
        return self.upsert(unit_id, subject_id, class_id, completed=False)

    def reset(self) -> None:
        """Explicit full reset; the only way records are ever deleted."""
        self.store.set(PROGRESS_KEY, [])
        logger.info("All progress cleared")

    def _save(self, records: list[ContentUnitProgress]) -> None:
        self.store.set(PROGRESS_KEY, [record.to_dict() for record in records])

    # =========================================================================
    # Aggregates
    # =========================================================================

    def aggregate(
        self, subject_id: str, class_id: str, total_units: int
    ) -> SubjectProgress:
        """
        Completion for a subject.

        The ledger does not know how many units a subject has; the caller
        supplies total_units from the resolved chapter list.
        """
        completed = sum(
            1
            for record in self.all()
            if record.subject_id == subject_id
            and record.class_id == class_id
            and record.completed
        )
        return SubjectProgress(
            subject_id=subject_id,
            class_id=class_id,
            total_units=total_units,
            completed_count=completed,
            percent_complete=percent(completed, total_units),
        )

    def class_progress(self, class_id: str) -> ClassProgress:
        """Completion across the units of a class the learner has touched."""
        records = [record for record in self.all() if record.class_id == class_id]
        completed = sum(1 for record in records if record.completed)
        return ClassProgress(
            class_id=class_id,
            total_subjects=len({record.subject_id for record in records}),
            tracked_units=len(records),
            completed_count=completed,
            percent_complete=percent(completed, len(records)),
        )
