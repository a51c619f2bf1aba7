"""Progress records and aggregate summaries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_ts(value: str | int | float | None) -> datetime | None:
    """ISO-8601 string (Z suffix allowed) or epoch milliseconds."""
    if not value:
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_ts(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class ContentUnitProgress:
    """Completion state of a single content unit (chapter or lesson)."""

    unit_id: str
    subject_id: str
    class_id: str
    completed: bool
    last_accessed_at: datetime
    completed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Storage format, same field names the remote contract uses."""
        return {
            "chapterId": self.unit_id,
            "subjectId": self.subject_id,
            "classId": self.class_id,
            "completed": self.completed,
            "completedAt": format_ts(self.completed_at),
            "lastAccessedAt": format_ts(self.last_accessed_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContentUnitProgress:
        return cls(
            unit_id=data["chapterId"],
            subject_id=data.get("subjectId", ""),
            class_id=data.get("classId", ""),
            completed=bool(data.get("completed", False)),
            completed_at=parse_ts(data.get("completedAt")),
            last_accessed_at=parse_ts(data.get("lastAccessedAt")) or utc_now(),
        )

    def sync_payload(self) -> dict[str, Any]:
        """Body for POST /progress/chapter."""
        return {
            "chapterId": self.unit_id,
            "subjectId": self.subject_id,
            "classId": self.class_id,
            "completed": self.completed,
            "completedAt": format_ts(self.completed_at),
        }


@dataclass
class SubjectProgress:
    """Completion summary for one subject within a class."""

    subject_id: str
    class_id: str
    total_units: int
    completed_count: int
    percent_complete: int


@dataclass
class ClassProgress:
    """Completion summary across every tracked unit of a class."""

    class_id: str
    total_subjects: int
    tracked_units: int
    completed_count: int
    percent_complete: int


def percent(completed: int, total: int) -> int:
    """Percentage rounded half up (1 of 8 -> 13), 0 when there is nothing to divide by."""
    if total <= 0:
        return 0
    return int(completed * 100 / total + 0.5)
