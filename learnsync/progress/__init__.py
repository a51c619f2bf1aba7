"""
Progress Module - Local learner progress.

Components:
- models: ContentUnitProgress and aggregate summaries
- ledger: Durable per-unit progress records (chapter_progress namespace)
"""

from learnsync.progress.ledger import PROGRESS_KEY, ProgressLedger
from learnsync.progress.models import (
    ClassProgress,
    ContentUnitProgress,
    SubjectProgress,
)

__all__ = [
    "PROGRESS_KEY",
    "ClassProgress",
    "ContentUnitProgress",
    "ProgressLedger",
    "SubjectProgress",
]
