"""Content query and result types shared by the resolver tiers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

CACHE_PREFIX = "learn_cache_"


class ContentType(str, Enum):
    """Kinds of content the resolver can fetch."""

    CLASSES = "classes"
    SUBJECTS = "subjects"  # scope: class id
    CHAPTERS = "chapters"  # scope: subject id
    SUBCHAPTERS = "subchapters"  # scope: chapter id (lesson list)
    SUBCHAPTER = "subchapter"  # scope: lesson id
    QUIZ = "quiz"  # scope: lesson id
    CHAPTER_CONTENT = "chapter_content"  # scope: chapter id

    @property
    def requires_scope(self) -> bool:
        return self is not ContentType.CLASSES


class ContentSource(str, Enum):
    """Tier that produced a resolved payload."""

    REMOTE = "remote"
    CACHE = "cache"
    BUNDLED = "bundled"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class ContentQuery:
    """A single content request: type plus optional scope identifier."""

    content_type: ContentType
    scope_id: str | None = None

    @property
    def has_scope(self) -> bool:
        """False for a scoped type asked for without an id ("" or None)."""
        return not self.content_type.requires_scope or bool(self.scope_id)

    @property
    def cache_key(self) -> str:
        """Deterministic cache key, e.g. learn_cache_subjects_class-6."""
        if self.scope_id is None:
            return f"{CACHE_PREFIX}{self.content_type.value}"
        return f"{CACHE_PREFIX}{self.content_type.value}_{self.scope_id}"


@dataclass
class ResolvedContent:
    """Payload returned by the resolver together with the tier that served it."""

    payload: Any
    source: ContentSource
    query: ContentQuery

    @property
    def is_available(self) -> bool:
        return self.source is not ContentSource.PLACEHOLDER
