"""
Identifier mapping between remote object ids and bundled dataset slugs.

Scope ids reach the resolver in two forms: human-readable slugs from the
bundled dataset ("class-6", "sci-6-ch1") and object ids issued by the remote
service ("691eafac8eb433fec69cf13a"). The two are not comparable, so the
translation goes through an explicit alias table.

Miss behavior: an id with no alias passes through unchanged, on the
assumption that it is already a slug. A remote id added server-side without
a matching alias therefore misses in the dataset and resolves to the
"content unavailable" placeholder.
"""

from __future__ import annotations

from typing import Mapping


def dataset_key(scope_id: str | None, aliases: Mapping[str, str]) -> str | None:
    """
    Translate a scope identifier into a bundled dataset key.

    Args:
        scope_id: Slug or remote object id (None for unscoped queries)
        aliases: Remote id -> dataset slug table

    Returns:
        Dataset key, or None when there is no scope id
    """
    if not scope_id:
        return None
    return aliases.get(scope_id, scope_id)


def split_lesson_id(lesson_id: str) -> tuple[str, str] | None:
    """
    Split a bundled lesson id into (chapter slug, lesson id).

    Example: "sci-6-ch1-l1" -> ("sci-6-ch1", "l1")
    """
    chapter_id, sep, internal_id = lesson_id.rpartition("-")
    if not sep or not chapter_id or not internal_id:
        return None
    return chapter_id, internal_id
