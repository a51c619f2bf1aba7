"""
Bundled Content Dataset.

Static, read-only content shipped with the package and usable with no network
access. Lookups are keyed by dataset slugs; callers translate remote ids
through learnsync.content.id_mapping first.

Every lookup returns None on a miss so the resolver can fall through to the
placeholder tier.
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any

from loguru import logger

from learnsync.content.id_mapping import split_lesson_id


class BundledDataset:
    """Read-only view over the bundled content JSON."""

    def __init__(self, data: dict[str, Any]):
        self._classes: list[dict[str, Any]] = data.get("classes", [])
        self._subjects: dict[str, list[dict[str, Any]]] = data.get("subjects", {})
        self._chapters: dict[str, list[dict[str, Any]]] = data.get("chapters", {})
        self._content: dict[str, dict[str, Any]] = data.get("chapterContent", {})
        self.aliases: dict[str, str] = dict(data.get("aliases", {}))

    @classmethod
    def load(cls, path: Path | None = None) -> BundledDataset:
        """Load the dataset from path, or from the copy shipped with the package."""
        if path is not None:
            raw = path.read_text(encoding="utf-8")
        else:
            raw = (
                resources.files("learnsync")
                .joinpath("data/bundled_content.json")
                .read_text(encoding="utf-8")
            )
        dataset = cls(json.loads(raw))
        logger.debug(
            "Loaded bundled dataset: {} classes, {} chapters with content",
            len(dataset._classes),
            len(dataset._content),
        )
        return dataset

    # =========================================================================
    # Lookups
    # =========================================================================

    def classes(self) -> list[dict[str, Any]]:
        return [dict(item) for item in self._classes]

    def subjects(self, class_key: str) -> list[dict[str, Any]] | None:
        subjects = self._subjects.get(class_key)
        if subjects is None:
            return None
        return [{**subject, "classId": class_key} for subject in subjects]

    def chapters(self, subject_key: str) -> list[dict[str, Any]] | None:
        chapters = self._chapters.get(subject_key)
        if chapters is None:
            return None
        return [
            {
                "_id": chapter["id"],
                "name": chapter["title"],
                "description": chapter.get("description"),
                "subjectId": subject_key,
                "units": chapter.get("units"),
                "icon": chapter.get("icon"),
                "color": chapter.get("color"),
            }
            for chapter in chapters
        ]

    def lessons(self, chapter_key: str) -> list[dict[str, Any]] | None:
        content = self._content.get(chapter_key)
        if content is None:
            return None
        return [
            {
                "_id": f"{chapter_key}-{lesson['id']}",
                "title": lesson["title"],
                "content": lesson.get("content"),
                "readingTime": lesson.get("readingTime"),
                "chapterId": chapter_key,
                "order": index + 1,
                "type": "lesson",
            }
            for index, lesson in enumerate(content.get("lessons", []))
        ]

    def lesson(self, lesson_id: str) -> dict[str, Any] | None:
        parts = split_lesson_id(lesson_id)
        if parts is None:
            return None
        chapter_key, internal_id = parts
        content = self._content.get(chapter_key)
        if content is None:
            return None

        for lesson in content.get("lessons", []):
            if lesson["id"] == internal_id:
                return {
                    "_id": lesson_id,
                    "name": lesson["title"],
                    "title": lesson["title"],
                    "lessonContent": lesson.get("content"),
                    "content": lesson.get("content"),
                    "readingTime": lesson.get("readingTime"),
                    "chapterId": chapter_key,
                    "type": "lesson",
                }
        return None

    def quiz(self, lesson_id: str) -> list[dict[str, Any]] | None:
        parts = split_lesson_id(lesson_id)
        if parts is None:
            return None
        content = self._content.get(parts[0])
        if content is None or not content.get("quiz"):
            return None

        return [
            {
                "_id": question["id"],
                "question": question["question"],
                "options": question["options"],
                "correctIndex": question["correctAnswer"],
                "explanation": question.get("explanation"),
            }
            for question in content["quiz"].get("questions", [])
        ]

    def chapter_content(self, chapter_key: str) -> dict[str, Any] | None:
        content = self._content.get(chapter_key)
        if content is None:
            return None

        lessons = content.get("lessons", [])
        return {
            "id": content["id"],
            "title": content["title"],
            "combinedContent": "\n\n---\n\n".join(
                f"# {lesson['title']}\n\n{lesson.get('content', '')}" for lesson in lessons
            ),
            "lessons": lessons,
            "quiz": content.get("quiz"),
        }
