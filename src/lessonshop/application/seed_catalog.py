"""Application service: Seed Catalog use case.

Loads lessons from a JSON file (a list of lesson objects) into the store.
Existing lessons with the same ``id`` are replaced.
"""

from __future__ import annotations

import json
from pathlib import Path

from lessonshop.domain.exceptions import ValidationError
from lessonshop.domain.model.lesson import Lesson
from lessonshop.domain.model.value_objects import Money
from lessonshop.domain.repository.lesson_repository import LessonRepository


class SeedCatalogHandler:

    def __init__(self, lesson_repo: LessonRepository) -> None:
        self._lesson_repo = lesson_repo

    def handle(self, path: Path) -> int:
        """Load *path* into the catalog and return the number of lessons."""
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ValidationError(f"Cannot read catalog file {path}: {exc}") from exc

        if not isinstance(raw, list):
            raise ValidationError(f"Catalog file {path} must hold a JSON list")

        lessons = [self._to_lesson(entry) for entry in raw]
        ids = [lesson.id for lesson in lessons]
        if len(ids) != len(set(ids)):
            raise ValidationError(f"Catalog file {path} repeats a lesson id")

        self._lesson_repo.add_many(lessons)
        return len(lessons)

    @staticmethod
    def _to_lesson(entry: dict) -> Lesson:
        try:
            return Lesson(
                id=entry["id"],
                subject=entry["subject"],
                location=entry["location"],
                price=Money.of(entry["price"]),
                spaces=entry["spaces"],
                image=entry.get("image"),
            )
        except (KeyError, TypeError) as exc:
            raise ValidationError(f"Malformed lesson entry {entry!r}") from exc
