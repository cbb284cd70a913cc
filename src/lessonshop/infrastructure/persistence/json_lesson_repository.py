"""JSON-file-backed implementation of LessonRepository.

Used when no MongoDB connection string is configured.  The file has no
query language, so search falls back to a linear scan.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path

from lessonshop.domain.exceptions import EntityNotFoundError, StoreError, ValidationError
from lessonshop.domain.model.lesson import Lesson
from lessonshop.domain.model.value_objects import Money
from lessonshop.domain.repository.lesson_repository import LessonRepository
from lessonshop.domain.service.lesson_search import filter_lessons
from lessonshop.infrastructure.persistence.json_file import JsonFile


class JsonLessonRepository(LessonRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- LessonRepository interface -------------------------------------------

    def list_all(self) -> list[Lesson]:
        lessons = [self._to_domain(raw) for raw in self._file.load()]
        return sorted(lessons, key=lambda lesson: lesson.id)

    def search(self, term: str) -> list[Lesson]:
        return filter_lessons(self.list_all(), term)

    def get_by_id(self, lesson_id: int) -> Lesson | None:
        for raw in self._file.load():
            if raw.get("id") == lesson_id:
                return self._to_domain(raw)
        return None

    def try_decrement(self, lesson_id: int, quantity: int) -> bool:
        with self._file.locked():
            records = self._file.load()
            index, lesson = self._find(records, lesson_id)
            if not lesson.take(quantity):
                return False
            records[index] = self._to_raw(lesson)
            self._file.persist(records)
            return True

    def increment(self, lesson_id: int, quantity: int) -> None:
        with self._file.locked():
            records = self._file.load()
            index, lesson = self._find(records, lesson_id)
            lesson.give_back(quantity)
            records[index] = self._to_raw(lesson)
            self._file.persist(records)

    def set_spaces(self, lesson_id: int, spaces: int) -> bool:
        with self._file.locked():
            records = self._file.load()
            try:
                index, lesson = self._find(records, lesson_id)
            except EntityNotFoundError:
                return False
            lesson.set_spaces(spaces)
            records[index] = self._to_raw(lesson)
            self._file.persist(records)
            return True

    def add_many(self, lessons: list[Lesson]) -> None:
        with self._file.locked():
            by_id = {raw["id"]: raw for raw in self._file.load()}
            for lesson in lessons:
                by_id[lesson.id] = self._to_raw(lesson)
            self._file.persist(list(by_id.values()))

    # --- Serialization --------------------------------------------------------

    def _find(self, records: list[dict], lesson_id: int) -> tuple[int, Lesson]:
        for i, raw in enumerate(records):
            if raw.get("id") == lesson_id:
                return i, self._to_domain(raw)
        raise EntityNotFoundError(f"Lesson #{lesson_id} not found")

    @staticmethod
    def _to_raw(lesson: Lesson) -> dict:
        raw = {
            "id": lesson.id,
            "subject": lesson.subject,
            "location": lesson.location,
            "price": str(lesson.price.amount),
            "currency": lesson.price.currency,
            "spaces": lesson.spaces,
        }
        if lesson.image is not None:
            raw["image"] = lesson.image
        return raw

    @staticmethod
    def _to_domain(raw: dict) -> Lesson:
        try:
            return Lesson(
                id=raw["id"],
                subject=raw["subject"],
                location=raw["location"],
                price=Money(Decimal(str(raw["price"])), raw.get("currency", "GBP")),
                spaces=raw["spaces"],
                image=raw.get("image"),
            )
        except (ValidationError, KeyError, TypeError, InvalidOperation) as exc:
            raise StoreError(
                f"Stored lesson #{raw.get('id', '?')} is malformed: {exc}"
            ) from exc
