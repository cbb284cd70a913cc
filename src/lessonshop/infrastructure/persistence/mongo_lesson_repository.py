"""MongoDB implementation of LessonRepository.

Lessons are keyed by their explicit integer ``id`` field; the document's
own ``_id`` is never read back.  Stock changes are single ``update_one``
calls whose filter carries the floor check, so the check and the
decrement are one atomic server-side operation.
"""

from __future__ import annotations

import re

from pymongo.collection import Collection

from lessonshop.domain.exceptions import EntityNotFoundError, StoreError, ValidationError
from lessonshop.domain.model.lesson import Lesson
from lessonshop.domain.model.value_objects import Money
from lessonshop.domain.repository.lesson_repository import LessonRepository
from lessonshop.infrastructure.persistence.mongo_store import store_errors

_PROJECTION = {"_id": False}


class MongoLessonRepository(LessonRepository):

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    # --- LessonRepository interface -------------------------------------------

    def list_all(self) -> list[Lesson]:
        with store_errors("fetching lessons"):
            docs = list(self._collection.find({}, _PROJECTION).sort("id", 1))
        return [self._to_domain(doc) for doc in docs]

    def search(self, term: str) -> list[Lesson]:
        pattern = re.escape(term)
        query = {
            "$or": [
                {"subject": {"$regex": pattern, "$options": "i"}},
                {"location": {"$regex": pattern, "$options": "i"}},
            ]
        }
        with store_errors("searching lessons"):
            docs = list(self._collection.find(query, _PROJECTION).sort("id", 1))
        return [self._to_domain(doc) for doc in docs]

    def get_by_id(self, lesson_id: int) -> Lesson | None:
        with store_errors(f"fetching lesson #{lesson_id}"):
            doc = self._collection.find_one({"id": lesson_id}, _PROJECTION)
        return self._to_domain(doc) if doc is not None else None

    def try_decrement(self, lesson_id: int, quantity: int) -> bool:
        with store_errors(f"reserving spaces on lesson #{lesson_id}"):
            result = self._collection.update_one(
                {"id": lesson_id, "spaces": {"$gte": quantity}},
                {"$inc": {"spaces": -quantity}},
            )
            if result.modified_count == 1:
                return True
            exists = self._collection.count_documents({"id": lesson_id}, limit=1)
        if not exists:
            raise EntityNotFoundError(f"Lesson #{lesson_id} not found")
        return False

    def increment(self, lesson_id: int, quantity: int) -> None:
        with store_errors(f"releasing spaces on lesson #{lesson_id}"):
            result = self._collection.update_one(
                {"id": lesson_id}, {"$inc": {"spaces": quantity}}
            )
        if result.matched_count == 0:
            raise EntityNotFoundError(f"Lesson #{lesson_id} not found")

    def set_spaces(self, lesson_id: int, spaces: int) -> bool:
        with store_errors(f"updating lesson #{lesson_id}"):
            result = self._collection.update_one(
                {"id": lesson_id}, {"$set": {"spaces": spaces}}
            )
        return result.matched_count > 0

    def add_many(self, lessons: list[Lesson]) -> None:
        with store_errors("seeding lessons"):
            for lesson in lessons:
                self._collection.replace_one(
                    {"id": lesson.id}, self._to_document(lesson), upsert=True
                )

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_document(lesson: Lesson) -> dict:
        doc = {
            "id": lesson.id,
            "subject": lesson.subject,
            "location": lesson.location,
            "price": lesson.price.as_number(),
            "spaces": lesson.spaces,
        }
        if lesson.image is not None:
            doc["image"] = lesson.image
        return doc

    @staticmethod
    def _to_domain(doc: dict) -> Lesson:
        try:
            return Lesson(
                id=doc["id"],
                subject=doc["subject"],
                location=doc["location"],
                price=Money.of(doc["price"]),
                spaces=doc["spaces"],
                image=doc.get("image"),
            )
        except (ValidationError, KeyError, TypeError) as exc:
            raise StoreError(
                f"Stored lesson #{doc.get('id', '?')} is malformed: {exc}"
            ) from exc
