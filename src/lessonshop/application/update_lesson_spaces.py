"""Application service: Update Lesson Spaces use case.

Administrative overwrite of a lesson's remaining spaces.  Bookings never
go through here; they use the reservation service so the floor check and
the decrement happen in one store operation.
"""

from __future__ import annotations

from lessonshop.domain.exceptions import EntityNotFoundError, ValidationError
from lessonshop.domain.repository.lesson_repository import LessonRepository


class UpdateLessonSpacesHandler:

    def __init__(self, lesson_repo: LessonRepository) -> None:
        self._lesson_repo = lesson_repo

    def handle(self, lesson_id: int, spaces: object) -> None:
        if not isinstance(spaces, int) or isinstance(spaces, bool):
            raise ValidationError("Invalid 'spaces' value provided", field="spaces")
        if spaces < 0:
            raise ValidationError("'spaces' cannot be negative", field="spaces")

        if not self._lesson_repo.set_spaces(lesson_id, spaces):
            raise EntityNotFoundError(f"Lesson #{lesson_id} not found")
