"""Application service: Search Lessons use case (query)."""

from __future__ import annotations

from lessonshop.application.dto import LessonDTO
from lessonshop.domain.repository.lesson_repository import LessonRepository
from lessonshop.domain.service.lesson_search import normalize_term


class SearchLessonsHandler:

    def __init__(self, lesson_repo: LessonRepository) -> None:
        self._lesson_repo = lesson_repo

    def handle(self, term: str | None) -> list[LessonDTO]:
        """Find lessons by subject or location.

        A blank term is a client error; a term that matches nothing
        simply yields an empty list.
        """
        needle = normalize_term(term)
        return [LessonDTO.from_domain(lesson) for lesson in self._lesson_repo.search(needle)]
