"""Domain service: Lesson Search.

The pure predicate behind ``GET /search``.  Stores with a native query
language translate the same rule into their own filter; stores without
one scan ``list_all()`` through ``filter_lessons``.
"""

from __future__ import annotations

from lessonshop.domain.exceptions import ValidationError
from lessonshop.domain.model.lesson import Lesson


def normalize_term(term: str | None) -> str:
    """Validate a search term and strip surrounding whitespace."""
    if term is None or not term.strip():
        raise ValidationError("Search query is missing", field="q")
    return term.strip()


def lesson_matches(lesson: Lesson, term: str) -> bool:
    """True if *term* occurs in the lesson's subject or location, ignoring case."""
    needle = term.lower()
    return needle in lesson.subject.lower() or needle in lesson.location.lower()


def filter_lessons(lessons: list[Lesson], term: str) -> list[Lesson]:
    return [lesson for lesson in lessons if lesson_matches(lesson, term)]
