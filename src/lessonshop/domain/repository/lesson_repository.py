"""Abstract repository for the Lesson aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (MongoDB, JSON file,
in-memory) live in the infrastructure layer.

Stock changes go through ``try_decrement`` / ``increment`` rather than
``get`` + ``save`` so every implementation can express them as one
atomic store operation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from lessonshop.domain.model.lesson import Lesson


class LessonRepository(ABC):

    @abstractmethod
    def list_all(self) -> list[Lesson]:
        """Return every lesson in the catalog."""

    @abstractmethod
    def search(self, term: str) -> list[Lesson]:
        """Return lessons whose subject or location contains *term*.

        Matching is a case-insensitive substring test; *term* is taken
        literally and has already been validated as non-blank.
        """

    @abstractmethod
    def get_by_id(self, lesson_id: int) -> Lesson | None:
        """Return a lesson by its ID, or None if not found."""

    @abstractmethod
    def try_decrement(self, lesson_id: int, quantity: int) -> bool:
        """Atomically take *quantity* spaces if at least that many remain.

        Returns False (and changes nothing) when the lesson has fewer
        spaces.  Raises EntityNotFoundError for an unknown lesson.
        """

    @abstractmethod
    def increment(self, lesson_id: int, quantity: int) -> None:
        """Atomically give *quantity* spaces back to a lesson."""

    @abstractmethod
    def set_spaces(self, lesson_id: int, spaces: int) -> bool:
        """Overwrite a lesson's spaces. Returns False if no lesson matched."""

    @abstractmethod
    def add_many(self, lessons: list[Lesson]) -> None:
        """Insert or replace lessons, keyed by ``id``."""
