"""Lesson aggregate — a purchasable activity with finite capacity.

A lesson is identified by its explicit integer ``id`` (never the document
store's own identity key).  ``spaces`` is the only field that changes after
the catalog is seeded, and it never drops below zero.
"""

from __future__ import annotations

from dataclasses import dataclass

from lessonshop.domain.exceptions import ValidationError
from lessonshop.domain.model.value_objects import Money


@dataclass
class Lesson:
    """Aggregate root for a catalog entry.

    Invariants:
    - ``spaces`` is always an integer >= 0
    """

    id: int
    subject: str
    location: str
    price: Money
    spaces: int
    image: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, int) or isinstance(self.id, bool):
            raise ValidationError(f"Lesson id must be an integer, got {self.id!r}", field="id")
        _check_spaces(self.spaces)

    @property
    def has_stock(self) -> bool:
        return self.spaces > 0

    def set_spaces(self, spaces: int) -> None:
        """Overwrite the remaining spaces (administrative correction)."""
        _check_spaces(spaces)
        self.spaces = spaces

    def take(self, quantity: int) -> bool:
        """Decrement spaces if at least *quantity* remain.

        Returns False, leaving ``spaces`` untouched, when the lesson cannot
        cover the request.
        """
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive", field="quantity")
        if quantity > self.spaces:
            return False
        self.spaces -= quantity
        return True

    def give_back(self, quantity: int) -> None:
        """Return previously taken spaces (compensation only)."""
        if quantity <= 0:
            raise ValidationError("Release quantity must be positive", field="quantity")
        self.spaces += quantity


def _check_spaces(spaces: int) -> None:
    if not isinstance(spaces, int) or isinstance(spaces, bool):
        raise ValidationError(
            f"Spaces must be an integer, got {type(spaces).__name__}",
            field="spaces",
        )
    if spaces < 0:
        raise ValidationError("Spaces cannot be negative", field="spaces")
