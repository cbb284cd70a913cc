"""Domain service: Inventory Reservation.

Takes spaces from every lesson referenced by an order, all or nothing.

Each lesson is decremented with one conditional atomic update (the store
only applies it while ``spaces >= quantity``), so two concurrent orders
can never both take the last space.  If any lesson in the order cannot
be covered, the decrements already applied for that order are undone
with compensating increments before the failure is reported.
"""

from __future__ import annotations

import logging

from lessonshop.domain.exceptions import InsufficientStockError
from lessonshop.domain.repository.lesson_repository import LessonRepository

logger = logging.getLogger(__name__)


class InventoryReservationService:

    def __init__(self, lesson_repo: LessonRepository) -> None:
        self._lesson_repo = lesson_repo

    def reserve(self, items: list[tuple[int, int]]) -> None:
        """Take ``quantity`` spaces for every ``(lesson_id, quantity)`` pair.

        Raises InsufficientStockError naming the first lesson that could
        not be covered.  Any exception (unknown lesson, store failure)
        leaves every lesson as it was before the call.
        """
        applied: list[tuple[int, int]] = []
        try:
            for lesson_id, quantity in items:
                if not self._lesson_repo.try_decrement(lesson_id, quantity):
                    raise InsufficientStockError(lesson_id, quantity)
                applied.append((lesson_id, quantity))
        except Exception:
            self._roll_back(applied)
            raise

        logger.info("Reserved spaces %s", applied)

    def release(self, lesson_id: int, quantity: int) -> None:
        """Compensating action: give *quantity* spaces back to a lesson."""
        self._lesson_repo.increment(lesson_id, quantity)

    def release_all(self, items: list[tuple[int, int]]) -> None:
        """Undo a successful ``reserve`` for the same items."""
        self._roll_back(list(items))

    def _roll_back(self, applied: list[tuple[int, int]]) -> None:
        """Release every applied pair, newest first.

        A failed release is logged and the remaining ones are still
        attempted; the caller re-raises its own error afterwards.
        """
        if not applied:
            return
        logger.warning("Rolling back reserved spaces %s", applied)
        for lesson_id, quantity in reversed(applied):
            try:
                self.release(lesson_id, quantity)
            except Exception:
                logger.exception(
                    "Could not give back %d space(s) to lesson #%d", quantity, lesson_id
                )
