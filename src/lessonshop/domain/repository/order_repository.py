"""Abstract repository for the Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from lessonshop.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def add(self, order: Order) -> str:
        """Persist a new order, assign its ID and return it.

        Raises DuplicateOrderError if another order already holds the
        same idempotency key.
        """

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_idempotency_key(self, key: str) -> Order | None:
        """Return the order submitted with *key*, or None."""
