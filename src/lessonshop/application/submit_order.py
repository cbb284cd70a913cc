"""Application service: Submit Order use case.

Orchestrates the Order aggregate (intake rules), the inventory
reservation domain service (stock) and the order repository.

The order is only persisted once every lesson's spaces have been taken;
if persisting fails afterwards, the spaces are given back so no partial
booking is ever left behind.
"""

from __future__ import annotations

import logging

from lessonshop.application.dto import OrderItemSpec, OrderReceipt
from lessonshop.domain.exceptions import (
    DuplicateOrderError,
    EntityNotFoundError,
    ValidationError,
)
from lessonshop.domain.model.order import Order, OrderLineItem
from lessonshop.domain.model.value_objects import Quantity
from lessonshop.domain.repository.lesson_repository import LessonRepository
from lessonshop.domain.repository.order_repository import OrderRepository
from lessonshop.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)

logger = logging.getLogger(__name__)


class SubmitOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        lesson_repo: LessonRepository,
    ) -> None:
        self._order_repo = order_repo
        self._lesson_repo = lesson_repo

    def handle(
        self,
        customer_name: str,
        customer_phone: str,
        item_specs: list[OrderItemSpec],
        idempotency_key: str | None = None,
    ) -> OrderReceipt:
        """Book the requested lessons and store the order.

        Steps:
        1. Resolve each lesson id to a Lesson (fail if not found).
        2. Let the Order aggregate validate all intake rules.
        3. Return the earlier order if the idempotency key was seen before.
        4. Reserve spaces for every lesson, all or nothing.
        5. Persist the order, releasing the spaces if that fails.
        """
        # Customer fields are reported before any lesson lookup; Order.create
        # repeats the check as part of its own invariants.
        Order.check_customer(customer_name, customer_phone)
        order = Order.create(
            customer_name=customer_name,
            customer_phone=customer_phone,
            items=self._build_line_items(item_specs),
            idempotency_key=idempotency_key,
        )

        if order.idempotency_key is not None:
            previous = self._order_repo.get_by_idempotency_key(order.idempotency_key)
            if previous is not None:
                logger.info(
                    "Replaying order %s for idempotency key %r",
                    previous.id,
                    order.idempotency_key,
                )
                return OrderReceipt(order_id=previous.id, replayed=True)  # type: ignore[arg-type]

        svc = InventoryReservationService(self._lesson_repo)
        svc.reserve(order.quantities)

        try:
            order_id = self._order_repo.add(order)
        except DuplicateOrderError:
            # Lost a race with a retry carrying the same key.
            svc.release_all(order.quantities)
            previous = self._order_repo.get_by_idempotency_key(order.idempotency_key)  # type: ignore[arg-type]
            if previous is None:
                raise
            return OrderReceipt(order_id=previous.id, replayed=True)  # type: ignore[arg-type]
        except Exception:
            svc.release_all(order.quantities)
            raise

        logger.info("Order %s stored for %s", order_id, order.customer_name)
        return OrderReceipt(order_id=order_id)

    def _build_line_items(self, item_specs: list[OrderItemSpec]) -> list[OrderLineItem]:
        if not item_specs:
            raise ValidationError("Order must contain at least one item", field="items")

        line_items: list[OrderLineItem] = []
        for index, spec in enumerate(item_specs):
            if not isinstance(spec.lesson_id, int) or isinstance(spec.lesson_id, bool):
                raise ValidationError(
                    f"Lesson id must be an integer, got {spec.lesson_id!r}",
                    field=f"items[{index}].lessonId",
                )
            try:
                quantity = Quantity(spec.quantity)
            except ValidationError as exc:
                raise ValidationError(str(exc), field=f"items[{index}].quantity") from exc

            lesson = self._lesson_repo.get_by_id(spec.lesson_id)
            if lesson is None:
                raise EntityNotFoundError(f"Lesson #{spec.lesson_id} not found")

            line_items.append(
                OrderLineItem(
                    lesson_id=lesson.id,
                    subject=lesson.subject,
                    quantity=quantity,
                    unit_price=lesson.price,  # <-- price snapshot
                )
            )
        return line_items
