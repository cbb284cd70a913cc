"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from lessonshop.domain.exceptions import DuplicateOrderError
from lessonshop.domain.model.order import Order, OrderLineItem
from lessonshop.domain.model.value_objects import Money, Quantity
from lessonshop.domain.repository.order_repository import OrderRepository
from lessonshop.infrastructure.persistence.json_file import JsonFile


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> str:
        with self._file.locked():
            orders = self._file.load()
            key = order.idempotency_key
            if key is not None and any(o.get("idempotency_key") == key for o in orders):
                raise DuplicateOrderError(key)

            order.id = uuid.uuid4().hex
            orders.append(self._to_raw(order))
            self._file.persist(orders)
        return order.id

    def get_by_id(self, order_id: str) -> Order | None:
        for raw in self._file.load():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_idempotency_key(self, key: str) -> Order | None:
        for raw in self._file.load():
            if raw.get("idempotency_key") == key:
                return self._to_domain(raw)
        return None

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "customer_name": order.customer_name,
            "customer_phone": order.customer_phone,
            "idempotency_key": order.idempotency_key,
            "created_at": order.created_at.isoformat(),
            "items": [
                {
                    "lesson_id": item.lesson_id,
                    "subject": item.subject,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                    "currency": item.unit_price.currency,
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderLineItem(
                lesson_id=i["lesson_id"],
                subject=i["subject"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), i.get("currency", "GBP")),
            )
            for i in raw["items"]
        ]
        return Order(
            id=raw["id"],
            customer_name=raw["customer_name"],
            customer_phone=raw["customer_phone"],
            items=items,
            idempotency_key=raw.get("idempotency_key"),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )
