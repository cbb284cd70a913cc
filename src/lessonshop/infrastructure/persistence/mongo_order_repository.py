"""MongoDB implementation of OrderRepository.

Order ids are the string form of the document's ObjectId.
"""

from __future__ import annotations

from datetime import timezone
from decimal import Decimal

from bson import ObjectId
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from lessonshop.domain.exceptions import DuplicateOrderError
from lessonshop.domain.model.order import Order, OrderLineItem
from lessonshop.domain.model.value_objects import Money, Quantity
from lessonshop.domain.repository.order_repository import OrderRepository
from lessonshop.infrastructure.persistence.mongo_store import store_errors


class MongoOrderRepository(OrderRepository):

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> str:
        with store_errors("saving order"):
            try:
                result = self._collection.insert_one(self._to_document(order))
            except DuplicateKeyError as exc:
                raise DuplicateOrderError(order.idempotency_key or "") from exc
        order.id = str(result.inserted_id)
        return order.id

    def get_by_id(self, order_id: str) -> Order | None:
        if not ObjectId.is_valid(order_id):
            return None
        with store_errors(f"fetching order {order_id}"):
            doc = self._collection.find_one({"_id": ObjectId(order_id)})
        return self._to_domain(doc) if doc is not None else None

    def get_by_idempotency_key(self, key: str) -> Order | None:
        with store_errors("looking up idempotency key"):
            doc = self._collection.find_one({"idempotency_key": key})
        return self._to_domain(doc) if doc is not None else None

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_document(order: Order) -> dict:
        doc = {
            "customer_name": order.customer_name,
            "customer_phone": order.customer_phone,
            "created_at": order.created_at,
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
        if order.idempotency_key is not None:
            doc["idempotency_key"] = order.idempotency_key
        return doc

    @staticmethod
    def _to_domain(doc: dict) -> Order:
        items = [
            OrderLineItem(
                lesson_id=i["lesson_id"],
                subject=i["subject"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), i.get("currency", "GBP")),
            )
            for i in doc["items"]
        ]
        created_at = doc["created_at"]
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return Order(
            id=str(doc["_id"]),
            customer_name=doc["customer_name"],
            customer_phone=doc["customer_phone"],
            items=items,
            idempotency_key=doc.get("idempotency_key"),
            created_at=created_at,
        )
