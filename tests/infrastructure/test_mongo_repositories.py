"""Tests for the MongoDB repositories against a mocked collection.

They pin down the exact filters and updates sent to the server, which is
where the atomic floor check lives.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, OperationFailure, ServerSelectionTimeoutError

from lessonshop.domain.exceptions import (
    DuplicateOrderError,
    EntityNotFoundError,
    StoreError,
    StoreUnavailableError,
)
from lessonshop.domain.model.order import Order, OrderLineItem
from lessonshop.domain.model.value_objects import Money, Quantity
from lessonshop.infrastructure.persistence.mongo_lesson_repository import (
    MongoLessonRepository,
)
from lessonshop.infrastructure.persistence.mongo_order_repository import (
    MongoOrderRepository,
)

MATH_DOC = {"id": 1, "subject": "Math", "location": "Room A", "price": 100, "spaces": 2}


def _update_result(matched: int, modified: int) -> MagicMock:
    result = MagicMock()
    result.matched_count = matched
    result.modified_count = modified
    return result


class TestMongoLessonRepository:

    def test_list_all_hides_store_identity(self):
        collection = MagicMock()
        collection.find.return_value.sort.return_value = [MATH_DOC]

        lessons = MongoLessonRepository(collection).list_all()

        collection.find.assert_called_once_with({}, {"_id": False})
        assert lessons[0].id == 1
        assert lessons[0].price == Money.of(100)

    def test_search_uses_escaped_case_insensitive_regex(self):
        collection = MagicMock()
        collection.find.return_value.sort.return_value = []

        MongoLessonRepository(collection).search("a+b")

        query = collection.find.call_args[0][0]
        assert query == {
            "$or": [
                {"subject": {"$regex": r"a\+b", "$options": "i"}},
                {"location": {"$regex": r"a\+b", "$options": "i"}},
            ]
        }

    def test_try_decrement_is_one_conditional_update(self):
        collection = MagicMock()
        collection.update_one.return_value = _update_result(1, 1)

        assert MongoLessonRepository(collection).try_decrement(1, 2) is True

        collection.update_one.assert_called_once_with(
            {"id": 1, "spaces": {"$gte": 2}},
            {"$inc": {"spaces": -2}},
        )
        collection.count_documents.assert_not_called()

    def test_try_decrement_insufficient(self):
        collection = MagicMock()
        collection.update_one.return_value = _update_result(0, 0)
        collection.count_documents.return_value = 1

        assert MongoLessonRepository(collection).try_decrement(1, 5) is False

    def test_try_decrement_unknown_lesson(self):
        collection = MagicMock()
        collection.update_one.return_value = _update_result(0, 0)
        collection.count_documents.return_value = 0

        with pytest.raises(EntityNotFoundError):
            MongoLessonRepository(collection).try_decrement(9, 1)

    def test_increment(self):
        collection = MagicMock()
        collection.update_one.return_value = _update_result(1, 1)

        MongoLessonRepository(collection).increment(1, 2)

        collection.update_one.assert_called_once_with({"id": 1}, {"$inc": {"spaces": 2}})

    def test_set_spaces_reports_match(self):
        collection = MagicMock()
        collection.update_one.return_value = _update_result(0, 0)

        assert MongoLessonRepository(collection).set_spaces(7, 3) is False
        collection.update_one.assert_called_once_with({"id": 7}, {"$set": {"spaces": 3}})

    def test_connection_failure_translated(self):
        collection = MagicMock()
        collection.find.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(StoreUnavailableError):
            MongoLessonRepository(collection).list_all()

    def test_driver_error_translated(self):
        collection = MagicMock()
        collection.find_one.side_effect = OperationFailure("boom")

        with pytest.raises(StoreError):
            MongoLessonRepository(collection).get_by_id(1)

    @pytest.mark.parametrize("doc", [
        {**MATH_DOC, "spaces": -1},
        {"id": 1, "subject": "Math", "price": 100, "spaces": 2},
        {**MATH_DOC, "spaces": "2"},
    ])
    def test_corrupt_document_is_store_error(self, doc):
        collection = MagicMock()
        collection.find.return_value.sort.return_value = [doc]

        with pytest.raises(StoreError, match="Stored lesson #1 is malformed"):
            MongoLessonRepository(collection).list_all()


class TestMongoOrderRepository:

    @staticmethod
    def _order(key=None) -> Order:
        item = OrderLineItem(lesson_id=1, subject="Math", quantity=Quantity(2), unit_price=Money.of(100))
        return Order.create("Alice", "0712", [item], idempotency_key=key)

    def test_add_returns_object_id_string(self):
        collection = MagicMock()
        oid = ObjectId()
        collection.insert_one.return_value.inserted_id = oid
        order = self._order()

        assert MongoOrderRepository(collection).add(order) == str(oid)
        assert order.id == str(oid)
        doc = collection.insert_one.call_args[0][0]
        assert "idempotency_key" not in doc
        assert doc["items"] == [
            {"lesson_id": 1, "subject": "Math", "quantity": 2, "unit_price": "100", "currency": "GBP"}
        ]

    def test_duplicate_key_translated(self):
        collection = MagicMock()
        collection.insert_one.side_effect = DuplicateKeyError("dup")

        with pytest.raises(DuplicateOrderError):
            MongoOrderRepository(collection).add(self._order("k"))

    def test_get_by_id_with_invalid_id(self):
        collection = MagicMock()
        assert MongoOrderRepository(collection).get_by_id("not-an-object-id") is None
        collection.find_one.assert_not_called()

    def test_get_by_id_reconstitutes(self):
        oid = ObjectId()
        collection = MagicMock()
        collection.find_one.return_value = {
            "_id": oid,
            "customer_name": "Alice",
            "customer_phone": "0712",
            "created_at": datetime(2024, 1, 1, 12, 0),
            "items": [
                {"lesson_id": 1, "subject": "Math", "quantity": 2, "unit_price": "100", "currency": "GBP"}
            ],
        }

        order = MongoOrderRepository(collection).get_by_id(str(oid))

        collection.find_one.assert_called_once_with({"_id": oid})
        assert order.id == str(oid)
        assert order.created_at.tzinfo == timezone.utc
        assert order.total == Money.of(200)
