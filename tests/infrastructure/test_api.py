"""HTTP tests for the FastAPI application, backed by in-memory fakes."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from lessonshop.domain.exceptions import StoreUnavailableError
from lessonshop.domain.model.lesson import Lesson
from lessonshop.domain.model.value_objects import Money
from lessonshop.infrastructure.api.app import create_app
from lessonshop.infrastructure.bootstrap import Container
from lessonshop.infrastructure.config import Settings
from lessonshop.infrastructure.persistence.mongo_lesson_repository import (
    MongoLessonRepository,
)
from tests.fakes import FakeLessonRepository, FakeOrderRepository


@pytest.fixture
def images_dir(tmp_path):
    path = tmp_path / "images"
    path.mkdir()
    (path / "math.png").write_bytes(b"\x89PNG fake")
    return path


@pytest.fixture
def container():
    lessons = FakeLessonRepository([
        Lesson(id=1, subject="Math", location="Room A", price=Money.of(100), spaces=2, image="math.png"),
        Lesson(id=2, subject="Music", location="Hendon", price=Money.of("85.50"), spaces=5),
    ])
    return Container(lesson_repo=lessons, order_repo=FakeOrderRepository())


@pytest.fixture
def client(container, images_dir):
    app = create_app(container=container, settings=Settings(images_dir=images_dir))
    return TestClient(app)


def _order_body(*items: tuple[int, int], **extra) -> dict:
    body = {
        "customerName": "Alice",
        "customerPhone": "07123456789",
        "items": [{"lessonId": lid, "quantity": qty} for lid, qty in items],
    }
    body.update(extra)
    return body


class TestRootAndStatic:

    def test_liveness(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.text == "Server is running"

    def test_serves_image(self, client):
        resp = client.get("/images/math.png")
        assert resp.status_code == 200
        assert resp.content == b"\x89PNG fake"

    def test_missing_image_is_json_404(self, client):
        resp = client.get("/images/nope.png")
        assert resp.status_code == 404
        assert "message" in resp.json()

    def test_cors_header(self, client):
        resp = client.get("/lessons", headers={"Origin": "http://localhost:8080"})
        assert resp.headers["access-control-allow-origin"] == "*"


class TestLessons:

    def test_list(self, client):
        resp = client.get("/lessons")
        assert resp.status_code == 200
        assert resp.json() == [
            {"id": 1, "subject": "Math", "location": "Room A", "price": 100, "spaces": 2, "image": "math.png"},
            {"id": 2, "subject": "Music", "location": "Hendon", "price": 85.5, "spaces": 5},
        ]

    def test_search_case_insensitive(self, client):
        upper = client.get("/search", params={"q": "MATH"})
        lower = client.get("/search", params={"q": "math"})
        assert upper.status_code == 200
        assert upper.json() == lower.json()
        assert [lesson["id"] for lesson in upper.json()] == [1]

    def test_search_no_match(self, client):
        resp = client.get("/search", params={"q": "zzz-no-match"})
        assert resp.status_code == 200
        assert resp.json() == []

    @pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "  "}])
    def test_search_missing_query(self, client, params):
        resp = client.get("/search", params=params)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Search query is missing"

    def test_corrupt_stored_lesson_is_500(self, images_dir):
        collection = MagicMock()
        collection.find.return_value.sort.return_value = [
            {"id": 1, "subject": "Math", "location": "Room A", "price": 100, "spaces": -1},
        ]
        container = Container(
            lesson_repo=MongoLessonRepository(collection), order_repo=FakeOrderRepository()
        )
        client = TestClient(create_app(container=container, settings=Settings(images_dir=images_dir)))

        resp = client.get("/lessons")

        assert resp.status_code == 500
        assert resp.json() == {"message": "The database could not complete the request."}


class TestUpdateSpaces:

    def test_updates(self, client, container):
        resp = client.put("/lessons/2", json={"spaces": 3})
        assert resp.status_code == 200
        assert resp.json() == {"message": "Lesson spaces updated successfully"}
        assert container.lesson_repo.spaces(2) == 3

    @pytest.mark.parametrize("body", [{"spaces": "3"}, {"spaces": None}, {}, {"spaces": 1.5}])
    def test_not_a_number(self, client, body):
        resp = client.put("/lessons/2", json=body)
        assert resp.status_code == 400
        assert resp.json()["field"] == "spaces"

    def test_negative(self, client, container):
        resp = client.put("/lessons/2", json={"spaces": -1})
        assert resp.status_code == 400
        assert container.lesson_repo.spaces(2) == 5

    def test_unknown_lesson(self, client):
        resp = client.put("/lessons/99", json={"spaces": 1})
        assert resp.status_code == 404


class TestOrders:

    def test_place_order(self, client, container):
        resp = client.post("/orders", json=_order_body((1, 2), (2, 1)))

        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Order saved successfully"
        assert container.order_repo.get_by_id(body["insertedId"]) is not None
        assert container.lesson_repo.spaces(1) == 0
        assert container.lesson_repo.spaces(2) == 4

    def test_show_order(self, client):
        order_id = client.post("/orders", json=_order_body((2, 2))).json()["insertedId"]

        resp = client.get(f"/orders/{order_id}")

        assert resp.status_code == 200
        body = resp.json()
        assert body["customerName"] == "Alice"
        assert body["items"][0]["lessonId"] == 2
        assert body["total"] == "£171.00"

    def test_show_unknown_order(self, client):
        assert client.get("/orders/missing").status_code == 404

    def test_insufficient_stock_is_409(self, client, container):
        resp = client.post("/orders", json=_order_body((2, 1), (1, 3)))

        assert resp.status_code == 409
        assert resp.json()["lessonId"] == 1
        assert container.lesson_repo.spaces(1) == 2
        assert container.lesson_repo.spaces(2) == 5
        assert len(container.order_repo) == 0

    def test_unknown_lesson_is_404(self, client):
        resp = client.post("/orders", json=_order_body((42, 1)))
        assert resp.status_code == 404

    def test_empty_items_is_400(self, client):
        resp = client.post("/orders", json=_order_body())
        assert resp.status_code == 400
        assert resp.json()["field"] == "items"

    def test_zero_quantity_is_400(self, client):
        resp = client.post("/orders", json=_order_body((1, 0)))
        assert resp.status_code == 400
        assert resp.json()["field"] == "items[0].quantity"

    def test_missing_field_is_400(self, client):
        body = _order_body((1, 1))
        del body["customerPhone"]
        resp = client.post("/orders", json=body)
        assert resp.status_code == 400
        assert resp.json()["field"] == "customerPhone"

    def test_string_quantity_is_400(self, client):
        resp = client.post("/orders", json={
            "customerName": "Alice",
            "customerPhone": "0712",
            "items": [{"lessonId": 1, "quantity": "2"}],
        })
        assert resp.status_code == 400
        assert resp.json()["field"] == "items.0.quantity"

    def test_body_of_wrong_shape_has_no_field(self, client):
        resp = client.post("/orders", json=[1, 2])
        assert resp.status_code == 400
        assert resp.json()["message"].startswith("Invalid request")
        assert "field" not in resp.json()

    def test_idempotent_retry(self, client, container):
        first = client.post("/orders", json=_order_body((2, 1), idempotencyKey="retry-1"))
        second = client.post("/orders", json=_order_body((2, 1), idempotencyKey="retry-1"))

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["insertedId"] == first.json()["insertedId"]
        assert container.lesson_repo.spaces(2) == 4

    def test_store_failure_is_500_without_trace(self, client, container):
        container.order_repo.fail_next_add = True

        resp = client.post("/orders", json=_order_body((1, 1)))

        assert resp.status_code == 500
        assert resp.json() == {"message": "The database could not complete the request."}
        assert container.lesson_repo.spaces(1) == 2


class TestLifespan:

    def test_startup_fails_when_store_unreachable(self, monkeypatch, tmp_path):
        def unreachable(settings):
            raise StoreUnavailableError("Database unreachable while pinging the server")

        monkeypatch.setattr("lessonshop.infrastructure.api.app.build_container", unreachable)
        app = create_app(settings=Settings(images_dir=tmp_path / "none"))

        with pytest.raises(StoreUnavailableError):
            with TestClient(app):
                pass

    def test_store_opened_and_closed(self, monkeypatch, tmp_path, container):
        closed = []
        container._on_close = lambda: closed.append(True)
        monkeypatch.setattr(
            "lessonshop.infrastructure.api.app.build_container", lambda settings: container
        )
        app = create_app(settings=Settings(images_dir=tmp_path / "none"))

        with TestClient(app) as client:
            assert client.get("/lessons").status_code == 200
            assert closed == []

        assert closed == [True]
