"""HTTP API — FastAPI application for the lesson storefront.

Routes build one application handler per request from the repositories
held by the process-wide ``Container``; no route touches the store
directly.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from lessonshop.application.dto import OrderItemSpec
from lessonshop.application.list_lessons import ListLessonsHandler
from lessonshop.application.search_lessons import SearchLessonsHandler
from lessonshop.application.show_order import ShowOrderHandler
from lessonshop.application.submit_order import SubmitOrderHandler
from lessonshop.application.update_lesson_spaces import UpdateLessonSpacesHandler
from lessonshop.infrastructure.api.errors import register_exception_handlers
from lessonshop.infrastructure.api.schemas import (
    PlaceOrderRequest,
    UpdateSpacesRequest,
    lesson_json,
)
from lessonshop.infrastructure.bootstrap import Container, build_container
from lessonshop.infrastructure.config import Settings

logger = logging.getLogger(__name__)


def get_container(request: Request) -> Container:
    return request.app.state.container


def create_app(
    container: Container | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the application.

    With an explicit *container* the caller owns its lifecycle.  Without
    one, the store is opened on startup (startup fails if it cannot be
    reached) and closed on shutdown.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if container is not None:
            yield
            return
        app.state.container = build_container(settings)
        try:
            yield
        finally:
            app.state.container.close()

    app = FastAPI(title="Lesson Shop", lifespan=lifespan)
    if container is not None:
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    register_exception_handlers(app)

    if settings.images_dir.is_dir():
        app.mount("/images", StaticFiles(directory=settings.images_dir), name="images")
    else:
        logger.warning("Images directory %s not found; /images is disabled", settings.images_dir)

    # ── Routes ───────────────────────────────────────

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return "Server is running"

    @app.get("/lessons")
    def list_lessons(container: Container = Depends(get_container)) -> list[dict]:
        handler = ListLessonsHandler(container.lesson_repo)
        return [lesson_json(dto) for dto in handler.handle()]

    @app.get("/search")
    def search_lessons(
        q: str | None = None,
        container: Container = Depends(get_container),
    ) -> list[dict]:
        handler = SearchLessonsHandler(container.lesson_repo)
        return [lesson_json(dto) for dto in handler.handle(q)]

    @app.post("/orders", status_code=201)
    def place_order(
        req: PlaceOrderRequest,
        response: Response,
        container: Container = Depends(get_container),
    ) -> dict:
        handler = SubmitOrderHandler(container.order_repo, container.lesson_repo)
        receipt = handler.handle(
            customer_name=req.customer_name,
            customer_phone=req.customer_phone,
            item_specs=[
                OrderItemSpec(lesson_id=item.lesson_id, quantity=item.quantity)
                for item in req.items
            ],
            idempotency_key=req.idempotency_key,
        )
        if receipt.replayed:
            response.status_code = 200
            return {"message": "Order already saved", "insertedId": receipt.order_id}
        return {"message": "Order saved successfully", "insertedId": receipt.order_id}

    @app.get("/orders/{order_id}")
    def show_order(order_id: str, container: Container = Depends(get_container)) -> dict:
        dto = ShowOrderHandler(container.order_repo).handle(order_id)
        return {
            "id": dto.id,
            "customerName": dto.customer_name,
            "customerPhone": dto.customer_phone,
            "items": [
                {
                    "lessonId": item.lesson_id,
                    "subject": item.subject,
                    "quantity": item.quantity,
                    "unitPrice": item.unit_price,
                    "lineTotal": item.line_total,
                }
                for item in dto.items
            ],
            "total": dto.total,
            "createdAt": dto.created_at,
        }

    @app.put("/lessons/{lesson_id}")
    def update_lesson_spaces(
        lesson_id: int,
        req: UpdateSpacesRequest,
        container: Container = Depends(get_container),
    ) -> dict:
        UpdateLessonSpacesHandler(container.lesson_repo).handle(lesson_id, req.spaces)
        return {"message": "Lesson spaces updated successfully"}

    return app
