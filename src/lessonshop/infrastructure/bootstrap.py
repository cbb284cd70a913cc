"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from lessonshop.domain.exceptions import StoreError
from lessonshop.domain.repository.lesson_repository import LessonRepository
from lessonshop.domain.repository.order_repository import OrderRepository
from lessonshop.infrastructure.config import Settings
from lessonshop.infrastructure.persistence.json_lesson_repository import (
    JsonLessonRepository,
)
from lessonshop.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from lessonshop.infrastructure.persistence.mongo_lesson_repository import (
    MongoLessonRepository,
)
from lessonshop.infrastructure.persistence.mongo_order_repository import (
    MongoOrderRepository,
)
from lessonshop.infrastructure.persistence.mongo_store import LESSONS, ORDERS, MongoStore

logger = logging.getLogger(__name__)


@dataclass
class Container:
    """Repositories for one running process, plus how to release them."""

    lesson_repo: LessonRepository
    order_repo: OrderRepository
    _on_close: Callable[[], None] = field(default=lambda: None, repr=False)

    def close(self) -> None:
        self._on_close()


def build_container(settings: Settings) -> Container:
    """Open the configured store.

    Raises StoreUnavailableError when MongoDB is configured but cannot be
    reached, so the caller can refuse to start.
    """
    if settings.uses_mongo:
        store = MongoStore.connect(settings.mongo_uri, settings.mongo_db)  # type: ignore[arg-type]
        try:
            store.ensure_indexes()
        except StoreError:
            store.close()
            raise
        return Container(
            lesson_repo=MongoLessonRepository(store.db[LESSONS]),
            order_repo=MongoOrderRepository(store.db[ORDERS]),
            _on_close=store.close,
        )

    logger.info("MONGO_URI not set, using JSON files in %s", settings.data_dir)
    return Container(
        lesson_repo=JsonLessonRepository(settings.data_dir / "lessons.json"),
        order_repo=JsonOrderRepository(settings.data_dir / "orders.json"),
    )
