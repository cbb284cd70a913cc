"""MongoDB connection handle and driver-error translation.

``MongoStore`` is created once at startup by the composition root and
closed on shutdown; repositories receive its collections explicitly.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError
from pymongo.server_api import ServerApi

from lessonshop.domain.exceptions import StoreError, StoreUnavailableError

logger = logging.getLogger(__name__)

LESSONS = "lessons"
ORDERS = "orders"


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Re-raise driver failures as domain StoreError subclasses."""
    try:
        yield
    except ConnectionFailure as exc:
        raise StoreUnavailableError(f"Database unreachable while {operation}") from exc
    except PyMongoError as exc:
        raise StoreError(f"Database error while {operation}: {exc}") from exc


class MongoStore:

    def __init__(self, client: MongoClient, db_name: str) -> None:
        self._client = client
        self.db: Database = client[db_name]

    @staticmethod
    def connect(uri: str, db_name: str, timeout_ms: int = 5000) -> MongoStore:
        """Open a client and verify the server answers before returning."""
        client: MongoClient = MongoClient(
            uri,
            server_api=ServerApi("1", strict=True, deprecation_errors=True),
            serverSelectionTimeoutMS=timeout_ms,
        )
        store = MongoStore(client, db_name)
        try:
            store.ping()
        except StoreError:
            client.close()
            raise
        logger.info("Connected to MongoDB database %r", db_name)
        return store

    def ping(self) -> None:
        with store_errors("pinging the server"):
            self._client.admin.command("ping")

    def ensure_indexes(self) -> None:
        with store_errors("creating indexes"):
            self.db[LESSONS].create_index([("id", ASCENDING)], unique=True)
            self.db[ORDERS].create_index(
                [("idempotency_key", ASCENDING)],
                unique=True,
                partialFilterExpression={"idempotency_key": {"$type": "string"}},
            )

    def close(self) -> None:
        self._client.close()
