"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the HTTP and CLI layers can catch them uniformly and map each kind to a
status code or a user-friendly message exactly once.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """Client input broke a business rule or invariant."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InsufficientStockError(DomainException):
    """A lesson does not have enough spaces left for a reservation."""

    def __init__(self, lesson_id: int, requested: int | None = None) -> None:
        if requested is None:
            message = f"Insufficient spaces for lesson #{lesson_id}"
        else:
            message = (
                f"Insufficient spaces for lesson #{lesson_id} "
                f"(requested {requested})"
            )
        super().__init__(message)
        self.lesson_id = lesson_id
        self.requested = requested


class StoreError(DomainException):
    """The document store rejected or failed an operation."""


class StoreUnavailableError(StoreError):
    """The document store cannot be reached."""


class DuplicateOrderError(DomainException):
    """An order with the same idempotency key was stored concurrently."""

    def __init__(self, key: str) -> None:
        super().__init__(f"An order with idempotency key {key!r} already exists")
        self.key = key
