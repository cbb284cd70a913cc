"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the HTTP/CLI adapters and the application layer
without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from lessonshop.domain.model.lesson import Lesson
from lessonshop.domain.model.order import Order


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: which lesson the customer booked and how many spaces."""

    lesson_id: int
    quantity: int


@dataclass(frozen=True)
class LessonDTO:
    """Output: a lesson as shown in the catalog."""

    id: int
    subject: str
    location: str
    price: int | float
    price_label: str  # formatted, e.g. "£12.50"
    spaces: int
    image: str | None = None

    @staticmethod
    def from_domain(lesson: Lesson) -> LessonDTO:
        return LessonDTO(
            id=lesson.id,
            subject=lesson.subject,
            location=lesson.location,
            price=lesson.price.as_number(),
            price_label=str(lesson.price),
            spaces=lesson.spaces,
            image=lesson.image,
        )


@dataclass(frozen=True)
class OrderReceipt:
    """Output: result of a successful submission."""

    order_id: str
    replayed: bool = False  # True when an idempotency key matched an earlier order


@dataclass(frozen=True)
class OrderLineItemDTO:
    lesson_id: int
    subject: str
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a stored order as displayed to the user."""

    id: str
    customer_name: str
    customer_phone: str
    items: list[OrderLineItemDTO]
    total: str
    created_at: str

    @staticmethod
    def from_domain(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            items=[
                OrderLineItemDTO(
                    lesson_id=item.lesson_id,
                    subject=item.subject,
                    quantity=item.quantity.value,
                    unit_price=str(item.unit_price),
                    line_total=str(item.line_total),
                )
                for item in order.items
            ],
            total=str(order.total),
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        )
