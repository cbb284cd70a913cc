"""Order aggregate — a customer's booking of one or more lessons.

An Order is created once and never changes afterwards: there is no
update, cancel or refund path.  All intake rules are enforced by the
``Order.create()`` factory.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from lessonshop.domain.exceptions import ValidationError
from lessonshop.domain.model.value_objects import Money, Quantity


@dataclass(frozen=True)
class OrderLineItem:
    """One booked lesson, with the price captured at booking time."""

    lesson_id: int
    subject: str
    quantity: Quantity
    unit_price: Money  # snapshot, later price changes do not apply

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50
_PHONE_PATTERN = re.compile(r"^[0-9+\-() ]+$")


@dataclass
class Order:
    """Aggregate root for lesson orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: str | None
    customer_name: str
    customer_phone: str
    items: list[OrderLineItem]
    idempotency_key: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer_name: str,
        customer_phone: str,
        items: list[OrderLineItem],
        idempotency_key: str | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants.

        Line items that book the same lesson twice are merged into one.
        """
        name, phone = Order.check_customer(customer_name, customer_phone)

        if not items:
            raise ValidationError("Order must contain at least one item", field="items")

        merged = _merge_items(items)
        if len(merged) > MAX_LINE_ITEMS:
            raise ValidationError(
                f"Maximum {MAX_LINE_ITEMS} lessons per order", field="items"
            )

        if idempotency_key is not None and not idempotency_key.strip():
            raise ValidationError(
                "Idempotency key cannot be blank", field="idempotencyKey"
            )

        return Order(
            id=None,
            customer_name=name,
            customer_phone=phone,
            items=merged,
            idempotency_key=idempotency_key.strip() if idempotency_key else None,
        )

    @staticmethod
    def check_customer(customer_name: str, customer_phone: str) -> tuple[str, str]:
        """Validate the contact details and return them stripped."""
        if not isinstance(customer_name, str) or not customer_name.strip():
            raise ValidationError("Customer name is required", field="customerName")

        if not isinstance(customer_phone, str) or not customer_phone.strip():
            raise ValidationError("Customer phone is required", field="customerPhone")
        phone = customer_phone.strip()
        if not _PHONE_PATTERN.match(phone) or not any(c.isdigit() for c in phone):
            raise ValidationError(
                f"Customer phone {customer_phone!r} is not a phone number",
                field="customerPhone",
            )
        return customer_name.strip(), phone

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        result = Money(Decimal("0.00"), self.items[0].unit_price.currency)
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def quantities(self) -> list[tuple[int, int]]:
        """``(lesson_id, quantity)`` pairs in booking order."""
        return [(item.lesson_id, item.quantity.value) for item in self.items]


def _merge_items(items: list[OrderLineItem]) -> list[OrderLineItem]:
    merged: dict[int, OrderLineItem] = {}
    for item in items:
        existing = merged.get(item.lesson_id)
        if existing is None:
            merged[item.lesson_id] = item
        else:
            merged[item.lesson_id] = OrderLineItem(
                lesson_id=item.lesson_id,
                subject=existing.subject,
                quantity=Quantity(existing.quantity.value + item.quantity.value),
                unit_price=existing.unit_price,
            )
    return list(merged.values())
