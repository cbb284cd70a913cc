"""Request and response bodies of the HTTP API.

Field names on the wire are camelCase, as the storefront front end sends
them.  Only the shape is checked here; business rules live in the domain.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from lessonshop.application.dto import LessonDTO


class OrderItemRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lesson_id: StrictInt = Field(alias="lessonId")
    quantity: StrictInt


class PlaceOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_name: str = Field(alias="customerName")
    customer_phone: str = Field(alias="customerPhone")
    items: list[OrderItemRequest]
    idempotency_key: str | None = Field(default=None, alias="idempotencyKey")


class UpdateSpacesRequest(BaseModel):
    # Any JSON value; UpdateLessonSpacesHandler rejects non-integers.
    spaces: Any = None


def lesson_json(dto: LessonDTO) -> dict:
    body = {
        "id": dto.id,
        "subject": dto.subject,
        "location": dto.location,
        "price": dto.price,
        "spaces": dto.spaces,
    }
    if dto.image is not None:
        body["image"] = dto.image
    return body
