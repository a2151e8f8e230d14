"""Order API schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class OrderLinePayload(BaseModel):
    """Single order line payload. Types are checked by the order engine."""

    product_id: Any = None
    quantity: Any = None


class OrderCreate(BaseModel):
    """Customer order submission. Business validation happens in the engine."""

    customer_name: Any = ""
    payment_method_id: Any = None
    lines: list[OrderLinePayload] = Field(default_factory=list)


class OrderCreatedResponse(BaseModel):
    """Summary returned after a successful submission."""

    order_id: int
    customer_name: str
    total: Decimal
    created_at: datetime


class OrderLineResponse(BaseModel):
    """Serialized order line with its frozen unit price."""

    id: int
    product_id: int | None
    product_name: str | None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class OrderResponse(BaseModel):
    """Serialized order with lines."""

    id: int
    created_at: datetime
    customer_name: str
    total_amount: Decimal
    payment_method_id: int
    payment_method_name: str | None
    lines: list[OrderLineResponse]

    model_config = ConfigDict(from_attributes=True)
