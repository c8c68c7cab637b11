# jewelry_api/schemas/order.py
import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlmodel import SQLModel

from jewelry_api.schemas.common import Money, Pagination

OrderStatus = Literal[
    "payment_pending",
    "confirmed",
    "processing",
    "shipped",
    "delivered",
    "cancelled",
]

MAX_ITEMS_PER_ORDER = 20
MAX_QUANTITY_PER_ITEM = 10


class OrderItemCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    quantity: int = Field(ge=1, le=MAX_QUANTITY_PER_ITEM)


class PublicOrderCreate(SQLModel):
    """
    Payload for the public checkout.

    Backend derives:
      - order_number / order_code
      - unit prices and total_amount from current catalog prices
      - status = 'payment_pending'
    """

    model_config = ConfigDict(extra="forbid")

    customer_name: str = Field(
        min_length=2,
        max_length=100,
        pattern=r"^[a-zA-Z\s]+$",
    )
    customer_phone: str = Field(pattern=r"^\d{10}$")
    customer_address: str = Field(min_length=10, max_length=500)
    customer_pincode: str = Field(pattern=r"^\d{6}$")
    items: list[OrderItemCreate] = Field(
        min_length=1,
        max_length=MAX_ITEMS_PER_ORDER,
    )
    recaptcha_token: str | None = Field(default=None, min_length=1)

    @field_validator("customer_name", "customer_address")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("field cannot be empty")
        return v


class OrderReceipt(SQLModel):
    """
    What the public caller gets back: enough to track the order,
    nothing internal.
    """

    order_number: str
    order_code: str
    total_amount: Money
    estimated_delivery: str
    status: OrderStatus


class OrderTracking(SQLModel):
    order_code: str
    status: OrderStatus
    total_amount: Money
    created_at: datetime


# ---- Admin views ----


class OrderRead(SQLModel):
    """
    Order representation without items.
    """

    id: uuid.UUID
    order_number: str
    order_code: str
    order_code_degraded: bool
    customer_name: str
    customer_phone: str
    customer_address: str
    total_amount: Money
    status: OrderStatus
    whatsapp_message_sent: bool
    payment_received: bool
    notes: str | None
    created_at: datetime
    updated_at: datetime


class OrderItemRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    unit_price: Money
    total_price: Money
    product_snapshot: dict[str, Any]


class OrderWithItemsRead(OrderRead):
    items: list[OrderItemRead]


class OrderPage(BaseModel):
    orders: list[OrderRead]
    pagination: Pagination


class OrderUpdate(SQLModel):
    """
    Admin partial update.

    status changes go through the order state machine and are recorded
    in the status history; status_note is stored with that history row.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus | None = None
    status_note: str | None = Field(default=None, max_length=500)
    payment_received: bool | None = None
    whatsapp_message_sent: bool | None = None
    notes: str | None = Field(default=None, max_length=2000)


class OrderStatusHistoryRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    old_status: str | None
    new_status: str
    changed_by: uuid.UUID | None
    notes: str | None
    created_at: datetime


class OrderStats(BaseModel):
    status_counts: dict[str, int]
    total_revenue: Money
    total_orders: int


class WhatsAppLinkRead(BaseModel):
    url: str
    message: str
