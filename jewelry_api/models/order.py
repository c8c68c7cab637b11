# jewelry_api/models/order.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order placed through the public storefront.

    Lifecycle:
      payment_pending -> confirmed -> processing -> shipped -> delivered
      any non-terminal status -> cancelled
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    # Informational, derived from the creation timestamp
    order_number: str = Field(
        max_length=20,
        index=True,
    )

    order_code: str = Field(
        max_length=20,
        unique=True,
        index=True,
        description="ORD001, ORD002, ...",
    )

    # True when the code came from the timestamp fallback
    order_code_degraded: bool = Field(default=False)

    customer_name: str = Field(max_length=100)
    customer_phone: str = Field(max_length=20, index=True)
    customer_address: str = Field(description="Address including pincode")

    # 20 lines x 10 units at the largest product price needs 11 integer digits
    total_amount: Decimal = Field(
        max_digits=14,
        decimal_places=2,
    )

    status: str = Field(
        default="payment_pending",
        max_length=20,
        index=True,
    )

    whatsapp_message_sent: bool = Field(default=False)
    payment_received: bool = Field(default=False)

    # Admin-only
    notes: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.

    product_id is a weak reference (no FK) so products can be edited or
    deleted; product_snapshot keeps what the customer actually bought.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        ondelete="CASCADE",
        index=True,
    )

    product_id: uuid.UUID = Field(index=True)

    quantity: int = Field(gt=0, le=10)

    unit_price: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="Price at time of order",
    )
    total_price: Decimal = Field(
        max_digits=12,
        decimal_places=2,
        description="unit_price * quantity",
    )

    product_snapshot: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class OrderStatusHistory(SQLModel, table=True):
    """
    Audit trail of admin status changes.
    """

    __tablename__ = "order_status_history"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        ondelete="CASCADE",
        index=True,
    )

    old_status: str | None = Field(default=None, max_length=20)
    new_status: str = Field(max_length=20)

    changed_by: uuid.UUID | None = Field(
        default=None,
        foreign_key="admins.id",
        ondelete="SET NULL",
    )

    notes: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
