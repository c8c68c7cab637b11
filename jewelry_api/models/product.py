# jewelry_api/models/product.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Jewelry catalog entry.

    - product_code is assigned once at creation by the code allocator
      (CH001, BR042, ...) and never changes afterwards.
    - product_type: chain | bracelet-anklet
    - images: ordered list of public image URLs
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    product_code: str = Field(
        max_length=20,
        unique=True,
        index=True,
        description="Human-readable code, e.g. CH001",
    )

    product_type: str = Field(
        max_length=30,
        index=True,
        description="chain | bracelet-anklet",
    )

    name: str = Field(
        max_length=200,
        index=True,
    )

    description: str = Field(default="")

    price: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="Base price",
    )

    discounted_price: Decimal | None = Field(
        default=None,
        max_digits=10,
        decimal_places=2,
        description="Sale price; must be <= price when present",
    )

    images: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this product is visible on the storefront",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    @property
    def effective_price(self) -> Decimal:
        """Price a customer pays right now."""
        if self.discounted_price is not None:
            return self.discounted_price
        return self.price
