# jewelry_api/schemas/product.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

from jewelry_api.schemas.common import Money, Pagination

ProductType = Literal["chain", "bracelet-anklet"]


def _clean_images(v: list[str] | None) -> list[str] | None:
    if v is None:
        return v
    cleaned = [url.strip() for url in v if url and url.strip()]
    for url in cleaned:
        if not url.startswith(("http://", "https://")):
            raise ValueError("image URLs must be http(s) URLs")
    return cleaned


class ProductCreate(SQLModel):
    """
    Payload for creating a product.

    - product_code is never accepted from clients; it is allocated.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=2, max_length=200)
    description: str = Field(default="", max_length=5000)
    product_type: ProductType
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    discounted_price: Decimal | None = Field(
        default=None, gt=0, max_digits=10, decimal_places=2
    )
    images: list[str] = Field(default_factory=list, max_length=10)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("images")
    @classmethod
    def validate_images(cls, v: list[str]) -> list[str]:
        return _clean_images(v)

    @model_validator(mode="after")
    def discount_not_above_price(self) -> "ProductCreate":
        if self.discounted_price is not None and self.discounted_price > self.price:
            raise ValueError("discounted_price must be less than or equal to price")
        return self


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.

    product_type and product_code are immutable. Sending
    discounted_price=null removes the discount.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=2, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    price: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    discounted_price: Decimal | None = Field(
        default=None, gt=0, max_digits=10, decimal_places=2
    )
    images: list[str] | None = Field(default=None, max_length=10)
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("images")
    @classmethod
    def validate_images(cls, v: list[str] | None) -> list[str] | None:
        return _clean_images(v)


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: uuid.UUID
    product_code: str
    product_type: ProductType
    name: str
    description: str
    price: Money
    discounted_price: Money | None
    images: list[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProductPage(BaseModel):
    products: list[ProductRead]
    pagination: Pagination
