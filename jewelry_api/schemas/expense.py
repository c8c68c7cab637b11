# jewelry_api/schemas/expense.py
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from jewelry_api.schemas.common import Money, Pagination, UtcDatetime


# ---- Categories ----


class ExpenseCategoryCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=500)

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class ExpenseCategoryRead(SQLModel):
    id: uuid.UUID
    name: str
    description: str | None
    is_active: bool
    created_at: datetime


# ---- Expenses ----


class ExpenseCreate(SQLModel):
    """
    Payload for recording an expense.

    added_by is taken from the authenticated admin, never from the body.
    """

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=2, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    category_id: uuid.UUID
    expense_date: UtcDatetime
    receipt: str | None = Field(default=None, max_length=500)
    tags: list[str] = Field(default_factory=list, max_length=20)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        return [t.strip() for t in v if t and t.strip()]


class ExpenseUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=2, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    amount: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    category_id: uuid.UUID | None = None
    expense_date: UtcDatetime | None = None
    receipt: str | None = Field(default=None, max_length=500)
    tags: list[str] | None = Field(default=None, max_length=20)


class ExpenseRead(SQLModel):
    id: uuid.UUID
    title: str
    description: str | None
    amount: Money
    category_id: uuid.UUID
    expense_date: datetime
    receipt: str | None
    added_by: uuid.UUID
    tags: list[str]
    created_at: datetime
    updated_at: datetime


class ExpenseDetailRead(ExpenseRead):
    category_name: str | None
    added_by_name: str | None


class ExpensePage(BaseModel):
    expenses: list[ExpenseRead]
    pagination: Pagination


class ExpenseCategoryTotal(BaseModel):
    category_id: uuid.UUID
    category_name: str
    total: Money
    count: int


class ExpenseSummary(BaseModel):
    total: Money
    count: int
    by_category: list[ExpenseCategoryTotal]
