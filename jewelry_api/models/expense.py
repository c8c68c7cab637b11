# jewelry_api/models/expense.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class ExpenseCategory(SQLModel, table=True):
    __tablename__ = "expense_categories"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )

    name: str = Field(
        max_length=100,
        unique=True,
        index=True,
    )

    description: str | None = None
    is_active: bool = Field(default=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Expense(SQLModel, table=True):
    """
    Business expense recorded by an admin (materials, packaging, shipping...).
    """

    __tablename__ = "expenses"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    title: str = Field(max_length=200)
    description: str | None = None

    amount: Decimal = Field(
        max_digits=10,
        decimal_places=2,
    )

    category_id: uuid.UUID = Field(
        foreign_key="expense_categories.id",
        index=True,
    )

    expense_date: datetime = Field(index=True)

    # URL to a receipt image
    receipt: str | None = Field(default=None, max_length=500)

    added_by: uuid.UUID = Field(foreign_key="admins.id")

    tags: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
