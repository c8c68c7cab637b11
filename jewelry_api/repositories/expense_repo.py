# jewelry_api/repositories/expense_repo.py
import uuid
from datetime import datetime

from sqlalchemy import func
from sqlmodel import Session, select

from jewelry_api.models.admin import Admin
from jewelry_api.models.expense import Expense, ExpenseCategory


class ExpenseRepository:
    """
    Data access layer for expenses and expense categories.
    """

    # ----- Categories -----

    def list_categories(
        self,
        session: Session,
        only_active: bool = True,
    ) -> list[ExpenseCategory]:
        stmt = select(ExpenseCategory)
        if only_active:
            stmt = stmt.where(ExpenseCategory.is_active == True)  # noqa: E712
        stmt = stmt.order_by(ExpenseCategory.name)
        return session.exec(stmt).all()

    def get_category(
        self,
        session: Session,
        category_id: uuid.UUID,
    ) -> ExpenseCategory | None:
        return session.get(ExpenseCategory, category_id)

    def get_category_by_name(self, session: Session, name: str) -> ExpenseCategory | None:
        stmt = select(ExpenseCategory).where(
            func.lower(ExpenseCategory.name) == name.lower()
        )
        return session.exec(stmt).first()

    def create_category(
        self,
        session: Session,
        category: ExpenseCategory,
    ) -> ExpenseCategory:
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    # ----- Expenses -----

    def _filtered(
        self,
        stmt,
        category_id: uuid.UUID | None,
        date_from: datetime | None,
        date_to: datetime | None,
    ):
        if category_id:
            stmt = stmt.where(Expense.category_id == category_id)
        if date_from:
            stmt = stmt.where(Expense.expense_date >= date_from)
        if date_to:
            stmt = stmt.where(Expense.expense_date <= date_to)
        return stmt

    def list_expenses(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        category_id: uuid.UUID | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> list[Expense]:
        stmt = self._filtered(select(Expense), category_id, date_from, date_to)
        stmt = stmt.order_by(Expense.expense_date.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def count_expenses(
        self,
        session: Session,
        category_id: uuid.UUID | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> int:
        stmt = self._filtered(
            select(func.count()).select_from(Expense), category_id, date_from, date_to
        )
        return session.exec(stmt).one()

    def totals_by_category(
        self,
        session: Session,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> list[tuple[uuid.UUID, str, object, int]]:
        """
        Rows of (category_id, category_name, sum(amount), count).
        """
        stmt = (
            select(
                ExpenseCategory.id,
                ExpenseCategory.name,
                func.sum(Expense.amount),
                func.count(Expense.id),
            )
            .select_from(Expense)
            .join(ExpenseCategory, ExpenseCategory.id == Expense.category_id)
            .group_by(ExpenseCategory.id, ExpenseCategory.name)
            .order_by(ExpenseCategory.name)
        )
        stmt = self._filtered(stmt, None, date_from, date_to)
        return session.exec(stmt).all()

    def get_expense(self, session: Session, expense_id: uuid.UUID) -> Expense | None:
        return session.get(Expense, expense_id)

    def get_expense_detail(
        self,
        session: Session,
        expense_id: uuid.UUID,
    ) -> tuple[Expense, str | None, str | None] | None:
        """
        (expense, category name, name of the admin who added it).
        """
        stmt = (
            select(Expense, ExpenseCategory.name, Admin.name)
            .outerjoin(ExpenseCategory, ExpenseCategory.id == Expense.category_id)
            .outerjoin(Admin, Admin.id == Expense.added_by)
            .where(Expense.id == expense_id)
        )
        return session.exec(stmt).first()

    def create_expense(self, session: Session, expense: Expense) -> Expense:
        session.add(expense)
        session.commit()
        session.refresh(expense)
        return expense

    def update_expense(self, session: Session, expense: Expense) -> Expense:
        session.add(expense)
        session.commit()
        session.refresh(expense)
        return expense

    def delete_expense(self, session: Session, expense: Expense) -> None:
        session.delete(expense)
        session.commit()
