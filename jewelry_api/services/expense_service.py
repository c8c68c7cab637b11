# jewelry_api/services/expense_service.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import Session

from jewelry_api.core.errors import DuplicateResourceError, NotFoundError
from jewelry_api.core.sanitize import sanitize_input
from jewelry_api.models.expense import Expense, ExpenseCategory
from jewelry_api.repositories.expense_repo import ExpenseRepository
from jewelry_api.schemas.common import Pagination
from jewelry_api.schemas.expense import (
    ExpenseCategoryCreate,
    ExpenseCategoryTotal,
    ExpenseCreate,
    ExpenseDetailRead,
    ExpensePage,
    ExpenseRead,
    ExpenseSummary,
    ExpenseUpdate,
)


class ExpenseService:
    """
    Business logic for expenses.

    Responsibilities:
      - category uniqueness (case-insensitive)
      - expenses must reference an existing, active category
      - per-category totals for the dashboard
    """

    def __init__(self, repo: ExpenseRepository):
        self.repo = repo

    # ----- Categories -----

    def list_categories(self, session: Session) -> list[ExpenseCategory]:
        return self.repo.list_categories(session)

    def create_category(
        self,
        session: Session,
        payload: ExpenseCategoryCreate,
    ) -> ExpenseCategory:
        name = sanitize_input(payload.name)
        if self.repo.get_category_by_name(session, name):
            raise DuplicateResourceError("Expense category", "name", name)
        category = ExpenseCategory(
            name=name,
            description=sanitize_input(payload.description) if payload.description else None,
        )
        return self.repo.create_category(session, category)

    def _require_category(self, session: Session, category_id: uuid.UUID) -> ExpenseCategory:
        category = self.repo.get_category(session, category_id)
        if not category or not category.is_active:
            raise NotFoundError("Expense category")
        return category

    # ----- Expenses -----

    def list_expenses(
        self,
        session: Session,
        page: int = 1,
        limit: int = 20,
        category_id: uuid.UUID | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> ExpensePage:
        skip = (page - 1) * limit
        expenses = self.repo.list_expenses(
            session,
            skip=skip,
            limit=limit,
            category_id=category_id,
            date_from=date_from,
            date_to=date_to,
        )
        total = self.repo.count_expenses(
            session, category_id=category_id, date_from=date_from, date_to=date_to
        )
        return ExpensePage(
            expenses=[ExpenseRead.model_validate(e) for e in expenses],
            pagination=Pagination.build(page, limit, total),
        )

    def get_expense(self, session: Session, expense_id: uuid.UUID) -> ExpenseDetailRead:
        row = self.repo.get_expense_detail(session, expense_id)
        if not row:
            raise NotFoundError("Expense")
        expense, category_name, added_by_name = row
        return ExpenseDetailRead(
            **ExpenseRead.model_validate(expense).model_dump(),
            category_name=category_name,
            added_by_name=added_by_name,
        )

    def create_expense(
        self,
        session: Session,
        payload: ExpenseCreate,
        added_by: uuid.UUID,
    ) -> Expense:
        self._require_category(session, payload.category_id)
        data = payload.model_dump()
        data["title"] = sanitize_input(data["title"])
        if data.get("description"):
            data["description"] = sanitize_input(data["description"])
        expense = Expense(**data, added_by=added_by)
        return self.repo.create_expense(session, expense)

    def update_expense(
        self,
        session: Session,
        expense_id: uuid.UUID,
        payload: ExpenseUpdate,
    ) -> Expense:
        expense = self.repo.get_expense(session, expense_id)
        if not expense:
            raise NotFoundError("Expense")

        data = payload.model_dump(exclude_unset=True)
        # receipt and description may be cleared; the rest cannot be null
        for key in ("title", "amount", "category_id", "expense_date", "tags"):
            if key in data and data[key] is None:
                data.pop(key)

        if "category_id" in data:
            self._require_category(session, data["category_id"])
        if data.get("title"):
            data["title"] = sanitize_input(data["title"])
        if data.get("description"):
            data["description"] = sanitize_input(data["description"])

        for key, value in data.items():
            setattr(expense, key, value)
        expense.updated_at = datetime.now(timezone.utc)
        return self.repo.update_expense(session, expense)

    def delete_expense(self, session: Session, expense_id: uuid.UUID) -> None:
        expense = self.repo.get_expense(session, expense_id)
        if not expense:
            raise NotFoundError("Expense")
        self.repo.delete_expense(session, expense)

    def summary(
        self,
        session: Session,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> ExpenseSummary:
        rows = self.repo.totals_by_category(session, date_from=date_from, date_to=date_to)
        by_category = [
            ExpenseCategoryTotal(
                category_id=category_id,
                category_name=name,
                total=Decimal(str(total or 0)),
                count=count,
            )
            for category_id, name, total, count in rows
        ]
        return ExpenseSummary(
            total=sum((c.total for c in by_category), Decimal("0")),
            count=sum(c.count for c in by_category),
            by_category=by_category,
        )
