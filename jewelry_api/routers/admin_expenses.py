# jewelry_api/routers/admin_expenses.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from jewelry_api.core.auth import get_current_admin
from jewelry_api.database import get_session
from jewelry_api.models.admin import Admin
from jewelry_api.repositories.expense_repo import ExpenseRepository
from jewelry_api.schemas.common import ApiResponse, UtcDatetime
from jewelry_api.schemas.expense import (
    ExpenseCategoryCreate,
    ExpenseCategoryRead,
    ExpenseCreate,
    ExpenseDetailRead,
    ExpensePage,
    ExpenseRead,
    ExpenseSummary,
    ExpenseUpdate,
)
from jewelry_api.services.expense_service import ExpenseService

router = APIRouter(
    prefix="/admin/expenses",
    tags=["Admin expenses"],
    dependencies=[Depends(get_current_admin)],
)

repo = ExpenseRepository()
service = ExpenseService(repo)


# -------- Categories --------


@router.get("/categories", response_model=ApiResponse[list[ExpenseCategoryRead]])
def list_categories(session: Session = Depends(get_session)):
    categories = service.list_categories(session)
    return ApiResponse(data=[ExpenseCategoryRead.model_validate(c) for c in categories])


@router.post(
    "/categories",
    response_model=ApiResponse[ExpenseCategoryRead],
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    payload: ExpenseCategoryCreate,
    session: Session = Depends(get_session),
):
    """Create a category; names are unique (case-insensitive)."""
    category = service.create_category(session, payload)
    return ApiResponse(
        data=ExpenseCategoryRead.model_validate(category),
        message="Category created successfully",
    )


# -------- Expenses --------


@router.get("", response_model=ApiResponse[ExpensePage])
def list_expenses(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category_id: uuid.UUID | None = None,
    date_from: UtcDatetime | None = None,
    date_to: UtcDatetime | None = None,
):
    return ApiResponse(
        data=service.list_expenses(
            session,
            page=page,
            limit=limit,
            category_id=category_id,
            date_from=date_from,
            date_to=date_to,
        )
    )


@router.get("/summary", response_model=ApiResponse[ExpenseSummary])
def expense_summary(
    session: Session = Depends(get_session),
    date_from: UtcDatetime | None = None,
    date_to: UtcDatetime | None = None,
):
    """Totals per category for the given period."""
    return ApiResponse(data=service.summary(session, date_from, date_to))


@router.post(
    "",
    response_model=ApiResponse[ExpenseRead],
    status_code=status.HTTP_201_CREATED,
)
def create_expense(
    payload: ExpenseCreate,
    session: Session = Depends(get_session),
    admin: Admin = Depends(get_current_admin),
):
    """Record an expense; added_by is the authenticated admin."""
    expense = service.create_expense(session, payload, added_by=admin.id)
    return ApiResponse(
        data=ExpenseRead.model_validate(expense),
        message="Expense created successfully",
    )


@router.patch("/{expense_id}", response_model=ApiResponse[ExpenseRead])
def update_expense(
    expense_id: uuid.UUID,
    payload: ExpenseUpdate,
    session: Session = Depends(get_session),
):
    expense = service.update_expense(session, expense_id, payload)
    return ApiResponse(
        data=ExpenseRead.model_validate(expense),
        message="Expense updated successfully",
    )


@router.delete("/{expense_id}", response_model=ApiResponse[None])
def delete_expense(
    expense_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    service.delete_expense(session, expense_id)
    return ApiResponse(message="Expense deleted successfully")


@router.get("/{expense_id}", response_model=ApiResponse[ExpenseDetailRead])
def get_expense(
    expense_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """Single expense with its category and the admin who recorded it."""
    return ApiResponse(data=service.get_expense(session, expense_id))
