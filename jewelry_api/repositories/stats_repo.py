# jewelry_api/repositories/stats_repo.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func
from sqlmodel import Session, select

from jewelry_api.models.expense import Expense
from jewelry_api.models.order import Order, OrderItem
from jewelry_api.models.product import Product

CANCELLED = "cancelled"


class StatsRepository:
    """
    Read-only aggregated queries for the admin dashboard and analytics.

    Revenue never includes cancelled orders.
    """

    def count_active_products(self, session: Session) -> int:
        stmt = (
            select(func.count())
            .select_from(Product)
            .where(Product.is_active == True)  # noqa: E712
        )
        return int(session.exec(stmt).one() or 0)

    def count_orders(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Order)
        return int(session.exec(stmt).one() or 0)

    def revenue(
        self,
        session: Session,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Decimal:
        """
        Sum of total_amount for non-cancelled orders created in [start, end).
        """
        stmt = select(func.coalesce(func.sum(Order.total_amount), 0)).where(
            Order.status != CANCELLED
        )
        if start:
            stmt = stmt.where(Order.created_at >= start)
        if end:
            stmt = stmt.where(Order.created_at < end)
        return Decimal(str(session.exec(stmt).one()))

    def total_expenses(self, session: Session) -> Decimal:
        stmt = select(func.coalesce(func.sum(Expense.amount), 0))
        return Decimal(str(session.exec(stmt).one()))

    def order_amounts_since(
        self,
        session: Session,
        since: datetime,
    ) -> list[tuple[datetime, Decimal]]:
        """
        (created_at, total_amount) of non-cancelled orders; grouped by month
        in the service so the query stays portable across databases.
        """
        stmt = select(Order.created_at, Order.total_amount).where(
            Order.status != CANCELLED,
            Order.created_at >= since,
        )
        return list(session.exec(stmt).all())

    def expense_amounts_since(
        self,
        session: Session,
        since: datetime,
    ) -> list[tuple[datetime, Decimal]]:
        stmt = select(Expense.expense_date, Expense.amount).where(
            Expense.expense_date >= since
        )
        return list(session.exec(stmt).all())

    def top_products(self, session: Session, limit: int = 10) -> list[tuple]:
        """
        Rows of (product_id, quantity sold, revenue, order count), best
        revenue first.
        """
        revenue_sum = func.coalesce(func.sum(OrderItem.total_price), 0)
        stmt = (
            select(
                OrderItem.product_id,
                func.coalesce(func.sum(OrderItem.quantity), 0),
                revenue_sum,
                func.count(func.distinct(OrderItem.order_id)),
            )
            .join(Order, Order.id == OrderItem.order_id)
            .where(Order.status != CANCELLED)
            .group_by(OrderItem.product_id)
            .order_by(revenue_sum.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def latest_snapshots(
        self,
        session: Session,
        product_ids: list[uuid.UUID],
    ) -> dict[uuid.UUID, dict[str, Any]]:
        """
        Most recent product_snapshot per product id.

        Order items outlive their products, so names come from here.
        """
        if not product_ids:
            return {}
        stmt = (
            select(OrderItem.product_id, OrderItem.product_snapshot)
            .where(OrderItem.product_id.in_(product_ids))
            .order_by(OrderItem.created_at)
        )
        return {product_id: snapshot for product_id, snapshot in session.exec(stmt).all()}

    def latest_orders(self, session: Session, limit: int = 5) -> list[Order]:
        stmt = select(Order).order_by(Order.created_at.desc()).limit(limit)
        return list(session.exec(stmt).all())

    def first_item_snapshots(
        self,
        session: Session,
        order_ids: list[uuid.UUID],
    ) -> dict[uuid.UUID, dict[str, Any]]:
        """
        product_snapshot of the first line of each order.
        """
        if not order_ids:
            return {}
        stmt = (
            select(OrderItem.order_id, OrderItem.product_snapshot)
            .where(OrderItem.order_id.in_(order_ids))
            .order_by(OrderItem.created_at.desc())
        )
        # newest first, so the earliest line per order is written last
        return {order_id: snapshot for order_id, snapshot in session.exec(stmt).all()}
