# jewelry_api/repositories/order_repo.py
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, or_
from sqlmodel import Session, delete, select

from jewelry_api.models.order import Order, OrderItem, OrderStatusHistory


class OrderRepository:
    """
    Data access layer for orders, order_items and order_status_history.

    NOTE:
      - No commits here; order creation is a multi-step transaction.
        The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def _filtered(
        self,
        stmt,
        status: str | None,
        search: str | None,
        date_from: datetime | None,
        date_to: datetime | None,
    ):
        if status:
            stmt = stmt.where(Order.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    Order.order_number.ilike(pattern),
                    Order.order_code.ilike(pattern),
                    Order.customer_name.ilike(pattern),
                    Order.customer_phone.ilike(pattern),
                )
            )
        if date_from:
            stmt = stmt.where(Order.created_at >= date_from)
        if date_to:
            stmt = stmt.where(Order.created_at <= date_to)
        return stmt

    def list_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
        search: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> list[Order]:
        stmt = self._filtered(select(Order), status, search, date_from, date_to)
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def count_orders(
        self,
        session: Session,
        status: str | None = None,
        search: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> int:
        stmt = self._filtered(
            select(func.count()).select_from(Order), status, search, date_from, date_to
        )
        return session.exec(stmt).one()

    def list_for_export(
        self,
        session: Session,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> list[Order]:
        stmt = self._filtered(select(Order), None, None, date_from, date_to)
        stmt = stmt.order_by(Order.created_at.desc())
        return session.exec(stmt).all()

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def get_by_code(self, session: Session, order_code: str) -> Order | None:
        stmt = select(Order).where(Order.order_code == order_code)
        return session.exec(stmt).first()

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()  # Assign PK
        session.refresh(order)
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    def delete_order(self, session: Session, order: Order) -> None:
        """
        Remove an order with its items and history rows.

        Children are deleted explicitly so the result does not depend on
        the database enforcing ON DELETE CASCADE.
        """
        session.exec(delete(OrderItem).where(OrderItem.order_id == order.id))
        session.exec(
            delete(OrderStatusHistory).where(OrderStatusHistory.order_id == order.id)
        )
        session.delete(order)
        session.flush()

    # ---- Order items ----

    def list_items_for_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[OrderItem]:
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.created_at)
        )
        return session.exec(stmt).all()

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        for item in items:
            session.refresh(item)
        return items

    # ---- Status history ----

    def add_history(
        self,
        session: Session,
        entry: OrderStatusHistory,
    ) -> OrderStatusHistory:
        session.add(entry)
        session.flush()
        return entry

    def list_history(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[OrderStatusHistory]:
        stmt = (
            select(OrderStatusHistory)
            .where(OrderStatusHistory.order_id == order_id)
            .order_by(OrderStatusHistory.created_at)
        )
        return session.exec(stmt).all()

    # ---- Stats ----

    def count_by_status(self, session: Session) -> dict[str, int]:
        stmt = select(Order.status, func.count()).group_by(Order.status)
        return {status: count for status, count in session.exec(stmt).all()}

    def revenue(self, session: Session, exclude_status: str = "cancelled") -> Decimal:
        stmt = select(func.coalesce(func.sum(Order.total_amount), 0)).where(
            Order.status != exclude_status
        )
        return Decimal(str(session.exec(stmt).one()))
