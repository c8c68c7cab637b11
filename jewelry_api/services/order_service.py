# jewelry_api/services/order_service.py
import csv
import io
import logging
import time
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Literal

from sqlmodel import Session

from jewelry_api.core.errors import BadRequestError, NotFoundError
from jewelry_api.core.recaptcha import RecaptchaVerifier
from jewelry_api.core.sanitize import sanitize_input
from jewelry_api.core.whatsapp import WhatsAppNotifier
from jewelry_api.models.order import Order, OrderItem, OrderStatusHistory
from jewelry_api.models.product import Product
from jewelry_api.repositories.order_repo import OrderRepository
from jewelry_api.repositories.product_repo import ProductRepository
from jewelry_api.schemas.common import Pagination, as_utc
from jewelry_api.schemas.order import (
    OrderItemRead,
    OrderPage,
    OrderRead,
    OrderReceipt,
    OrderStats,
    OrderTracking,
    OrderUpdate,
    OrderWithItemsRead,
    PublicOrderCreate,
    WhatsAppLinkRead,
)
from jewelry_api.services.code_service import CodeAllocator, is_valid_order_code

logger = logging.getLogger(__name__)

INITIAL_STATUS = "payment_pending"

# Allowed admin status transitions; delivered and cancelled are terminal
ORDER_STATUS_TRANSITIONS: dict[str, set[str]] = {
    "payment_pending": {"confirmed", "cancelled"},
    "confirmed": {"processing", "cancelled"},
    "processing": {"shipped", "cancelled"},
    "shipped": {"delivered", "cancelled"},
    "delivered": set(),
    "cancelled": set(),
}

PRODUCT_UNAVAILABLE_MESSAGE = (
    "One or more products are no longer available. "
    "Please ensure you are using valid product IDs from the backend API."
)

EXPORT_COLUMNS = [
    "Order Number",
    "Order Code",
    "Customer Name",
    "Phone",
    "Amount",
    "Status",
    "Payment Received",
    "Date",
]


def make_order_number() -> str:
    """Informational order number derived from the current time."""
    return f"ORD-{str(int(time.time() * 1000))[-8:]}"


def product_snapshot(product: Product) -> dict[str, Any]:
    """JSON copy of the product as the customer saw it."""
    return {
        "id": str(product.id),
        "product_code": product.product_code,
        "product_type": product.product_type,
        "name": product.name,
        "description": product.description,
        "price": str(product.price),
        "discounted_price": (
            str(product.discounted_price)
            if product.discounted_price is not None
            else None
        ),
        "images": list(product.images or []),
    }


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Public order intake: verify, sanitize, price against the current
        catalog, allocate an order code and write header + items in one
        transaction
      - Post-commit notification (never undoes the order)
      - Public tracking by order code
      - Admin listing, updates through the status state machine with a
        history trail, deletion and stats
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        allocator: CodeAllocator,
        notifier: WhatsAppNotifier,
        estimated_delivery: str = "5-7 business days",
    ):
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.allocator = allocator
        self.notifier = notifier
        self.estimated_delivery = estimated_delivery

    # -------- Public operations --------

    def create_public_order(
        self,
        session: Session,
        payload: PublicOrderCreate,
        verifier: RecaptchaVerifier,
        remote_ip: str | None = None,
    ) -> OrderReceipt:
        """
        Create an order from a public checkout.

        Steps:
          1. Human verification (when enabled).
          2. Sanitize free text.
          3. Resolve every product; any missing/inactive one aborts
             before anything is written.
          4. Price each line from the current catalog and snapshot it.
          5. Allocate the order code.
          6. Insert header + items, commit once. Any failure rolls back.
          7. Notify (after commit; failures are only logged).
          8. Return the receipt.
        """
        # 1) Human verification
        verifier.verify(payload.recaptcha_token, remote_ip)

        # 2) Sanitize
        customer_name = sanitize_input(payload.customer_name)
        customer_phone = sanitize_input(payload.customer_phone)
        customer_address = sanitize_input(payload.customer_address)
        customer_pincode = sanitize_input(payload.customer_pincode)
        if not customer_name or not customer_address:
            raise BadRequestError("Customer name and address are required")

        # 3) Resolve products
        product_map = self.product_repo.get_many(
            session, list({item.product_id for item in payload.items})
        )
        for item in payload.items:
            product = product_map.get(item.product_id)
            if product is None or not product.is_active:
                logger.warning(
                    "Order rejected: product %s is %s",
                    item.product_id,
                    "missing" if product is None else "inactive",
                )
                raise BadRequestError(PRODUCT_UNAVAILABLE_MESSAGE)

        # 4) Price lines
        total_amount = Decimal("0")
        lines: list[dict[str, Any]] = []
        for item in payload.items:
            product = product_map[item.product_id]
            unit_price = product.effective_price
            line_total = unit_price * item.quantity
            total_amount += line_total
            lines.append(
                {
                    "product_id": product.id,
                    "quantity": item.quantity,
                    "unit_price": unit_price,
                    "total_price": line_total,
                    "product_snapshot": product_snapshot(product),
                }
            )

        if total_amount <= 0:
            raise BadRequestError("Total order amount must be positive")

        # 5-6) Allocate + persist as one unit
        try:
            allocated = self.allocator.allocate_order_code(session)
            order = Order(
                order_number=make_order_number(),
                order_code=allocated.code,
                order_code_degraded=allocated.degraded,
                customer_name=customer_name,
                customer_phone=customer_phone,
                customer_address=f"{customer_address}, PIN: {customer_pincode}",
                total_amount=total_amount,
                status=INITIAL_STATUS,
                notes=None,
            )
            order = self.order_repo.create_order(session, order)

            items = self.order_repo.create_items(
                session,
                [OrderItem(order_id=order.id, **line) for line in lines],
            )
            session.commit()
        except Exception:
            session.rollback()
            logger.exception("Order creation failed, transaction rolled back")
            raise

        session.refresh(order)
        logger.info(
            "Created order %s (%s) total=%s items=%d",
            order.order_code,
            order.id,
            order.total_amount,
            len(items),
        )

        # 7) Notify
        try:
            self.notifier.notify_new_order(order, items)
        except Exception:
            logger.warning(
                "New-order notification failed for %s", order.order_code, exc_info=True
            )

        # 8) Receipt
        return OrderReceipt(
            order_number=order.order_number,
            order_code=order.order_code,
            total_amount=order.total_amount,
            estimated_delivery=self.estimated_delivery,
            status=order.status,
        )

    def track_order(self, session: Session, order_code: str) -> OrderTracking:
        """
        Public status lookup; exposes no customer data.
        """
        order_code = order_code.strip().upper()
        if not is_valid_order_code(order_code):
            raise NotFoundError("Order")
        order = self.order_repo.get_by_code(session, order_code)
        if not order:
            raise NotFoundError("Order")
        return OrderTracking(
            order_code=order.order_code,
            status=order.status,
            total_amount=order.total_amount,
            created_at=order.created_at,
        )

    # -------- Admin operations --------

    def list_orders(
        self,
        session: Session,
        page: int = 1,
        limit: int = 20,
        status: str | None = None,
        search: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> OrderPage:
        skip = (page - 1) * limit
        orders = self.order_repo.list_orders(
            session,
            skip=skip,
            limit=limit,
            status=status,
            search=search,
            date_from=date_from,
            date_to=date_to,
        )
        total = self.order_repo.count_orders(
            session,
            status=status,
            search=search,
            date_from=date_from,
            date_to=date_to,
        )
        return OrderPage(
            orders=[OrderRead.model_validate(o) for o in orders],
            pagination=Pagination.build(page, limit, total),
        )

    def get_order_admin(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        order = self._get_or_404(session, order_id)
        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_with_items_dto(order, items)

    def update_order(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderUpdate,
        changed_by: uuid.UUID | None = None,
    ) -> OrderWithItemsRead:
        """
        Admin partial update.

        Status transitions:

          payment_pending -> confirmed, cancelled
          confirmed       -> processing, cancelled
          processing      -> shipped, cancelled
          shipped         -> delivered, cancelled
          delivered       -> (terminal)
          cancelled       -> (terminal)

        Any other transition raises 400. Every status change writes an
        order_status_history row in the same transaction.
        """
        order = self._get_or_404(session, order_id)
        data = payload.model_dump(exclude_unset=True)

        new_status = data.pop("status", None)
        status_note = data.pop("status_note", None)

        try:
            if new_status is not None and new_status != order.status:
                current = order.status
                if new_status not in ORDER_STATUS_TRANSITIONS.get(current, set()):
                    raise BadRequestError(
                        f"Invalid status transition: {current} -> {new_status}",
                        details={
                            "current_status": current,
                            "allowed": sorted(ORDER_STATUS_TRANSITIONS.get(current, set())),
                        },
                    )
                order.status = new_status
                self.order_repo.add_history(
                    session,
                    OrderStatusHistory(
                        order_id=order.id,
                        old_status=current,
                        new_status=new_status,
                        changed_by=changed_by,
                        notes=status_note,
                    ),
                )
                logger.info(
                    "Order %s status %s -> %s by %s",
                    order.order_code,
                    current,
                    new_status,
                    changed_by,
                )

            for key in ("payment_received", "whatsapp_message_sent"):
                if data.get(key) is not None:
                    setattr(order, key, data[key])
            if "notes" in data:
                notes = data["notes"]
                order.notes = sanitize_input(notes) if notes else None

            order.updated_at = datetime.now(timezone.utc)
            self.order_repo.update_order(session, order)
            session.commit()
        except Exception:
            session.rollback()
            raise

        session.refresh(order)
        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_with_items_dto(order, items)

    def delete_order(self, session: Session, order_id: uuid.UUID) -> None:
        order = self._get_or_404(session, order_id)
        code = order.order_code
        try:
            self.order_repo.delete_order(session, order)
            session.commit()
        except Exception:
            session.rollback()
            raise
        logger.info("Deleted order %s (%s)", code, order_id)

    def list_history(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[OrderStatusHistory]:
        self._get_or_404(session, order_id)
        return self.order_repo.list_history(session, order_id)

    def get_stats(self, session: Session) -> OrderStats:
        """
        Order counts per status (every status present, zero-filled) and
        revenue over non-cancelled orders.
        """
        counts = {status: 0 for status in ORDER_STATUS_TRANSITIONS}
        counts.update(self.order_repo.count_by_status(session))
        return OrderStats(
            status_counts=counts,
            total_revenue=self.order_repo.revenue(session),
            total_orders=sum(counts.values()),
        )

    def export_orders_csv(
        self,
        session: Session,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> str:
        """
        CSV of orders (newest first) created in the optional date range.
        """
        orders = self.order_repo.list_for_export(session, date_from, date_to)

        out = io.StringIO()
        writer = csv.writer(out)
        writer.writerow(EXPORT_COLUMNS)
        for o in orders:
            writer.writerow(
                [
                    o.order_number,
                    o.order_code,
                    o.customer_name,
                    o.customer_phone,
                    f"{o.total_amount:.2f}",
                    o.status,
                    "yes" if o.payment_received else "no",
                    as_utc(o.created_at).date().isoformat(),
                ]
            )
        logger.info("Exported %d orders", len(orders))
        return out.getvalue()

    def whatsapp_link(
        self,
        session: Session,
        order_id: uuid.UUID,
        kind: Literal["status", "new_order"] = "status",
        custom_message: str | None = None,
    ) -> WhatsAppLinkRead:
        """
        Build a wa.me link for the order.

        kind="status"    -> status update addressed to the customer
        kind="new_order" -> order summary addressed to the business phone
        """
        order = self._get_or_404(session, order_id)
        items = self.order_repo.list_items_for_order(session, order.id)

        if kind == "new_order":
            if not self.notifier.business_phone:
                raise BadRequestError("WhatsApp business phone is not configured")
            link = self.notifier.order_message(order, items)
        else:
            link = self.notifier.status_message(order, items, custom_message)
        return WhatsAppLinkRead(url=link.url, message=link.message)

    # -------- Helpers --------

    def _get_or_404(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise NotFoundError("Order")
        return order

    def _build_order_with_items_dto(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        return OrderWithItemsRead(
            **OrderRead.model_validate(order).model_dump(),
            items=[OrderItemRead.model_validate(it) for it in items],
        )
