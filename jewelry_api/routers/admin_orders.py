# jewelry_api/routers/admin_orders.py
import uuid
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response
from sqlmodel import Session

from jewelry_api.core.auth import get_current_admin
from jewelry_api.database import get_session
from jewelry_api.models.admin import Admin
from jewelry_api.routers.orders import service
from jewelry_api.schemas.common import ApiResponse, UtcDatetime
from jewelry_api.schemas.order import (
    OrderPage,
    OrderStats,
    OrderStatus,
    OrderStatusHistoryRead,
    OrderUpdate,
    OrderWithItemsRead,
    WhatsAppLinkRead,
)

router = APIRouter(
    prefix="/admin/orders",
    tags=["Admin orders"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=ApiResponse[OrderPage])
def list_orders(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: OrderStatus | None = None,
    search: str | None = Query(None, max_length=100),
    date_from: UtcDatetime | None = None,
    date_to: UtcDatetime | None = None,
):
    """
    List orders, newest first.

    Filters:
      - status
      - search: order number, order code, customer name or phone
      - date_from / date_to: creation time range
    """
    return ApiResponse(
        data=service.list_orders(
            session,
            page=page,
            limit=limit,
            status=status,
            search=search,
            date_from=date_from,
            date_to=date_to,
        )
    )


@router.get("/stats", response_model=ApiResponse[OrderStats])
def order_stats(session: Session = Depends(get_session)):
    """
    Counts by status and revenue (cancelled orders excluded).
    """
    return ApiResponse(data=service.get_stats(session))


@router.get(
    "/export",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}, "description": "Orders as CSV"}},
)
def export_orders(
    session: Session = Depends(get_session),
    date_from: UtcDatetime | None = None,
    date_to: UtcDatetime | None = None,
):
    """
    Download orders as CSV (newest first), optionally limited to a
    creation time range.
    """
    content = service.export_orders_csv(session, date_from, date_to)
    filename = f"orders_{datetime.now(timezone.utc).date().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{order_id}", response_model=ApiResponse[OrderWithItemsRead])
def get_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return ApiResponse(data=service.get_order_admin(session, order_id))


@router.patch("/{order_id}", response_model=ApiResponse[OrderWithItemsRead])
def update_order(
    order_id: uuid.UUID,
    payload: OrderUpdate,
    session: Session = Depends(get_session),
    admin: Admin = Depends(get_current_admin),
):
    """
    Update status, payment / WhatsApp flags or notes.

      payment_pending -> confirmed, cancelled

      confirmed -> processing, cancelled

      processing -> shipped, cancelled

      shipped -> delivered, cancelled

    """
    order = service.update_order(session, order_id, payload, changed_by=admin.id)
    return ApiResponse(data=order, message="Order updated successfully")


@router.delete("/{order_id}", response_model=ApiResponse[None])
def delete_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """Delete an order together with its items and history."""
    service.delete_order(session, order_id)
    return ApiResponse(message="Order deleted successfully")


@router.get(
    "/{order_id}/history",
    response_model=ApiResponse[list[OrderStatusHistoryRead]],
)
def order_history(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    history = service.list_history(session, order_id)
    return ApiResponse(
        data=[OrderStatusHistoryRead.model_validate(h) for h in history]
    )


@router.get("/{order_id}/whatsapp", response_model=ApiResponse[WhatsAppLinkRead])
def whatsapp_link(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    kind: Literal["status", "new_order"] = "status",
    message: str | None = Query(None, max_length=1000),
):
    """
    wa.me link for the order.

    - kind=status: status update to the customer (optional custom message)
    - kind=new_order: order summary to the business phone
    """
    return ApiResponse(data=service.whatsapp_link(session, order_id, kind, message))
