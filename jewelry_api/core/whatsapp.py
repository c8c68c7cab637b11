# jewelry_api/core/whatsapp.py
"""
WhatsApp click-to-chat links for orders.

Responsibilities:
  - Format the new-order message (sent to the business number) and the
    status-update message (sent to the customer).
  - Build https://wa.me/<phone>?text=<urlencoded message> links.

Nothing is pushed to WhatsApp from the server: the link is logged for
the shop and returned to the admin UI, which opens it.

Typical .env configuration:

    WHATSAPP_BUSINESS_PHONE=919876543210
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable
from urllib.parse import quote

from jewelry_api.models.order import Order, OrderItem

logger = logging.getLogger(__name__)

STATUS_MESSAGES: dict[str, str] = {
    "payment_pending": "Your jewelry order has been received. We will share payment details shortly.",
    "confirmed": "Your order has been confirmed! We're carefully preparing your jewelry pieces.",
    "processing": "Your jewelry is being crafted with attention to detail by our artisans.",
    "shipped": "Your jewelry order has been shipped! You'll receive tracking details soon.",
    "delivered": "Your jewelry order has been delivered! We hope you love your new pieces.",
    "cancelled": "Your order has been cancelled. Please contact us if you have any questions.",
}


@dataclass(frozen=True)
class WhatsAppLink:
    url: str
    message: str


def _money(value: Decimal) -> str:
    return f"{Decimal(value):.2f}"


def _item_lines(items: Iterable[OrderItem], with_totals: bool) -> str:
    lines = []
    for item in items:
        name = item.product_snapshot.get("name", "Item")
        code = item.product_snapshot.get("product_code")
        label = f"{name} ({code})" if code else name
        line = f"• {label} × {item.quantity}"
        if with_totals:
            line += f" - ₹{_money(item.total_price)}"
        lines.append(line)
    return "\n".join(lines)


def build_link(phone: str, message: str) -> WhatsAppLink:
    digits = "".join(ch for ch in phone if ch.isdigit())
    return WhatsAppLink(url=f"https://wa.me/{digits}?text={quote(message)}", message=message)


class WhatsAppNotifier:
    def __init__(self, business_phone: str):
        self.business_phone = business_phone

    def order_message(self, order: Order, items: list[OrderItem]) -> WhatsAppLink:
        """New-order message addressed to the shop's business number."""
        message = (
            "*New Jewelry Order*\n\n"
            f"*Order:* {order.order_code} ({order.order_number})\n"
            f"*Date:* {order.created_at:%d %b %Y %H:%M}\n\n"
            "*Customer Details:*\n"
            f"Name: {order.customer_name}\n"
            f"Phone: {order.customer_phone}\n"
            f"Address: {order.customer_address}\n\n"
            "*Items:*\n"
            f"{_item_lines(items, with_totals=True)}\n\n"
            f"*Total Amount: ₹{_money(order.total_amount)}*"
        )
        return build_link(self.business_phone, message)

    def status_message(
        self,
        order: Order,
        items: list[OrderItem],
        custom_message: str | None = None,
    ) -> WhatsAppLink:
        """Status-update message addressed to the customer."""
        if custom_message:
            return build_link(order.customer_phone, custom_message)

        status_label = order.status.replace("_", " ").title()
        message = (
            f"*Order Update - {order.order_code}*\n\n"
            f"Hi {order.customer_name}!\n\n"
            f"{STATUS_MESSAGES.get(order.status, '')}\n\n"
            "*Your Order:*\n"
            f"{_item_lines(items, with_totals=False)}\n\n"
            f"*Total: ₹{_money(order.total_amount)}*\n"
            f"*Status: {status_label}*"
        )
        return build_link(order.customer_phone, message)

    def notify_new_order(self, order: Order, items: list[OrderItem]) -> WhatsAppLink:
        """
        Post-creation hook of the order pipeline.

        Raises whatever link building raises; the caller decides that a
        notification failure must not undo the order.
        """
        if not self.business_phone:
            raise RuntimeError("WHATSAPP_BUSINESS_PHONE is not configured")
        link = self.order_message(order, items)
        logger.info("New order %s WhatsApp link: %s", order.order_code, link.url)
        return link
