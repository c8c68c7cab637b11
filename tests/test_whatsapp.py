# tests/test_whatsapp.py
from datetime import datetime, timezone
from decimal import Decimal
from urllib.parse import unquote

import pytest

from jewelry_api.core.whatsapp import WhatsAppNotifier, build_link
from jewelry_api.models.order import Order, OrderItem


@pytest.fixture
def order() -> Order:
    return Order(
        order_number="ORD-12345678",
        order_code="ORD007",
        customer_name="Priya Sharma",
        customer_phone="9876543210",
        customer_address="12 MG Road, Bengaluru, PIN: 560038",
        total_amount=Decimal("300.00"),
        status="shipped",
        created_at=datetime(2026, 3, 1, 10, 30, tzinfo=timezone.utc),
    )


@pytest.fixture
def items(order) -> list[OrderItem]:
    return [
        OrderItem(
            order_id=order.id,
            product_id=order.id,
            quantity=3,
            unit_price=Decimal("100.00"),
            total_price=Decimal("300.00"),
            product_snapshot={"name": "Rope Chain", "product_code": "CH004"},
        )
    ]


def test_build_link_strips_non_digits():
    link = build_link("+91 98765-43210", "Hello there")

    assert link.url == "https://wa.me/919876543210?text=Hello%20there"


def test_new_order_message(order, items):
    link = WhatsAppNotifier("919999999999").order_message(order, items)

    assert link.url.startswith("https://wa.me/919999999999?text=")
    assert "ORD007 (ORD-12345678)" in link.message
    assert "Rope Chain (CH004) × 3 - ₹300.00" in link.message
    assert "*Total Amount: ₹300.00*" in link.message
    assert unquote(link.url.split("text=", 1)[1]) == link.message


def test_status_message_goes_to_customer(order, items):
    link = WhatsAppNotifier("919999999999").status_message(order, items)

    assert link.url.startswith("https://wa.me/9876543210?text=")
    assert "has been shipped" in link.message
    assert "*Status: Shipped*" in link.message


def test_custom_status_message(order, items):
    link = WhatsAppNotifier("919999999999").status_message(order, items, "Ready for pickup")

    assert link.message == "Ready for pickup"


def test_notify_requires_business_phone(order, items):
    with pytest.raises(RuntimeError):
        WhatsAppNotifier("").notify_new_order(order, items)
