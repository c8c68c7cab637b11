# tests/conftest.py
import os

# Settings are read at import time: configure before importing the app.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-0123456789"
os.environ["ENVIRONMENT"] = "test"
os.environ["RECAPTCHA_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ARGON2_MEMORY_COST"] = "1024"
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["WHATSAPP_BUSINESS_PHONE"] = "919876543210"
os.environ.pop("BOOTSTRAP_ADMIN_EMAIL", None)

import itertools  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import func  # noqa: E402
from sqlmodel import Session, SQLModel, select  # noqa: E402

from jewelry_api.core.security import create_access_token, hash_password  # noqa: E402
from jewelry_api.database import build_engine, get_session  # noqa: E402
from jewelry_api.main import app  # noqa: E402
from jewelry_api.models.admin import Admin  # noqa: E402
from jewelry_api.models.product import Product  # noqa: E402
from jewelry_api.routers.admin_auth import login_limiter  # noqa: E402
from jewelry_api.routers.orders import order_limiter  # noqa: E402

ADMIN_PASSWORD = "Admin123!"

_codes = itertools.count(900)


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite://")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """
    Session for service-level tests.

    Do not hold it open across `client` calls: the in-memory database
    has a single connection.
    """
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    login_limiter.reset()
    order_limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()


def count_rows(engine, model) -> int:
    with Session(engine) as s:
        return s.exec(select(func.count()).select_from(model)).one()


@pytest.fixture
def make_product(engine):
    """
    Insert a product directly (codes CH9xx / BR9xx, outside the allocator's
    range used by the tests).
    """

    def _make(
        name: str = "Gold Chain",
        price: str = "100.00",
        discounted_price: str | None = None,
        product_type: str = "chain",
        is_active: bool = True,
        product_code: str | None = None,
    ) -> Product:
        prefix = "CH" if product_type == "chain" else "BR"
        product = Product(
            product_code=product_code or f"{prefix}{next(_codes)}",
            product_type=product_type,
            name=name,
            description=f"{name} description",
            price=Decimal(price),
            discounted_price=Decimal(discounted_price) if discounted_price else None,
            images=["https://img.example.com/1.jpg"],
            is_active=is_active,
        )
        with Session(engine, expire_on_commit=False) as s:
            s.add(product)
            s.commit()
        return product

    return _make


@pytest.fixture
def make_admin(engine):
    def _make(
        email: str = "admin@example.com",
        role: str = "admin",
        password: str = ADMIN_PASSWORD,
        name: str = "Shop Admin",
    ) -> Admin:
        admin = Admin(
            email=email,
            name=name,
            role=role,
            password_hash=hash_password(password),
        )
        with Session(engine, expire_on_commit=False) as s:
            s.add(admin)
            s.commit()
        return admin

    return _make


@pytest.fixture
def admin(make_admin) -> Admin:
    return make_admin()


@pytest.fixture
def super_admin(make_admin) -> Admin:
    return make_admin(email="owner@example.com", role="super_admin", name="Shop Owner")


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    token, _ = create_access_token(admin.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def super_admin_headers(super_admin) -> dict[str, str]:
    token, _ = create_access_token(super_admin.id)
    return {"Authorization": f"Bearer {token}"}


def order_payload(*items: tuple, **overrides) -> dict:
    """items: (product_id, quantity) pairs."""
    payload = {
        "customer_name": "Priya Sharma",
        "customer_phone": "9876543210",
        "customer_address": "12 MG Road, Indiranagar, Bengaluru",
        "customer_pincode": "560038",
        "items": [{"product_id": str(pid), "quantity": qty} for pid, qty in items],
    }
    payload.update(overrides)
    return payload
