# jewelry_api/services/product_service.py
import logging
import uuid
from datetime import datetime, timezone

from sqlmodel import Session

from jewelry_api.core.errors import NotFoundError, ValidationError
from jewelry_api.models.product import Product
from jewelry_api.repositories.product_repo import ProductRepository
from jewelry_api.schemas.common import Pagination
from jewelry_api.schemas.product import (
    ProductCreate,
    ProductPage,
    ProductRead,
    ProductUpdate,
)
from jewelry_api.services.code_service import CodeAllocator, is_valid_product_code

logger = logging.getLogger(__name__)


class ProductService:
    """
    Business logic for Product.

    Responsibilities:
      - product code allocation at creation (same transaction as the insert)
      - validation beyond pydantic (discount vs. merged price on update)
      - public visibility (inactive products are hidden)
    """

    def __init__(self, repo: ProductRepository, allocator: CodeAllocator):
        self.repo = repo
        self.allocator = allocator

    # ----- Public -----

    def list_public(
        self,
        session: Session,
        page: int = 1,
        limit: int = 20,
        product_type: str | None = None,
        search: str | None = None,
    ) -> ProductPage:
        return self._page(session, page, limit, product_type, True, search)

    def get_public(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product or not product.is_active:
            raise NotFoundError("Product")
        return product

    def get_public_by_code(self, session: Session, product_code: str) -> Product:
        product_code = product_code.strip().upper()
        if not is_valid_product_code(product_code):
            raise NotFoundError("Product")
        product = self.repo.get_by_code(session, product_code)
        if not product or not product.is_active:
            raise NotFoundError("Product")
        return product

    # ----- Admin operations -----

    def list_products(
        self,
        session: Session,
        page: int = 1,
        limit: int = 20,
        product_type: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> ProductPage:
        return self._page(session, page, limit, product_type, is_active, search)

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise NotFoundError("Product")
        return product

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        """
        Create a product and give it the next code of its type.

        The counter increment and the insert commit together; if the
        insert fails the code is not consumed.
        """
        try:
            code = self.allocator.allocate_product_code(session, payload.product_type)
            product = Product(product_code=code, **payload.model_dump())
            self.repo.add(session, product)
            session.commit()
        except Exception:
            session.rollback()
            raise

        session.refresh(product)
        logger.info("Created product %s (%s)", product.product_code, product.id)
        return product

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update.

        - product_code / product_type never change.
        - discounted_price <= price is checked on the merged result, so
          lowering the price below an existing discount is rejected.
        """
        product = self.get_product(session, product_id)
        data = payload.model_dump(exclude_unset=True)

        # only discounted_price may be cleared with an explicit null
        for key in ("name", "description", "price", "images", "is_active"):
            if key in data and data[key] is None:
                data.pop(key)

        price = data.get("price", product.price)
        discounted = data.get("discounted_price", product.discounted_price)
        if discounted is not None and discounted > price:
            raise ValidationError(
                "discounted_price must be less than or equal to price",
                details=[
                    {
                        "field": "discounted_price",
                        "message": "must be less than or equal to price",
                    }
                ],
            )

        for key, value in data.items():
            setattr(product, key, value)
        product.updated_at = datetime.now(timezone.utc)

        return self.repo.update(session, product)

    def delete_product(self, session: Session, product_id: uuid.UUID) -> None:
        """
        Hard delete. Order items keep their snapshot of the product.
        """
        product = self.get_product(session, product_id)
        code = product.product_code
        self.repo.delete(session, product)
        logger.info("Deleted product %s (%s)", code, product_id)

    # ----- Helpers -----

    def _page(
        self,
        session: Session,
        page: int,
        limit: int,
        product_type: str | None,
        is_active: bool | None,
        search: str | None,
    ) -> ProductPage:
        skip = (page - 1) * limit
        products = self.repo.list(
            session,
            skip=skip,
            limit=limit,
            product_type=product_type,
            is_active=is_active,
            search=search,
        )
        total = self.repo.count(
            session, product_type=product_type, is_active=is_active, search=search
        )
        return ProductPage(
            products=[ProductRead.model_validate(p) for p in products],
            pagination=Pagination.build(page, limit, total),
        )
