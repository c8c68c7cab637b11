# jewelry_api/repositories/product_repo.py
import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, select

from jewelry_api.models.product import Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    - add() only flushes: creation shares a transaction with code
      allocation, so the service commits.
    """

    # ----- Queries -----

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_by_code(self, session: Session, product_code: str) -> Product | None:
        stmt = select(Product).where(Product.product_code == product_code)
        return session.exec(stmt).first()

    def get_many(self, session: Session, product_ids: list[uuid.UUID]) -> dict[uuid.UUID, Product]:
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(product_ids))
        return {p.id: p for p in session.exec(stmt).all()}

    def _filtered(
        self,
        stmt,
        product_type: str | None,
        is_active: bool | None,
        search: str | None,
    ):
        if product_type:
            stmt = stmt.where(Product.product_type == product_type)
        if is_active is not None:
            stmt = stmt.where(Product.is_active == is_active)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    Product.name.ilike(pattern),
                    Product.product_code.ilike(pattern),
                    Product.description.ilike(pattern),
                )
            )
        return stmt

    def list(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        product_type: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> list[Product]:
        stmt = self._filtered(select(Product), product_type, is_active, search)
        stmt = stmt.order_by(Product.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def count(
        self,
        session: Session,
        product_type: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> int:
        stmt = self._filtered(
            select(func.count()).select_from(Product), product_type, is_active, search
        )
        return session.exec(stmt).one()

    # ----- Writes -----

    def add(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.flush()
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()
