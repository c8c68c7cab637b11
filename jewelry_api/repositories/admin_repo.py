# jewelry_api/repositories/admin_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from jewelry_api.models.admin import Admin


class AdminRepository:
    """
    Data access layer for Admin.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    # ----- Basic CRUD -----

    def get_by_id(self, session: Session, admin_id: uuid.UUID) -> Admin | None:
        """Return an Admin by primary key, or None if not found."""
        return session.get(Admin, admin_id)

    def get_by_email(self, session: Session, email: str) -> Admin | None:
        """Case-insensitive lookup by email."""
        stmt = select(Admin).where(func.lower(Admin.email) == email.lower())
        return session.exec(stmt).first()

    def create(self, session: Session, admin: Admin) -> Admin:
        """Insert a new Admin and return the persisted row."""
        session.add(admin)
        session.commit()
        session.refresh(admin)
        return admin

    def update(self, session: Session, admin: Admin) -> Admin:
        """Persist changes to an existing Admin."""
        session.add(admin)
        session.commit()
        session.refresh(admin)
        return admin

    # ----- Queries -----

    def count_by_role(self, session: Session, role: str) -> int:
        stmt = select(func.count()).select_from(Admin).where(Admin.role == role)
        return session.exec(stmt).one()
