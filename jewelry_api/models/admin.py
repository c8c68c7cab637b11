# jewelry_api/models/admin.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Admin(SQLModel, table=True):
    """
    Back-office account.

    Role:
      - "admin" | "super_admin"
      - only a super_admin may create admins or change roles.

    password_hash is an argon2id hash; the plain password is never stored.
    """

    __tablename__ = "admins"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    email: str = Field(
        max_length=255,
        unique=True,
        index=True,
    )

    password_hash: str = Field(max_length=255)

    name: str = Field(max_length=100)

    role: str = Field(
        default="admin",
        max_length=50,
        index=True,
        description="admin | super_admin",
    )

    last_login: datetime | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
