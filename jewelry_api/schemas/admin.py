# jewelry_api/schemas/admin.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

AdminRole = Literal["admin", "super_admin"]


class LoginRequest(SQLModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class AdminProfile(SQLModel):
    """
    Admin representation returned to clients (never the hash).
    """

    id: uuid.UUID
    name: str
    email: str
    role: AdminRole
    last_login: datetime | None = None


class LoginResponse(BaseModel):
    token: str
    admin: AdminProfile
    expires_in: int


class ChangePasswordRequest(SQLModel):
    """
    The strength policy is applied by the service so the response can
    list every unmet rule.
    """

    model_config = ConfigDict(extra="forbid")

    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=1, max_length=128)


class AdminCreate(SQLModel):
    """
    Payload for creating an admin (super_admin only).

    role defaults to "admin".
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    name: str = Field(min_length=2, max_length=100)
    role: AdminRole = "admin"

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class AdminUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr | None = None
    name: str | None = Field(default=None, min_length=2, max_length=100)
    role: AdminRole | None = None


class PasswordValidationRequest(SQLModel):
    password: str = Field(max_length=128)


class PasswordValidationResult(BaseModel):
    is_valid: bool
    errors: list[str]
